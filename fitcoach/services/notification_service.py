# fitcoach/services/notification_service.py
from functools import lru_cache

from fitcoach.core import email_client
from fitcoach.core.config import get_settings
from fitcoach.services import email_templates


class NotificationSender:
    """
    Transactional emails.

    Every send_* method raises on delivery failure; callers that treat the
    email as a best-effort side effect catch and log.
    """

    def __init__(self, send=email_client.send_email):
        self._send = send

    def send_verification_email(self, to_email: str, verification_url: str) -> None:
        subject, html = email_templates.verification_email(verification_url)
        self._send(to_email, subject, html)

    def send_password_reset_email(
        self, to_email: str, reset_url: str, first_name: str | None
    ) -> None:
        subject, html = email_templates.password_reset_email(reset_url, first_name or "there")
        self._send(to_email, subject, html)

    def send_welcome_email(self, to_email: str, first_name: str | None) -> None:
        subject, html = email_templates.welcome_email(
            first_name or "there", get_settings().FRONTEND_URL
        )
        self._send(to_email, subject, html)

    def send_subscription_confirmation_email(
        self,
        to_email: str,
        first_name: str | None,
        plan_name: str,
        amount: str,
    ) -> None:
        subject, html = email_templates.subscription_email(
            first_name or "there", plan_name, amount, get_settings().FRONTEND_URL
        )
        self._send(to_email, subject, html)


@lru_cache
def get_notification_sender() -> NotificationSender:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return NotificationSender()
