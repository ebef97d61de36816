# fitcoach/services/billing_service.py
import logging
from typing import Any

import stripe
from fastapi import HTTPException, status
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.billing import CheckoutResponse
from fitcoach.services.notification_service import NotificationSender

logger = logging.getLogger(__name__)

# Monthly checkout prices, in cents.
PLANS: dict[str, dict[str, Any]] = {
    "premium": {
        "name": "FitlyAI Premium",
        "description": "Unlimited AI messages + full dashboard access",
        "unit_amount": 1499,
    },
    "pro": {
        "name": "FitlyAI Pro",
        "description": "Everything + full macro/calorie tracking",
        "unit_amount": 1999,
    },
}


def _require_stripe() -> None:
    settings = get_settings()
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Billing is not configured",
        )
    stripe.api_key = settings.STRIPE_SECRET_KEY


class BillingService:
    """
    Stripe Checkout + webhook handling.

    The webhook is the only writer of subscription_status / subscription_tier.
    """

    def __init__(self, repo: UserRepository, notifier: NotificationSender):
        self.repo = repo
        self.notifier = notifier

    def create_checkout_session(
        self, user: User, tier: str, origin: str
    ) -> CheckoutResponse:
        plan = PLANS.get(tier)
        if plan is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid price tier. Must be 'premium' or 'pro'",
            )
        _require_stripe()

        try:
            checkout = stripe.checkout.Session.create(
                payment_method_types=["card"],
                mode="subscription",
                line_items=[
                    {
                        "price_data": {
                            "currency": "usd",
                            "product_data": {
                                "name": plan["name"],
                                "description": plan["description"],
                            },
                            "unit_amount": plan["unit_amount"],
                            "recurring": {"interval": "month"},
                        },
                        "quantity": 1,
                    }
                ],
                success_url=f"{origin}/subscription-success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/",
                customer_email=user.email,
                metadata={"user_id": str(user.id), "tier": tier},
            )
        except stripe.StripeError:
            logger.exception("Stripe checkout session creation failed for user %s", user.id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Error creating checkout session",
            )

        return CheckoutResponse(session_id=checkout.id, url=checkout.url)

    def construct_event(self, payload: bytes, signature: str | None) -> Any:
        """
        Verify the Stripe-Signature header and parse the event.

        Raises:
            HTTPException(400): bad signature or payload.
        """
        settings = get_settings()
        if not settings.STRIPE_WEBHOOK_SECRET:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Billing is not configured",
            )
        try:
            return stripe.Webhook.construct_event(
                payload, signature or "", settings.STRIPE_WEBHOOK_SECRET
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Rejected Stripe webhook: %s", e)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Webhook Error: {e}",
            )

    def handle_event(self, session: Session, event: Any) -> None:
        event_type = event["type"]
        obj = event["data"]["object"]

        if event_type == "checkout.session.completed":
            self._on_checkout_completed(session, obj)
        elif event_type == "customer.subscription.updated":
            self._on_subscription_updated(session, obj)
        elif event_type == "customer.subscription.deleted":
            self._on_subscription_deleted(session, obj)
        else:
            logger.info("Unhandled Stripe event type %s", event_type)

    # ----- Event handlers -----

    def _on_checkout_completed(self, session: Session, obj: Any) -> None:
        metadata = obj.get("metadata") or {}
        tier = metadata.get("tier")
        try:
            user_id = int(metadata.get("user_id") or 0)
        except ValueError:
            user_id = 0

        user = self.repo.get_by_id(session, user_id) if user_id else None
        if user is None or tier not in PLANS:
            logger.warning("checkout.session.completed without a usable user/tier")
            return

        user.subscription_status = "active"
        user.subscription_tier = tier
        user.stripe_customer_id = obj.get("customer")
        user.stripe_subscription_id = obj.get("subscription")
        user = self.repo.update(session, user)
        logger.info("Activated %s subscription for user %s", tier, user.id)

        try:
            self.notifier.send_subscription_confirmation_email(
                user.email,
                user.first_name,
                "Pro" if tier == "pro" else "Premium",
                f"{PLANS[tier]['unit_amount'] / 100:.2f}",
            )
        except Exception:
            logger.exception("Failed to send subscription email for user %s", user.id)

    def _on_subscription_updated(self, session: Session, obj: Any) -> None:
        user = self._user_for_customer(session, obj)
        if user is None:
            return
        stripe_status = obj.get("status")
        if stripe_status == "past_due":
            user.subscription_status = "past_due"
        elif stripe_status == "active":
            user.subscription_status = "active"
        else:
            return
        self.repo.update(session, user)

    def _on_subscription_deleted(self, session: Session, obj: Any) -> None:
        user = self._user_for_customer(session, obj)
        if user is None:
            return
        user.subscription_status = "cancelled"
        user.subscription_tier = "free"
        self.repo.update(session, user)
        logger.info("Cancelled subscription for user %s", user.id)

    def _user_for_customer(self, session: Session, obj: Any) -> User | None:
        customer = obj.get("customer")
        if not customer:
            return None
        user = self.repo.get_by_stripe_customer_id(session, customer)
        if user is None:
            logger.warning("Stripe event for unknown customer")
        return user
