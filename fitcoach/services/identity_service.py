# fitcoach/services/identity_service.py
"""
Identity Store adapter (Supabase Auth).

The rest of the backend only talks to Supabase through IdentityProvider so
that routers can inject a fake in tests and so that the Supabase SDK surface
stays in one place.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from supabase import Client, create_client

from fitcoach.core.config import get_settings

logger = logging.getLogger(__name__)

LIST_USERS_PAGE_SIZE = 1000


@lru_cache
def anon_client() -> Client:
    """Anon-key client: password sign-in and backend-driven sign-up."""
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


@lru_cache
def service_role_client() -> Client:
    """
    Service-role client for the admin Auth API (session lookup, email
    confirmation, user listing, password updates). Backend only.

    Raises:
        RuntimeError: SUPABASE_SERVICE_ROLE_KEY is not configured.
    """
    settings = get_settings()
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is required for Supabase admin calls")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


class IdentityError(Exception):
    """Raised when the Identity Store rejects an operation we depend on."""


@dataclass(frozen=True)
class IdentityUser:
    """Minimal view of a Supabase Auth user."""

    id: str
    email: str | None
    email_confirmed_at: str | None = None


def _to_identity_user(user) -> IdentityUser:
    confirmed = getattr(user, "email_confirmed_at", None)
    return IdentityUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        email_confirmed_at=str(confirmed) if confirmed else None,
    )


class IdentityProvider:
    """
    Supabase-backed identity operations.

    Clients are resolved lazily on first use; both factories are cached, so
    every call reuses the same SDK client for the life of the process.
    """

    def __init__(self, admin_factory=service_role_client, public_factory=anon_client):
        self._admin_factory = admin_factory
        self._public_factory = public_factory

    @property
    def admin(self) -> Client:
        return self._admin_factory()

    @property
    def public(self) -> Client:
        return self._public_factory()

    # ----- Session / credentials -----

    def get_user(self, access_token: str) -> IdentityUser | None:
        """
        Resolve a Supabase session access token.

        Returns:
            The Auth user, or None if the token is invalid/expired.
        """
        try:
            response = self.admin.auth.get_user(access_token)
        except Exception:
            logger.warning("Supabase rejected session token", exc_info=True)
            return None

        if response is None or response.user is None:
            return None
        return _to_identity_user(response.user)

    def sign_in(self, email: str, password: str) -> IdentityUser | None:
        """Password sign-in. Returns None on bad credentials."""
        try:
            response = self.public.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception:
            logger.info("Supabase password sign-in failed", exc_info=True)
            return None

        if response.user is None:
            return None
        return _to_identity_user(response.user)

    def sign_up(self, email: str, password: str) -> IdentityUser:
        """
        Create an Auth user.

        Raises:
            IdentityError: carrying the provider's message.
        """
        try:
            response = self.public.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise IdentityError(str(e) or "Failed to create user account") from e

        if response.user is None:
            raise IdentityError("Failed to create user account")
        return _to_identity_user(response.user)

    # ----- Admin operations -----

    def find_user_id_by_email(self, email: str) -> str | None:
        """Scan Auth users page by page for a matching email."""
        target = email.strip().lower()
        page = 1
        while True:
            users = self.admin.auth.admin.list_users(
                page=page, per_page=LIST_USERS_PAGE_SIZE
            )
            for user in users or []:
                if (getattr(user, "email", None) or "").lower() == target:
                    return str(user.id)
            if not users or len(users) < LIST_USERS_PAGE_SIZE:
                return None
            page += 1

    def confirm_email(self, supabase_id: str) -> None:
        """Mirror local verification into Supabase's email_confirm flag."""
        self.admin.auth.admin.update_user_by_id(supabase_id, {"email_confirm": True})

    def update_password(self, supabase_id: str, password: str) -> None:
        self.admin.auth.admin.update_user_by_id(supabase_id, {"password": password})


@lru_cache
def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return IdentityProvider()
