# fitcoach/services/reconciliation_service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.auth import AuthUser
from fitcoach.services.identity_service import IdentityUser

logger = logging.getLogger(__name__)

UNVERIFIED_MESSAGE = "Please verify your email before logging in."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class ReconciliationService:
    """
    Maps an Identity Store user onto the canonical application row.

    The local users table is the source of truth for authorization; Supabase
    only vouches for credentials. Linking is lazy: the first request that
    needs both records writes users.supabase_id, keyed by email.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def resolve_user(self, session: Session, identity_user: IdentityUser) -> User:
        """
        Find the row for a verified Identity Store user.

        Flow:
          1. Lookup by supabase_id.
          2. Fallback: lookup by email; link supabase_id if the row has none.
             A concurrent link (unique violation) counts as success.

        Raises:
            HTTPException(404): if neither lookup matches.
        """
        user = self.repo.get_by_supabase_id(session, identity_user.id)
        if user is not None:
            return user

        if not identity_user.email:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        user = self.repo.get_by_email(session, normalize_email(identity_user.email))
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        if user.supabase_id is None:
            user_id = user.id
            if self.repo.link_supabase_id(session, user_id, identity_user.id):
                logger.info("Linked Supabase account to user %s", user_id)
            else:
                logger.info("Supabase link for user %s already written elsewhere", user_id)
            user = self.repo.get_by_id(session, user_id)
        elif user.supabase_id != identity_user.id:
            logger.warning(
                "User %s matched by email but is linked to a different Supabase account",
                user.id,
            )

        return user

    def enforce_access(self, user: User) -> User:
        """
        Gate on the local verification flag, then lifecycle flags.

        Raises:
            HTTPException(403): unverified, blocked or soft-deleted.
        """
        if not user.email_verified:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=UNVERIFIED_MESSAGE,
            )
        if user.is_blocked or user.deleted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        return user

    def reconcile(self, session: Session, identity_user: IdentityUser) -> User:
        """resolve_user + enforce_access; the gate runs after linking."""
        return self.enforce_access(self.resolve_user(session, identity_user))

    def to_auth_user(self, user: User) -> AuthUser:
        settings = get_settings()
        message_count = (
            user.daily_message_count if user.last_message_date == today_iso() else 0
        )
        return AuthUser(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            subscription_status=user.subscription_status,
            subscription_tier=user.subscription_tier,
            email_verified=user.email_verified,
            message_count=message_count,
            max_messages=(
                settings.FREE_DAILY_MESSAGE_LIMIT
                if user.subscription_tier == "free"
                else None
            ),
        )
