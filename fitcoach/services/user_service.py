# fitcoach/services/user_service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.user import UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for the authenticated user's own profile.

    Responsibilities:
      - enforce app rules (no email change, unique username)
      - orchestrate repository operations
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.

        Rules:
          - only fields present in the payload are touched
          - username must stay unique
        """
        changes = payload.model_dump(exclude_unset=True)

        new_username = changes.get("username")
        if new_username and new_username != current_user.username:
            if self.repo.get_by_username(session, new_username) is not None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Username is already taken",
                )

        for field, value in changes.items():
            setattr(current_user, field, value)

        try:
            return self.repo.update(session, current_user)
        except IntegrityError:
            # a concurrent request claimed the same username first
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username is already taken",
            )

    def delete_me(self, session: Session, current_user: User) -> None:
        """
        Soft delete: rows are never hard-deleted through normal flows.
        The account is rejected by the auth gate afterwards.
        """
        current_user.deleted_at = datetime.now(timezone.utc)
        self.repo.update(session, current_user)
        logger.info("Soft-deleted user %s", current_user.id)
