# fitcoach/repositories/user_repo.py
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from fitcoach.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic

    Mutations that must be race-safe (token consumption, account linking)
    are single conditional UPDATE statements scoped by the unique value,
    never read-modify-write on a previously fetched row.
    """

    # ----- Lookups -----

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def get_by_username(self, session: Session, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return session.exec(stmt).first()

    def get_by_supabase_id(self, session: Session, supabase_id: str) -> User | None:
        stmt = select(User).where(User.supabase_id == supabase_id)
        return session.exec(stmt).first()

    def get_by_verification_token(self, session: Session, token: str) -> User | None:
        stmt = select(User).where(User.email_verification_token == token)
        return session.exec(stmt).first()

    def get_by_reset_token(self, session: Session, token: str) -> User | None:
        stmt = select(User).where(User.password_reset_token == token)
        return session.exec(stmt).first()

    def get_by_stripe_customer_id(
        self, session: Session, customer_id: str
    ) -> User | None:
        stmt = select(User).where(User.stripe_customer_id == customer_id)
        return session.exec(stmt).first()

    # ----- Basic CRUD -----

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    # ----- Verification -----

    def set_verification_token(
        self, session: Session, user_id: int, token: str
    ) -> None:
        """
        Store a freshly issued verification token, overwriting any previous
        one, and reset the verified flag.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(email_verification_token=token, email_verified=False)
        )
        session.exec(stmt)
        session.commit()

    def consume_verification_token(self, session: Session, token: str) -> bool:
        """
        Flip email_verified and clear the token in one statement.

        The WHERE clause is the token itself, so of two concurrent attempts
        with the same token exactly one updates a row.

        Returns:
            True if a row was verified, False if the token matched nothing.
        """
        stmt = (
            update(User)
            .where(User.email_verification_token == token)
            .values(email_verified=True, email_verification_token=None)
        )
        result = session.exec(stmt)
        session.commit()
        return result.rowcount == 1

    # ----- Account linking -----

    def link_supabase_id(
        self, session: Session, user_id: int, supabase_id: str
    ) -> bool:
        """
        Attach a Supabase id to a row that has none yet.

        Idempotent: an already-linked row is left untouched. A unique
        violation (another request linked this id first) is rolled back and
        reported as False instead of raising.

        Returns:
            True if this call wrote the link, False otherwise.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.supabase_id.is_(None))
            .values(supabase_id=supabase_id)
        )
        try:
            result = session.exec(stmt)
            session.commit()
        except IntegrityError:
            session.rollback()
            return False
        return result.rowcount == 1

    # ----- Password reset -----

    def set_password_reset(
        self,
        session: Session,
        user_id: int,
        token: str,
        expires_at: datetime,
    ) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_reset_token=token, password_reset_token_expiry=expires_at)
        )
        session.exec(stmt)
        session.commit()

    def clear_password_reset(self, session: Session, user_id: int) -> None:
        """Drop token and expiry together."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_reset_token=None, password_reset_token_expiry=None)
        )
        session.exec(stmt)
        session.commit()
