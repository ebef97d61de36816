# fitcoach/services/auth_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.core.tokens import (
    build_password_reset_url,
    build_verification_url,
    generate_token,
    is_expired,
    reset_expiry,
)
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.auth import (
    LoginResponse,
    MessageResponse,
    SignupRequest,
    SignupResponse,
    SignupUser,
    SupabaseVerifyResponse,
    VerifyEmailResponse,
    VerifyEmailUser,
)
from fitcoach.services.identity_service import (
    IdentityError,
    IdentityProvider,
    IdentityUser,
)
from fitcoach.services.notification_service import NotificationSender
from fitcoach.services.reconciliation_service import (
    ReconciliationService,
    normalize_email,
)

logger = logging.getLogger(__name__)

INVALID_VERIFICATION_TOKEN = "Invalid or expired verification token"
INVALID_RESET_TOKEN = "Invalid or expired token"
PASSWORD_RESET_SENT = (
    "If an account with that email exists, a password reset email has been sent."
)
MIN_PASSWORD_LENGTH = 6


class AuthService:
    """
    Signup, email verification, reconciliation and password reset.

    State transitions (token consumption, verified flag, reset clearing) are
    committed first. Emails and Supabase mirror/link calls run afterwards as
    best-effort effects: failures are logged and never undo the transition.
    """

    def __init__(
        self,
        repo: UserRepository,
        identity: IdentityProvider,
        notifier: NotificationSender,
    ):
        self.repo = repo
        self.identity = identity
        self.notifier = notifier
        self.reconciler = ReconciliationService(repo)

    # ----- Signup -----

    def signup(
        self,
        session: Session,
        payload: SignupRequest,
        base_url: str,
    ) -> SignupResponse:
        """
        Create the application row (unverified) and email a verification link.

        Steps:
          1. Reject an email that already has a row.
          2. Create the Supabase Auth user if the browser did not.
          3. Insert the row with a fresh verification token.
          4. Send the verification email (best-effort).
        """
        email = normalize_email(payload.email)

        if self.repo.get_by_email(session, email) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists. Please sign in instead.",
            )

        supabase_id = payload.supabase_id
        if supabase_id is None and payload.password:
            try:
                supabase_id = self.identity.sign_up(email, payload.password).id
            except IdentityError as e:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=str(e),
                )

        local_part = email.split("@", 1)[0]
        token = generate_token()
        user = User(
            username=self.unique_username(session, payload.username or local_part),
            email=email,
            first_name=payload.first_name or payload.username or local_part,
            last_name=payload.last_name,
            supabase_id=supabase_id,
            email_verification_token=token,
            email_verified=False,
            subscription_tier="free",
            subscription_status="inactive",
        )

        try:
            user = self.repo.create(session, user)
        except IntegrityError:
            session.rollback()
            logger.exception("User insert failed during signup")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to insert user in database",
            )

        logger.info("Created user %s (supabase linked: %s)", user.id, bool(supabase_id))
        self._send_verification_email(email, build_verification_url(base_url, token))

        return SignupResponse(
            message="Signup successful. Please check your email to verify your account.",
            user=SignupUser(email=email, email_verified=False),
        )

    def unique_username(self, session: Session, desired: str) -> str:
        """desired, desired_1, desired_2, ... first free one."""
        base = desired.strip() or "user"
        candidate = base
        counter = 1
        while self.repo.get_by_username(session, candidate) is not None:
            candidate = f"{base}_{counter}"
            counter += 1
        return candidate

    # ----- Verification token issuance -----

    def issue_verification(self, session: Session, user: User, base_url: str) -> str:
        """
        Overwrite the user's verification token with a new one and email it.
        Any previously issued token stops matching immediately.
        """
        token = generate_token()
        self.repo.set_verification_token(session, user.id, token)
        self._send_verification_email(user.email, build_verification_url(base_url, token))
        return token

    def resend_verification(
        self, session: Session, email: str, base_url: str
    ) -> MessageResponse:
        """
        Re-issue a verification token. Works for verified rows too: the new
        token replaces the old one and the row is unverified until it is used.
        """
        user = self._require_user(self.repo.get_by_email(session, normalize_email(email)))
        self.issue_verification(session, user, base_url)
        return MessageResponse(message="Verification email resent successfully")

    def send_verification_for_supabase_user(
        self, session: Session, supabase_id: str, base_url: str
    ) -> MessageResponse:
        user = self._require_user(self.repo.get_by_supabase_id(session, supabase_id))
        self.issue_verification(session, user, base_url)
        return MessageResponse(message="Verification email sent")

    def _require_user(self, user: User | None) -> User:
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    # ----- Token verification -----

    def verify_email(self, session: Session, token: str | None) -> VerifyEmailResponse:
        """
        Consume a verification token.

        Steps:
          1. Find the row holding the token (400 if none).
          2. Set email_verified and clear the token in one UPDATE scoped by
             the token; a concurrent duplicate finds zero rows (400).
          3. If the row has no supabase_id, discover one by email and link.
          4. Mirror confirmation into Supabase (best-effort).
          5. Send the welcome email (best-effort).
        """
        if not token:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Verification token is required",
            )

        user = self.repo.get_by_verification_token(session, token)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=INVALID_VERIFICATION_TOKEN,
            )

        user_id = user.id
        email = user.email
        supabase_id = user.supabase_id

        if not self.repo.consume_verification_token(session, token):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=INVALID_VERIFICATION_TOKEN,
            )
        logger.info("Email verified for user %s", user_id)

        if supabase_id is None:
            supabase_id = self._discover_and_link(session, user_id, email)

        if supabase_id is not None:
            self._mirror_confirmation(supabase_id)
        else:
            logger.info("No Supabase account to mirror verification for user %s", user_id)

        user = self.repo.get_by_id(session, user_id)
        self._send_welcome_email(user)

        return VerifyEmailResponse(
            message="Email verified successfully",
            user=VerifyEmailUser(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                email_verified=user.email_verified,
            ),
        )

    def _discover_and_link(self, session: Session, user_id: int, email: str) -> str | None:
        try:
            found = self.identity.find_user_id_by_email(email)
        except Exception:
            logger.exception("Supabase user lookup failed for user %s", user_id)
            return None

        if found is None:
            return None

        if self.repo.link_supabase_id(session, user_id, found):
            logger.info("Linked Supabase account to user %s during verification", user_id)
            return found

        # Someone else wrote the link (or the id belongs to another row).
        user = self.repo.get_by_id(session, user_id)
        return user.supabase_id if user else None

    # ----- Reconciliation / login -----

    def supabase_verify(self, session: Session, token: str | None) -> SupabaseVerifyResponse:
        if not token:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Token required",
            )

        identity_user = self.identity.get_user(token)
        if identity_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            )

        user = self.reconciler.reconcile(session, identity_user)
        return SupabaseVerifyResponse(
            verified=True, user=self.reconciler.to_auth_user(user)
        )

    def login(self, session: Session, email: str, password: str) -> LoginResponse:
        identity_user = self.identity.sign_in(normalize_email(email), password)
        if identity_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        user = self.reconciler.reconcile(session, identity_user)
        return LoginResponse(user=self.reconciler.to_auth_user(user))

    def sync_profile(
        self,
        session: Session,
        identity_user: IdentityUser,
        base_url: str,
    ) -> User:
        """
        Get-or-link-or-create the row for a Supabase user.

        Used by clients that created the Supabase account through another
        path (OAuth, dashboard invite). No verification gate here: a freshly
        created row starts unverified and receives a verification email.
        """
        try:
            return self.reconciler.resolve_user(session, identity_user)
        except HTTPException as e:
            if e.status_code != status.HTTP_404_NOT_FOUND or not identity_user.email:
                raise

        email = normalize_email(identity_user.email)
        local_part = email.split("@", 1)[0]
        user = User(
            username=self.unique_username(session, local_part),
            email=email,
            first_name=local_part,
            supabase_id=identity_user.id,
        )
        try:
            user = self.repo.create(session, user)
        except IntegrityError:
            # Lost a race with a concurrent sync/signup; the winner's row stands.
            session.rollback()
            return self.reconciler.resolve_user(session, identity_user)

        self.issue_verification(session, user, base_url)
        return self.repo.get_by_id(session, user.id)

    # ----- Password reset -----

    def request_password_reset(self, session: Session, email: str) -> MessageResponse:
        """
        Always answers with the same message so callers cannot probe which
        emails have accounts.
        """
        settings = get_settings()
        user = self.repo.get_by_email(session, normalize_email(email))
        if user is None:
            return MessageResponse(message=PASSWORD_RESET_SENT)

        token = generate_token()
        self.repo.set_password_reset(
            session,
            user.id,
            token,
            reset_expiry(settings.PASSWORD_RESET_TTL_MINUTES),
        )

        reset_url = build_password_reset_url(settings.FRONTEND_URL, token)
        try:
            self.notifier.send_password_reset_email(user.email, reset_url, user.first_name)
        except Exception:
            logger.exception("Failed to send password reset email for user %s", user.id)

        return MessageResponse(message=PASSWORD_RESET_SENT)

    def reset_password(
        self,
        session: Session,
        token: str | None,
        new_password: str | None,
    ) -> MessageResponse:
        """
        Apply a new password using a reset token.

        An expired token is rejected exactly like an unknown one. The token
        is cleared only after Supabase accepted the new password.
        """
        if not token or not new_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing token or new password",
            )
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )

        user = self.repo.get_by_reset_token(session, token)
        if user is None or is_expired(user.password_reset_token_expiry):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=INVALID_RESET_TOKEN,
            )

        user_id = user.id
        supabase_id = user.supabase_id or self._discover_and_link(session, user_id, user.email)
        if supabase_id is None:
            logger.error("Password reset for user %s has no Supabase account", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update password",
            )

        try:
            self.identity.update_password(supabase_id, new_password)
        except Exception:
            logger.exception("Supabase password update failed for user %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update password",
            )

        self.repo.clear_password_reset(session, user_id)
        logger.info("Password reset completed for user %s", user_id)
        return MessageResponse(message="Password successfully updated")

    # ----- Best-effort effects -----

    def _send_verification_email(self, email: str, verification_url: str) -> None:
        try:
            self.notifier.send_verification_email(email, verification_url)
        except Exception:
            logger.exception("Failed to send verification email")

    def _send_welcome_email(self, user: User) -> None:
        try:
            self.notifier.send_welcome_email(user.email, user.first_name)
        except Exception:
            logger.exception("Failed to send welcome email for user %s", user.id)

    def _mirror_confirmation(self, supabase_id: str) -> None:
        try:
            self.identity.confirm_email(supabase_id)
        except Exception:
            logger.exception("Failed to mirror email confirmation to Supabase")
