# fitcoach/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.database import get_session
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.auth import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ResetPasswordRequest,
    SendVerificationRequest,
    SignupRequest,
    SignupResponse,
    SupabaseVerifyResponse,
    TokenRequest,
    VerifyEmailResponse,
)
from fitcoach.services.auth_service import AuthService
from fitcoach.services.identity_service import IdentityProvider, get_identity_provider
from fitcoach.services.notification_service import (
    NotificationSender,
    get_notification_sender,
)

router = APIRouter(tags=["Auth"])

repo = UserRepository()


def get_auth_service(
    identity: IdentityProvider = Depends(get_identity_provider),
    notifier: NotificationSender = Depends(get_notification_sender),
) -> AuthService:
    return AuthService(repo, identity, notifier)


def public_base_url(request: Request) -> str:
    """
    Base URL for links in verification emails.
    PUBLIC_BASE_URL wins over the URL the request came in on.
    """
    return (get_settings().PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")


# -------- Signup --------


@router.post("/signup", response_model=SignupResponse)
def signup(
    payload: SignupRequest,
    request: Request,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Create an unverified account and email a verification link.

    Errors:
      - 400: email already registered / Supabase refused the sign-up
      - 500: database insert failed
    """
    return service.signup(session, payload, public_base_url(request))


@router.post("/auth/register", response_model=SignupResponse)
def register(
    payload: SignupRequest,
    request: Request,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Direct registration; same flow as /signup with password required."""
    if not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    return service.signup(session, payload, public_base_url(request))


# -------- Email verification --------


@router.post("/auth/verify-email", response_model=VerifyEmailResponse)
def verify_email(
    payload: TokenRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Consume a verification token (JSON variant)."""
    return service.verify_email(session, payload.token)


@router.get("/verify-email", response_class=RedirectResponse, status_code=302)
def verify_email_link(
    token: str | None = None,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Consume a verification token from the emailed link.

    Success redirects to the frontend with ?verified=1, whether or not the
    Supabase mirror step succeeded.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid token.",
        )
    service.verify_email(session, token)
    return RedirectResponse(
        url=f"{get_settings().FRONTEND_URL.rstrip('/')}/?verified=1",
        status_code=status.HTTP_302_FOUND,
    )


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    payload: EmailRequest,
    request: Request,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Issue a new token; the previous one stops working."""
    return service.resend_verification(session, payload.email, public_base_url(request))


@router.post("/send-verification-email", response_model=MessageResponse)
def send_verification_email(
    payload: SendVerificationRequest,
    request: Request,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Issue a new token for the row linked to a Supabase user id.
    The email goes to the address on the row.
    """
    return service.send_verification_for_supabase_user(
        session, payload.user_id, public_base_url(request)
    )


# -------- Session reconciliation / login --------


@router.post("/auth/supabase-verify", response_model=SupabaseVerifyResponse)
def supabase_verify(
    payload: TokenRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Map a Supabase session token to the application user.

    Errors:
      - 401: token rejected by Supabase
      - 404: no row by supabase id or email
      - 403: email not verified (checked after linking)
    """
    return service.supabase_verify(session, payload.token)


@router.post("/auth/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Password login through Supabase, gated on local verification."""
    return service.login(session, payload.email, payload.password)


# -------- Password reset --------


@router.post("/request-password-reset", response_model=MessageResponse)
def request_password_reset(
    payload: EmailRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """Same answer whether or not the email has an account."""
    return service.request_password_reset(session, payload.email)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    return service.reset_password(session, payload.token, payload.new_password)
