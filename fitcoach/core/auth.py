# fitcoach/core/auth.py
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.database import get_session
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.services.identity_service import IdentityUser
from fitcoach.services.reconciliation_service import ReconciliationService

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header is reported as our own
#   401 instead of FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)

reconciler = ReconciliationService(UserRepository())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase session JWT locally and return its claims.

    Checked: signature (SUPABASE_JWT_SECRET / SUPABASE_JWT_ALG) and exp.
    'aud' is skipped; Supabase issues "authenticated" and project-specific
    audiences.

    Raises:
        HTTPException(401): bad signature, malformed or expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def get_token_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> IdentityUser:
    """
    Resolve the Bearer token to an Identity Store user without touching the
    application table.

    Raises:
        HTTPException(401): missing header, bad token, or missing 'sub'.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization header",
        )

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub",
        )

    return IdentityUser(id=str(sub), email=payload.get("email"))


def get_current_user(
    identity_user: IdentityUser = Depends(get_token_identity),
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve the current application user from a Supabase JWT.

    Flow:
      1. Verify the JWT locally => sub (Supabase id) + email.
      2. Find the row by supabase_id, else by email (lazy link).
      3. Enforce the local verification gate and lifecycle flags.

    Raises:
        HTTPException(401): token problems.
        HTTPException(404): no application row for this account.
        HTTPException(403): unverified, blocked or deleted.
    """
    return reconciler.reconcile(session, identity_user)
