# fitcoach/routers/users.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from fitcoach.core.auth import get_current_user, get_token_identity
from fitcoach.database import get_session
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.routers.auth import get_auth_service, public_base_url
from fitcoach.schemas.user import UserRead, UserUpdate
from fitcoach.services.auth_service import AuthService
from fitcoach.services.identity_service import IdentityUser
from fitcoach.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT and a verified email.
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Update the authenticated user's profile (partial update).

    Editable: first_name, last_name, phone, username.
    """
    return service.update_me(session, current_user, payload)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Soft delete the authenticated user's account."""
    service.delete_me(session, current_user)


@router.post("/sync", response_model=UserRead)
def sync_profile(
    request: Request,
    session: Session = Depends(get_session),
    identity_user: IdentityUser = Depends(get_token_identity),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Ensure an application row exists for the Supabase user in the JWT.

    Existing rows are returned (and linked by email if needed); otherwise an
    unverified row is created and a verification email is sent. This route
    does not require a verified email.
    """
    return auth_service.sync_profile(session, identity_user, public_base_url(request))
