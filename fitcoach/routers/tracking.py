# fitcoach/routers/tracking.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from fitcoach.core.auth import get_current_user
from fitcoach.database import get_session
from fitcoach.models.user import User
from fitcoach.repositories.tracking_repo import TrackingRepository
from fitcoach.schemas.tracking import (
    GoalCreate,
    GoalRead,
    MacroPlanCreate,
    MacroPlanRead,
    ProgressCreate,
    ProgressRead,
)
from fitcoach.services.tracking_service import TrackingService

router = APIRouter(tags=["Tracking"])

service = TrackingService(TrackingRepository())


# -------- Goals --------


@router.get("/goals", response_model=list[GoalRead])
def list_goals(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return service.list_goals(session, current_user)


@router.post("/goals", response_model=GoalRead)
def create_goal(
    payload: GoalCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return service.create_goal(session, current_user, payload)


# -------- Macro plans --------


@router.get("/macros", response_model=list[MacroPlanRead])
def list_macro_plans(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return service.list_macro_plans(session, current_user)


@router.post("/macros", response_model=MacroPlanRead)
def create_macro_plan(
    payload: MacroPlanCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Create a macro plan for one of the user's goals.
    Calorie percentages are derived from the gram targets.
    """
    return service.create_macro_plan(session, current_user, payload)


# -------- Progress --------


@router.get("/progress", response_model=list[ProgressRead])
def list_progress(
    goal_id: int | None = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Progress check-ins, newest first; optionally for one goal."""
    return service.list_progress(session, current_user, goal_id)


@router.post("/progress", response_model=ProgressRead)
def create_progress(
    payload: ProgressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return service.create_progress(session, current_user, payload)
