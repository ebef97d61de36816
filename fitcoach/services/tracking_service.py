# fitcoach/services/tracking_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from fitcoach.models.tracking import MacroPlan, ProgressEntry, UserGoal
from fitcoach.models.user import User
from fitcoach.repositories.tracking_repo import TrackingRepository
from fitcoach.schemas.tracking import GoalCreate, MacroPlanCreate, ProgressCreate


def macro_percentages(calories: int, protein: int, carbs: int, fats: int) -> tuple[int, int, int]:
    """
    Share of calories from each macro (4 kcal/g protein and carbs, 9 kcal/g fat).
    """
    return (
        round(protein * 4 / calories * 100),
        round(carbs * 4 / calories * 100),
        round(fats * 9 / calories * 100),
    )


class TrackingService:
    """Goals, macro plans and progress check-ins scoped to the current user."""

    def __init__(self, repo: TrackingRepository):
        self.repo = repo

    def list_goals(self, session: Session, user: User) -> list[UserGoal]:
        return self.repo.list_goals(session, user.id)

    def create_goal(self, session: Session, user: User, payload: GoalCreate) -> UserGoal:
        goal = UserGoal(user_id=user.id, **payload.model_dump())
        return self.repo.create(session, goal)

    def list_macro_plans(self, session: Session, user: User) -> list[MacroPlan]:
        return self.repo.list_macro_plans(session, user.id)

    def create_macro_plan(
        self, session: Session, user: User, payload: MacroPlanCreate
    ) -> MacroPlan:
        self._get_own_goal(session, user, payload.goal_id)
        protein_pct, carb_pct, fat_pct = macro_percentages(
            payload.daily_calories,
            payload.protein_grams,
            payload.carb_grams,
            payload.fat_grams,
        )
        plan = MacroPlan(
            user_id=user.id,
            protein_percent=protein_pct,
            carb_percent=carb_pct,
            fat_percent=fat_pct,
            **payload.model_dump(),
        )
        return self.repo.create(session, plan)

    def list_progress(
        self, session: Session, user: User, goal_id: int | None = None
    ) -> list[ProgressEntry]:
        return self.repo.list_progress(session, user.id, goal_id)

    def create_progress(
        self, session: Session, user: User, payload: ProgressCreate
    ) -> ProgressEntry:
        self._get_own_goal(session, user, payload.goal_id)
        data = payload.model_dump(exclude_none=True)
        entry = ProgressEntry(user_id=user.id, **data)
        return self.repo.create(session, entry)

    def _get_own_goal(self, session: Session, user: User, goal_id: int) -> UserGoal:
        """404 rather than 403 so goal ids of other users are not disclosed."""
        goal = self.repo.get_goal(session, goal_id)
        if goal is None or goal.user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Goal not found",
            )
        return goal
