# fitcoach/repositories/tracking_repo.py
from sqlmodel import Session, select

from fitcoach.models.tracking import MacroPlan, ProgressEntry, UserGoal


class TrackingRepository:
    """
    Data access layer for goals, macro plans and progress entries.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Goals -----

    def list_goals(self, session: Session, user_id: int) -> list[UserGoal]:
        stmt = (
            select(UserGoal)
            .where(UserGoal.user_id == user_id)
            .order_by(UserGoal.created_at.desc(), UserGoal.id.desc())
        )
        return list(session.exec(stmt).all())

    def get_goal(self, session: Session, goal_id: int) -> UserGoal | None:
        return session.get(UserGoal, goal_id)

    # ----- Macro plans -----

    def list_macro_plans(self, session: Session, user_id: int) -> list[MacroPlan]:
        stmt = (
            select(MacroPlan)
            .where(MacroPlan.user_id == user_id)
            .order_by(MacroPlan.created_at.desc(), MacroPlan.id.desc())
        )
        return list(session.exec(stmt).all())

    # ----- Progress -----

    def list_progress(
        self,
        session: Session,
        user_id: int,
        goal_id: int | None = None,
    ) -> list[ProgressEntry]:
        stmt = select(ProgressEntry).where(ProgressEntry.user_id == user_id)
        if goal_id is not None:
            stmt = stmt.where(ProgressEntry.goal_id == goal_id)
        stmt = stmt.order_by(ProgressEntry.record_date.desc(), ProgressEntry.id.desc())
        return list(session.exec(stmt).all())

    # ----- Shared insert -----

    def create(self, session: Session, row):
        session.add(row)
        session.commit()
        session.refresh(row)
        return row
