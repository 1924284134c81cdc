"""
Progress Projector strategies.

A strategy maps (employee, cycle) to one human-readable stage label. The workflow
services never interpret the label; they only guarantee it is asked for inside a
resolved cycle context.
"""
from typing import Dict, Type

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.final_rating import FinalRating
from app.models.goal import Goal, GoalStatus


class ProgressStrategy:
    name = "base"

    def label(self, db: Session, employee_id: int, cycle_id: int) -> str:
        raise NotImplementedError


class GoalStateProgress(ProgressStrategy):
    """Derives the stage from the least advanced goal of the employee in the cycle."""
    name = "goal_states"

    GOALS_NOT_SET = "1. goals not set"
    GOALS_NOT_APPROVED = "2. goals not yet approved"
    AWAITING_SELF_APPRAISAL = "3. awaiting self-appraisal"
    MANAGER_REVIEW = "4. manager review in progress"
    AWAITING_FINAL_FEEDBACK = "5. awaiting final feedback"
    COMPLETED = "6. completed"

    def label(self, db: Session, employee_id: int, cycle_id: int) -> str:
        statuses = {
            row[0]
            for row in db.query(Goal.status)
            .filter(Goal.employee_id == employee_id, Goal.cycle_id == cycle_id)
            .all()
        }
        if not statuses:
            return self.GOALS_NOT_SET
        if GoalStatus.PENDING_APPROVAL.value in statuses:
            return self.GOALS_NOT_APPROVED
        if GoalStatus.APPROVED.value in statuses:
            return self.AWAITING_SELF_APPRAISAL
        if GoalStatus.IN_PROGRESS.value in statuses:
            return self.MANAGER_REVIEW

        finalized = (
            db.query(FinalRating.id)
            .filter(FinalRating.employee_id == employee_id, FinalRating.cycle_id == cycle_id)
            .first()
        )
        return self.COMPLETED if finalized else self.AWAITING_FINAL_FEEDBACK


PROGRESS_STRATEGIES: Dict[str, Type[ProgressStrategy]] = {
    GoalStateProgress.name: GoalStateProgress,
}


def get_progress_strategy(name: str | None = None) -> ProgressStrategy:
    key = name or settings.progress_strategy
    if key not in PROGRESS_STRATEGIES:
        raise ValueError(f"Unknown progress strategy: {key}")
    return PROGRESS_STRATEGIES[key]()
