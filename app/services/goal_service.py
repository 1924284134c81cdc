"""
Goal Ledger: employee-owned goals and the per-cycle weightage budget.

Invariant: for a given (employee, cycle) the weightage of all goals sums to at most
``settings.max_total_weightage``. The budget is read inside the same transaction as
the write, under a row lock on the owning employee (PostgreSQL) or the database
write lock taken at BEGIN IMMEDIATE (SQLite), so two concurrent submissions cannot
both spend the same remaining budget.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import func

from app.core.config import settings
from app.core.exceptions import ValidationError, NotFoundError, ForbiddenTransitionError, WeightageExceededError
from app.models.goal import Goal, GoalStatus
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.cycle_service import CycleService

CENT = Decimal("0.01")


def to_weight(value) -> Decimal:
    """Normalise any numeric input to a two-decimal Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def goal_snapshot(goal: Goal) -> dict:
    return {
        "title": goal.title,
        "description": goal.description,
        "weightage": float(to_weight(goal.weightage)),
        "status": goal.status,
    }


class GoalService(BaseService):

    @property
    def budget(self) -> Decimal:
        return to_weight(settings.max_total_weightage)

    def get_current_weightage(self, employee_id: int, cycle_id: int, exclude_goal_id: Optional[int] = None) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(Goal.weightage), 0)).filter(
            Goal.employee_id == employee_id,
            Goal.cycle_id == cycle_id,
        )
        if exclude_goal_id is not None:
            query = query.filter(Goal.id != exclude_goal_id)
        return to_weight(query.scalar())

    def list_goals(self, employee_id: int, cycle_id: int) -> List[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.employee_id == employee_id, Goal.cycle_id == cycle_id)
            .order_by(Goal.id.asc())
            .all()
        )

    def _validate_fields(self, title: Optional[str], weightage) -> Decimal:
        if not title or not str(title).strip():
            raise ValidationError("Goal title is required.")
        if weightage is None:
            raise ValidationError("Goal weightage is required.")
        weight = to_weight(weightage)
        if weight <= 0 or weight > self.budget:
            raise ValidationError("Invalid goal weightage value.", details={"weightage": float(weight)})
        return weight

    def _check_budget(self, employee_id: int, cycle_id: int, weight: Decimal, exclude_goal_id: Optional[int] = None):
        current = self.get_current_weightage(employee_id, cycle_id, exclude_goal_id=exclude_goal_id)
        if current + weight > self.budget:
            remaining = self.budget - current
            raise WeightageExceededError(remaining=float(remaining), limit=float(self.budget))

    def create_goal(self, employee_id: int, title: str, description: Optional[str], weightage) -> Goal:
        weight = self._validate_fields(title, weightage)

        with self.atomic("create_goal"):
            cycle_id = CycleService(self.db).get_active_cycle_id()
            employee = self.get_employee(employee_id, lock=True)
            self._check_budget(employee_id, cycle_id, weight)

            goal = Goal(
                employee_id=employee_id,
                cycle_id=cycle_id,
                title=title.strip(),
                description=description,
                weightage=weight,
                status=GoalStatus.PENDING_APPROVAL.value,
            )
            self.db.add(goal)
            self.db.flush()

            AuditService.log(
                self.db,
                action="goal_created",
                entity_type="goal",
                entity_id=goal.id,
                user_id=employee_id,
                user_role=self.role_value(employee),
                details={"cycle_id": cycle_id},
                after_state=goal_snapshot(goal),
            )
        self.log_info(f"Goal {goal.id} submitted by employee {employee_id} for cycle {cycle_id}")
        return goal

    def _owned_pending_goal(self, goal_id: int, employee_id: int, action: str) -> Goal:
        goal = (
            self.db.query(Goal)
            .filter(Goal.id == goal_id, Goal.employee_id == employee_id)
            .with_for_update()
            .first()
        )
        if goal is None or goal.status != GoalStatus.PENDING_APPROVAL.value:
            raise ForbiddenTransitionError(
                f"Goal can only be {action} while it is pending approval and owned by you.",
                details={"goal_id": goal_id, "status": goal.status if goal else None},
            )
        return goal

    def update_goal(self, goal_id: int, employee_id: int, title: str, description: Optional[str], weightage) -> Goal:
        with self.atomic("update_goal"):
            employee = self.get_employee(employee_id, lock=True)
            goal = self._owned_pending_goal(goal_id, employee_id, "edited")
            # Status before payload: editing a non-pending goal is forbidden whatever it carries
            weight = self._validate_fields(title, weightage)
            self._check_budget(employee_id, goal.cycle_id, weight, exclude_goal_id=goal.id)

            before = goal_snapshot(goal)
            goal.title = title.strip()
            goal.description = description
            goal.weightage = weight
            self.db.flush()

            AuditService.log(
                self.db,
                action="goal_updated",
                entity_type="goal",
                entity_id=goal.id,
                user_id=employee_id,
                user_role=self.role_value(employee),
                details={"cycle_id": goal.cycle_id},
                before_state=before,
                after_state=goal_snapshot(goal),
            )
        return goal

    def delete_goal(self, goal_id: int, employee_id: int) -> None:
        with self.atomic("delete_goal"):
            employee = self.get_employee(employee_id)
            goal = self._owned_pending_goal(goal_id, employee_id, "deleted")
            before = goal_snapshot(goal)
            cycle_id = goal.cycle_id
            self.db.delete(goal)
            self.db.flush()

            AuditService.log(
                self.db,
                action="goal_deleted",
                entity_type="goal",
                entity_id=goal_id,
                user_id=employee_id,
                user_role=self.role_value(employee),
                details={"cycle_id": cycle_id},
                before_state=before,
            )
        self.log_info(f"Goal {goal_id} deleted by employee {employee_id}")

    def get_goal(self, goal_id: int) -> Goal:
        goal = self.db.get(Goal, goal_id)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found.")
        return goal
