"""
Approval Workflow: the goal state machine.

    pending_approval --(manager approves)--------------> approved
    approved         --(employee self-appraises)-------> in_progress
    in_progress      --(manager rates + gives feedback)-> completed

Each transition checks its guard before any write and runs in one transaction.
A failed guard raises ForbiddenTransitionError.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.exceptions import ValidationError, NotFoundError, ForbiddenTransitionError
from app.models.department import Department
from app.models.employee import Employee
from app.models.goal import Goal, GoalStatus
from app.models.manager_review import ManagerReview
from app.models.self_appraisal import SelfAppraisal
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.cycle_service import CycleService
from app.services.progress import ProgressStrategy, get_progress_strategy

MIN_RATING = 1
MAX_RATING = 5


class ApprovalService(BaseService):

    def __init__(self, db, progress: Optional[ProgressStrategy] = None):
        super().__init__(db)
        self.progress = progress or get_progress_strategy()

    # --- Authorization predicate ---
    def manager_owns(self, manager_id: int, employee_id: int) -> bool:
        """True when the employee reports directly to the manager."""
        employee = self.db.get(Employee, employee_id)
        return employee is not None and employee.manager_id == manager_id

    def _locked_goal(self, goal_id: int) -> Goal:
        goal = self.db.query(Goal).filter(Goal.id == goal_id).with_for_update().first()
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found.")
        return goal

    def _transition(self, goal: Goal, expected: GoalStatus, target: GoalStatus, message: str):
        if goal.status != expected.value:
            raise ForbiddenTransitionError(
                message,
                details={"goal_id": goal.id, "status": goal.status, "required": expected.value},
            )
        goal.status = target.value

    # --- Transitions ---
    def approve_goal(self, manager_id: int, goal_id: int, feedback: Optional[str]) -> Goal:
        if not feedback or not feedback.strip():
            raise ValidationError("Approval feedback is required.")

        with self.atomic("approve_goal"):
            manager = self.get_employee(manager_id)
            goal = self._locked_goal(goal_id)
            if not self.manager_owns(manager_id, goal.employee_id):
                raise ForbiddenTransitionError(
                    "Approval failed: you are not the reporting manager of this employee.",
                    details={"goal_id": goal_id},
                )
            self._transition(
                goal, GoalStatus.PENDING_APPROVAL, GoalStatus.APPROVED,
                "Only goals pending approval can be approved.",
            )
            goal.approved_by = manager_id
            goal.approved_at = datetime.now(timezone.utc)
            goal.approval_feedback = feedback.strip()
            self.db.flush()

            AuditService.log(
                self.db,
                action="goal_approved",
                entity_type="goal",
                entity_id=goal.id,
                user_id=manager_id,
                user_role=self.role_value(manager),
                details={"employee_id": goal.employee_id, "feedback": goal.approval_feedback},
                before_state={"status": GoalStatus.PENDING_APPROVAL.value},
                after_state={"status": goal.status},
            )
        self.log_info(f"Goal {goal_id} approved by manager {manager_id}")
        return goal

    def submit_self_appraisal(
        self,
        employee_id: int,
        goal_id: int,
        comments: Optional[str],
        document_link: Optional[str] = None,
    ) -> SelfAppraisal:
        if not comments or not comments.strip():
            raise ValidationError("Missing required fields (Goal ID and Comments).")

        with self.atomic("submit_self_appraisal"):
            employee = self.get_employee(employee_id)
            goal = self.db.query(Goal).filter(
                Goal.id == goal_id, Goal.employee_id == employee_id
            ).with_for_update().first()
            if goal is None:
                raise ForbiddenTransitionError(
                    "Self-appraisal can only be submitted for your own approved goals.",
                    details={"goal_id": goal_id},
                )
            self._transition(
                goal, GoalStatus.APPROVED, GoalStatus.IN_PROGRESS,
                "Self-appraisal can only be submitted for approved goals.",
            )
            appraisal = SelfAppraisal(
                goal_id=goal.id,
                employee_id=employee_id,
                comments=comments.strip(),
                document_link=document_link or None,
            )
            self.db.add(appraisal)
            self.db.flush()

            AuditService.log(
                self.db,
                action="self_appraisal_submitted",
                entity_type="goal",
                entity_id=goal.id,
                user_id=employee_id,
                user_role=self.role_value(employee),
                details={"self_appraisal_id": appraisal.id, "document_link": appraisal.document_link},
                before_state={"status": GoalStatus.APPROVED.value},
                after_state={"status": goal.status},
            )
        return appraisal

    def submit_review(self, manager_id: int, goal_id: int, rating: Optional[int], feedback: Optional[str]) -> ManagerReview:
        if rating is None or not feedback or not feedback.strip():
            raise ValidationError("Missing required rating or feedback fields.")
        if not MIN_RATING <= int(rating) <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")

        with self.atomic("submit_review"):
            manager = self.get_employee(manager_id)
            goal = self._locked_goal(goal_id)
            if not self.manager_owns(manager_id, goal.employee_id):
                raise ForbiddenTransitionError(
                    "Goal is not in the 'In Progress' state for review or manager is unauthorized.",
                    details={"goal_id": goal_id},
                )
            self._transition(
                goal, GoalStatus.IN_PROGRESS, GoalStatus.COMPLETED,
                "Goal is not in the 'In Progress' state for review or manager is unauthorized.",
            )

            # Upsert keyed by goal
            review = self.db.query(ManagerReview).filter(ManagerReview.goal_id == goal.id).first()
            before = {"rating": review.rating, "feedback": review.feedback} if review else None
            if review is None:
                review = ManagerReview(goal_id=goal.id)
                self.db.add(review)
            review.manager_id = manager_id
            review.rating = int(rating)
            review.feedback = feedback.strip()
            review.review_date = datetime.now(timezone.utc)
            self.db.flush()

            AuditService.log(
                self.db,
                action="goal_reviewed",
                entity_type="goal",
                entity_id=goal.id,
                user_id=manager_id,
                user_role=self.role_value(manager),
                details={"employee_id": goal.employee_id, "review_id": review.id},
                before_state=before,
                after_state={"status": goal.status, "rating": review.rating, "feedback": review.feedback},
            )
        self.log_info(f"Goal {goal_id} reviewed by manager {manager_id}")
        return review

    # --- Manager views ---
    def _team_goals(self, manager_id: int, cycle_id: int, status: GoalStatus):
        return (
            self.db.query(Goal, Employee)
            .join(Employee, Goal.employee_id == Employee.id)
            .filter(
                Employee.manager_id == manager_id,
                Goal.status == status.value,
                Goal.cycle_id == cycle_id,
            )
            .order_by(Employee.name, Goal.id)
            .all()
        )

    def get_team_overview(self, manager_id: int) -> Dict[str, List[Dict[str, Any]]]:
        cycle_id = CycleService(self.db).get_active_cycle_id()

        reports = (
            self.db.query(Employee, Department.name)
            .outerjoin(Department, Employee.department_id == Department.id)
            .filter(Employee.manager_id == manager_id)
            .order_by(Employee.name)
            .all()
        )
        pending = self._team_goals(manager_id, cycle_id, GoalStatus.PENDING_APPROVAL)

        return {
            "reports": [
                {
                    "employee_id": employee.id,
                    "employee_name": employee.name,
                    "department_name": department_name,
                    "appraisal_progress": self.progress.label(self.db, employee.id, cycle_id),
                }
                for employee, department_name in reports
            ],
            "pendingGoals": [
                {
                    "goal_id": goal.id,
                    "goal_title": goal.title,
                    "employee_id": employee.id,
                    "employee_name": employee.name,
                    "goal_weightage": float(goal.weightage),
                }
                for goal, employee in pending
            ],
        }

    def get_goals_for_review(self, manager_id: int) -> List[Dict[str, Any]]:
        cycle_id = CycleService(self.db).get_active_cycle_id()
        return [
            {
                "goal_id": goal.id,
                "goal_title": goal.title,
                "goal_weightage": float(goal.weightage),
                "employee_id": employee.id,
                "employee_name": employee.name,
            }
            for goal, employee in self._team_goals(manager_id, cycle_id, GoalStatus.IN_PROGRESS)
        ]
