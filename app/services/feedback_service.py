from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import ValidationError, SelfReviewError, DuplicateFeedbackError
from app.models.employee import Employee
from app.models.feedback_360 import Feedback360
from app.models.role import Role, RoleCode
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.cycle_service import CycleService

DUPLICATE_CONSTRAINT = "uq_feedback_360_reviewer_cycle"
# SQLite names the columns instead of the constraint
SQLITE_DUPLICATE_MESSAGE = "UNIQUE constraint failed: feedback_360.employee_id, feedback_360.reviewer_id, feedback_360.cycle_id"


def is_duplicate_feedback(error: IntegrityError) -> bool:
    """True only for a violation of the one-submission-per-reviewer-and-cycle constraint."""
    diag = getattr(error.orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name == DUPLICATE_CONSTRAINT
    message = str(error.orig)
    return DUPLICATE_CONSTRAINT in message or SQLITE_DUPLICATE_MESSAGE in message


class FeedbackService(BaseService):
    """360° peer feedback. One submission per (subject, reviewer, cycle); never about yourself."""

    def submit_feedback(
        self,
        employee_id: int,
        reviewer_id: int,
        rating: int,
        comments: Optional[str],
        cycle_id: Optional[int] = None,
    ) -> Feedback360:
        if int(employee_id) == int(reviewer_id):
            raise SelfReviewError()
        if not comments or not comments.strip():
            raise ValidationError("Missing required fields.")
        if not 1 <= int(rating) <= 5:
            raise ValidationError("Rating must be between 1 and 5.")

        with self.atomic("submit_feedback"):
            if cycle_id is None:
                cycle_id = CycleService(self.db).get_active_cycle_id()
            reviewer = self.get_employee(reviewer_id)
            self.get_employee(employee_id)

            feedback = Feedback360(
                employee_id=employee_id,
                reviewer_id=reviewer_id,
                cycle_id=cycle_id,
                rating=int(rating),
                comments=comments.strip(),
            )
            self.db.add(feedback)
            try:
                # Uniqueness lives in the database; any other integrity failure is a storage error
                self.db.flush()
            except IntegrityError as e:
                if is_duplicate_feedback(e):
                    raise DuplicateFeedbackError() from e
                raise

            AuditService.log(
                self.db,
                action="feedback_360_submitted",
                entity_type="feedback_360",
                entity_id=feedback.id,
                user_id=reviewer_id,
                user_role=self.role_value(reviewer),
                details={"employee_id": employee_id, "cycle_id": cycle_id, "rating": feedback.rating},
            )
        self.log_info(f"360 feedback {feedback.id} submitted for employee {employee_id}")
        return feedback

    def list_feedback_for(self, employee_id: int, cycle_id: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(Feedback360, Employee.name)
            .join(Employee, Feedback360.reviewer_id == Employee.id)
            .filter(Feedback360.employee_id == employee_id, Feedback360.cycle_id == cycle_id)
            .order_by(Feedback360.feedback_date.desc(), Feedback360.id.desc())
            .all()
        )
        return [
            {
                "feedback_id": fb.id,
                "rating": fb.rating,
                "comments": fb.comments,
                "reviewer_id": fb.reviewer_id,
                "reviewer_name": reviewer_name,
                "feedback_date": fb.feedback_date,
            }
            for fb, reviewer_name in rows
        ]

    def list_eligible_peers(self, excluded_roles: Optional[Iterable[str]] = None) -> List[Employee]:
        codes = [RoleCode(code) for code in (excluded_roles or settings.peer_excluded_roles)]
        return (
            self.db.query(Employee)
            .join(Role, Employee.role_id == Role.id)
            .filter(Role.code.notin_(codes), Employee.is_active.is_(True))
            .order_by(Employee.name)
            .all()
        )
