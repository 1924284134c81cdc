"""
Finalization Engine: batch scoring per cycle, HR overrides and the employee report.
"""
from typing import Any, Dict, List, Optional

from app.core.exceptions import NotFoundError, ValidationError
from app.models.appraisal_cycle import AppraisalCycle
from app.models.employee import Employee
from app.models.feedback_360 import Feedback360
from app.models.final_rating import FinalRating
from app.models.goal import Goal
from app.models.manager_review import ManagerReview
from app.models.self_appraisal import SelfAppraisal
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.cycle_service import HR_ROLES
from app.services.scoring import ScoringStrategy, get_scoring_strategy


def _rating_row(rating: FinalRating, employee_name: str) -> Dict[str, Any]:
    return {
        "rating_id": rating.id,
        "employee_id": rating.employee_id,
        "employee_name": employee_name,
        "cycle_id": rating.cycle_id,
        "weighted_score": float(rating.weighted_score),
        "final_rank": rating.final_rank,
        "final_comments": rating.final_comments,
    }


class FinalizationService(BaseService):

    def __init__(self, db, scoring: Optional[ScoringStrategy] = None):
        super().__init__(db)
        self.scoring = scoring or get_scoring_strategy()

    def calculate_ratings(self, cycle_id: int, actor_id: int) -> List[FinalRating]:
        """Run the scoring strategy exactly once for the cycle; all-or-nothing."""
        with self.atomic("calculate_ratings"):
            actor = self.require_role(actor_id, HR_ROLES)
            if self.db.get(AppraisalCycle, cycle_id) is None:
                raise NotFoundError("Cycle not found.")

            ratings = self.scoring.calculate(self.db, cycle_id)

            AuditService.log(
                self.db,
                action="final_ratings_calculated",
                entity_type="appraisal_cycle",
                entity_id=cycle_id,
                user_id=actor.id,
                user_role=self.role_value(actor),
                details={"strategy": self.scoring.name, "ratings": len(ratings)},
            )
        self.log_info(f"Final ratings calculated for cycle {cycle_id}", ratings=len(ratings))
        return ratings

    def list_final_ratings(self, cycle_id: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(FinalRating, Employee.name)
            .join(Employee, FinalRating.employee_id == Employee.id)
            .filter(FinalRating.cycle_id == cycle_id)
            .order_by(FinalRating.weighted_score.desc(), FinalRating.id)
            .all()
        )
        return [_rating_row(rating, name) for rating, name in rows]

    def update_final_rating(
        self,
        rating_id: int,
        final_rank: Optional[str],
        final_comments: Optional[str],
        actor_id: int,
    ) -> FinalRating:
        if not final_rank or not final_rank.strip():
            raise ValidationError("Missing HR ID or Final Rank.")

        with self.atomic("update_final_rating"):
            actor = self.require_role(actor_id, HR_ROLES)
            rating = self.db.get(FinalRating, rating_id)
            if rating is None:
                raise NotFoundError("Rating record not found.")

            before = {"final_rank": rating.final_rank, "final_comments": rating.final_comments}
            rating.final_rank = final_rank.strip()
            rating.final_comments = final_comments
            self.db.flush()

            AuditService.log(
                self.db,
                action="final_rating_updated",
                entity_type="final_rating",
                entity_id=rating.id,
                user_id=actor.id,
                user_role=self.role_value(actor),
                details={"employee_id": rating.employee_id, "cycle_id": rating.cycle_id},
                before_state=before,
                after_state={"final_rank": rating.final_rank, "final_comments": rating.final_comments},
            )
        return rating

    def get_employee_report(self, employee_id: int, cycle_id: int, accessor_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Four result sets for one employee and cycle: summary, goal/review breakdown,
        self-appraisal comments and peer feedback.
        """
        # TODO: enforce an access policy on accessor_id (self, reporting manager or HR)
        employee = self.get_employee(employee_id)
        self.log_info(f"Report for employee {employee_id} requested by {accessor_id}")

        summary_row = (
            self.db.query(FinalRating, AppraisalCycle.name)
            .join(AppraisalCycle, FinalRating.cycle_id == AppraisalCycle.id)
            .filter(FinalRating.employee_id == employee_id, FinalRating.cycle_id == cycle_id)
            .first()
        )
        summary = None
        if summary_row is not None:
            rating, cycle_name = summary_row
            summary = {**_rating_row(rating, employee.name), "cycle_name": cycle_name}

        goals = (
            self.db.query(Goal, ManagerReview)
            .outerjoin(ManagerReview, ManagerReview.goal_id == Goal.id)
            .filter(Goal.employee_id == employee_id, Goal.cycle_id == cycle_id)
            .order_by(Goal.id)
            .all()
        )
        appraisals = (
            self.db.query(SelfAppraisal, Goal.title)
            .join(Goal, SelfAppraisal.goal_id == Goal.id)
            .filter(SelfAppraisal.employee_id == employee_id, Goal.cycle_id == cycle_id)
            .order_by(SelfAppraisal.submission_date, SelfAppraisal.id)
            .all()
        )
        feedback = (
            self.db.query(Feedback360, Employee.name)
            .join(Employee, Feedback360.reviewer_id == Employee.id)
            .filter(Feedback360.employee_id == employee_id, Feedback360.cycle_id == cycle_id)
            .order_by(Feedback360.feedback_date.desc(), Feedback360.id.desc())
            .all()
        )

        return {
            "summary": summary,
            "goalsAndReviews": [
                {
                    "goal_id": goal.id,
                    "goal_title": goal.title,
                    "goal_weightage": float(goal.weightage),
                    "goal_status": goal.status,
                    "rating": review.rating if review else None,
                    "feedback": review.feedback if review else None,
                }
                for goal, review in goals
            ],
            "selfAppraisals": [
                {
                    "goal_id": sa.goal_id,
                    "goal_title": title,
                    "comments": sa.comments,
                    "document_link": sa.document_link,
                    "submission_date": sa.submission_date,
                }
                for sa, title in appraisals
            ],
            "feedback360": [
                {
                    "rating": fb.rating,
                    "comments": fb.comments,
                    "reviewer_name": reviewer_name,
                    "feedback_date": fb.feedback_date,
                }
                for fb, reviewer_name in feedback
            ],
        }
