"""
Scoring strategies used by the Finalization Engine.

Contract: ``calculate(db, cycle_id)`` writes one FinalRating row per scored employee
of the cycle and returns them. It runs inside the caller's transaction and must not
commit. Re-running it for the same cycle overwrites the computed fields.
"""
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Type

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.final_rating import FinalRating
from app.models.goal import Goal, GoalStatus
from app.models.manager_review import ManagerReview

MAX_RATING = Decimal("5")
CENT = Decimal("0.01")

RANK_EXCEEDS = "Exceeds Expectations"
RANK_MEETS = "Meets Expectations"
RANK_NEEDS_IMPROVEMENT = "Needs Improvement"


class ScoringStrategy:
    name = "base"

    def calculate(self, db: Session, cycle_id: int) -> List[FinalRating]:
        raise NotImplementedError


class WeightedReviewScoring(ScoringStrategy):
    """
    weighted_score = Σ weightage × rating / 5 over completed, reviewed goals.

    With a full 100% goal budget the score reads as a percentage of the best
    possible result. Peer feedback does not contribute.
    """
    name = "weighted_reviews"

    thresholds = (
        (Decimal("80"), RANK_EXCEEDS),
        (Decimal("60"), RANK_MEETS),
    )

    def rank_for(self, score: Decimal) -> str:
        for floor, rank in self.thresholds:
            if score >= floor:
                return rank
        return RANK_NEEDS_IMPROVEMENT

    def calculate(self, db: Session, cycle_id: int) -> List[FinalRating]:
        rows = (
            db.query(Goal.employee_id, Goal.weightage, ManagerReview.rating)
            .join(ManagerReview, ManagerReview.goal_id == Goal.id)
            .filter(Goal.cycle_id == cycle_id, Goal.status == GoalStatus.COMPLETED.value)
            .all()
        )

        scores: Dict[int, Decimal] = defaultdict(Decimal)
        for employee_id, weightage, rating in rows:
            scores[employee_id] += Decimal(str(weightage)) * Decimal(rating) / MAX_RATING

        existing = {
            fr.employee_id: fr
            for fr in db.query(FinalRating).filter(FinalRating.cycle_id == cycle_id).all()
        }

        results = []
        for employee_id, raw in sorted(scores.items()):
            score = raw.quantize(CENT, rounding=ROUND_HALF_UP)
            rating = existing.get(employee_id)
            if rating is None:
                rating = FinalRating(employee_id=employee_id, cycle_id=cycle_id)
                db.add(rating)
            rating.weighted_score = score
            rating.final_rank = self.rank_for(score)
            results.append(rating)

        db.flush()
        return results


SCORING_STRATEGIES: Dict[str, Type[ScoringStrategy]] = {
    WeightedReviewScoring.name: WeightedReviewScoring,
}


def get_scoring_strategy(name: str | None = None) -> ScoringStrategy:
    key = name or settings.scoring_strategy
    if key not in SCORING_STRATEGIES:
        raise ValueError(f"Unknown scoring strategy: {key}")
    return SCORING_STRATEGIES[key]()
