from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.feedback import Feedback360Response
from app.schemas.review import GoalApprovalRequest, ManagerReviewRequest, TeamGoal, TeamOverviewResponse
from app.services.approval_service import ApprovalService
from app.services.cycle_service import CycleService
from app.services.feedback_service import FeedbackService

router = APIRouter(prefix="/manager", tags=["manager"])


@router.get("/team-overview/{manager_id}", response_model=TeamOverviewResponse)
def team_overview(manager_id: int, db: Session = Depends(get_db)):
    return ApprovalService(db).get_team_overview(manager_id)


@router.get("/goals-for-review/{manager_id}", response_model=List[TeamGoal])
def goals_for_review(manager_id: int, db: Session = Depends(get_db)):
    return ApprovalService(db).get_goals_for_review(manager_id)


@router.post("/approve-goal")
def approve_goal(payload: GoalApprovalRequest, db: Session = Depends(get_db)):
    ApprovalService(db).approve_goal(payload.manager_id, payload.goal_id, payload.feedback)
    return {"message": "Goal approved successfully."}


@router.post("/submit-review", status_code=status.HTTP_201_CREATED)
def submit_review(payload: ManagerReviewRequest, db: Session = Depends(get_db)):
    ApprovalService(db).submit_review(payload.manager_id, payload.goal_id, payload.rating, payload.feedback)
    return {"message": "Goal review submitted successfully."}


@router.get("/360-feedback/{employee_id}", response_model=List[Feedback360Response])
def peer_feedback(employee_id: int, db: Session = Depends(get_db)):
    cycle_id = CycleService(db).get_active_cycle_id()
    return FeedbackService(db).list_feedback_for(employee_id, cycle_id)
