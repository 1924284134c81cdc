from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.employee import (
    DepartmentResponse, EmployeeSummary, ManagerUpdateRequest, ProfileResponse, RoleResponse,
)
from app.schemas.feedback import Feedback360Request
from app.schemas.goal import GoalResponse, GoalWrite, SelfAppraisalRequest, WeightageResponse
from app.services.approval_service import ApprovalService
from app.services.cycle_service import CycleService
from app.services.employee_service import EmployeeService
from app.services.feedback_service import FeedbackService
from app.services.finalization_service import FinalizationService
from app.services.goal_service import GoalService
from app.services.progress import get_progress_strategy

router = APIRouter(prefix="/employee", tags=["employee"])


# --- Cycle context ---
@router.get("/active-cycle-id")
def get_active_cycle_id(db: Session = Depends(get_db)):
    return {"cycle_id": CycleService(db).get_active_cycle_id()}


# --- Directory ---
@router.get("/roles", response_model=List[RoleResponse])
def list_roles(db: Session = Depends(get_db)):
    return [{"role_id": r.id, "role_name": r.name} for r in EmployeeService(db).list_roles()]


@router.get("/departments", response_model=List[DepartmentResponse])
def list_departments(db: Session = Depends(get_db)):
    return [
        {"department_id": d.id, "department_name": d.name}
        for d in EmployeeService(db).list_departments()
    ]


@router.get("/profile/{employee_id}", response_model=ProfileResponse)
def get_profile(employee_id: int, db: Session = Depends(get_db)):
    return EmployeeService(db).get_profile(employee_id)


@router.get("/managers-list", response_model=List[EmployeeSummary])
def list_managers(db: Session = Depends(get_db)):
    return [
        {"employee_id": m.id, "employee_name": m.name, "department_id": m.department_id}
        for m in EmployeeService(db).list_managers()
    ]


@router.put("/update-manager")
def update_manager(payload: ManagerUpdateRequest, db: Session = Depends(get_db)):
    EmployeeService(db).update_manager(payload.employee_id, payload.new_manager_id)
    return {"message": "Reporting manager successfully updated."}


@router.get("/all-employees", response_model=List[EmployeeSummary])
def list_peers(db: Session = Depends(get_db)):
    """Peers eligible for 360° review. The client removes the acting reviewer."""
    return [
        {"employee_id": e.id, "employee_name": e.name, "department_id": e.department_id}
        for e in FeedbackService(db).list_eligible_peers()
    ]


# --- Goal Ledger ---
def _goal_response(goal) -> dict:
    return {
        "goal_id": goal.id,
        "goal_title": goal.title,
        "goal_description": goal.description,
        "goal_weightage": float(goal.weightage),
        "goal_status": goal.status,
        "cycle_id": goal.cycle_id,
        "created_at": goal.created_at,
        "updated_at": goal.updated_at,
    }


@router.get("/current-weightage/{employee_id}", response_model=WeightageResponse)
def get_current_weightage(employee_id: int, db: Session = Depends(get_db)):
    cycle_id = CycleService(db).get_active_cycle_id()
    total = GoalService(db).get_current_weightage(employee_id, cycle_id)
    return {"total_weight": float(total)}


@router.post("/goal", status_code=status.HTTP_201_CREATED)
def create_goal(payload: GoalWrite, db: Session = Depends(get_db)):
    goal = GoalService(db).create_goal(
        payload.employee_id, payload.goal_title, payload.goal_description, payload.goal_weightage
    )
    return {"message": "Goal submitted for manager approval.", "goalId": goal.id}


@router.get("/goals/{employee_id}", response_model=List[GoalResponse])
def list_goals(employee_id: int, db: Session = Depends(get_db)):
    cycle_id = CycleService(db).get_active_cycle_id()
    return [_goal_response(g) for g in GoalService(db).list_goals(employee_id, cycle_id)]


@router.put("/goal/{goal_id}")
def update_goal(goal_id: int, payload: GoalWrite, db: Session = Depends(get_db)):
    GoalService(db).update_goal(
        goal_id, payload.employee_id, payload.goal_title, payload.goal_description, payload.goal_weightage
    )
    return {"message": "Goal updated successfully and audited."}


@router.delete("/goal/{goal_id}")
def delete_goal(goal_id: int, employee_id: int = Query(..., alias="employeeId"), db: Session = Depends(get_db)):
    GoalService(db).delete_goal(goal_id, employee_id)
    return {"message": "Goal deleted successfully and audited."}


# --- Appraisal steps ---
@router.post("/self-appraisal", status_code=status.HTTP_201_CREATED)
def submit_self_appraisal(payload: SelfAppraisalRequest, db: Session = Depends(get_db)):
    ApprovalService(db).submit_self_appraisal(
        payload.employee_id, payload.goal_id, payload.comments, payload.document_link
    )
    return {"message": "Self-appraisal submitted successfully."}


@router.get("/appraisal-progress/{employee_id}")
def get_appraisal_progress(employee_id: int, db: Session = Depends(get_db)):
    cycle_id = CycleService(db).get_active_cycle_id()
    return {"current_progress": get_progress_strategy().label(db, employee_id, cycle_id)}


@router.get("/final-report/{employee_id}")
def get_final_report(
    employee_id: int,
    accessor_id: Optional[int] = Query(default=None, alias="accessorId"),
    db: Session = Depends(get_db),
):
    cycle_id = CycleService(db).get_active_cycle_id()
    # Without an explicit accessor the employee is reading their own report
    return FinalizationService(db).get_employee_report(
        employee_id, cycle_id, accessor_id if accessor_id is not None else employee_id
    )


@router.post("/submit-360-feedback", status_code=status.HTTP_201_CREATED)
def submit_360_feedback(payload: Feedback360Request, db: Session = Depends(get_db)):
    FeedbackService(db).submit_feedback(
        payload.employee_id, payload.reviewer_id, payload.rating, payload.comments
    )
    return {"message": "360 feedback submitted successfully."}
