from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class GoalApprovalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    manager_id: int = Field(alias="managerId")
    goal_id: int = Field(alias="goalId")
    feedback: Optional[str] = None


class ManagerReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    manager_id: int = Field(alias="managerId")
    goal_id: int = Field(alias="goalId")
    rating: int = Field(ge=1, le=5)
    feedback: str


class TeamReport(BaseModel):
    employee_id: int
    employee_name: str
    department_name: Optional[str] = None
    appraisal_progress: str


class TeamGoal(BaseModel):
    goal_id: int
    goal_title: str
    goal_weightage: float
    employee_id: int
    employee_name: str


class TeamOverviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reports: List[TeamReport]
    pending_goals: List[TeamGoal] = Field(alias="pendingGoals")
