from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class GoalWrite(BaseModel):
    """Body for creating or editing a goal. Keys follow the web client's camelCase."""
    model_config = ConfigDict(populate_by_name=True)

    employee_id: int = Field(alias="employeeId")
    goal_title: str = Field(alias="goalTitle")
    goal_description: Optional[str] = Field(default=None, alias="goalDescription")
    goal_weightage: float = Field(alias="goalWeightage")


class GoalResponse(BaseModel):
    goal_id: int
    goal_title: str
    goal_description: Optional[str] = None
    goal_weightage: float
    goal_status: str
    cycle_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WeightageResponse(BaseModel):
    total_weight: float


class SelfAppraisalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: int = Field(alias="employeeId")
    goal_id: int = Field(alias="goalId")
    comments: str
    document_link: Optional[str] = Field(default=None, alias="documentLink")
