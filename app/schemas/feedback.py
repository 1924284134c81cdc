from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class Feedback360Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: int = Field(alias="employeeId")
    reviewer_id: int = Field(alias="reviewerId")
    rating: int = Field(ge=1, le=5)
    comments: str


class Feedback360Response(BaseModel):
    feedback_id: int
    rating: int
    comments: str
    reviewer_id: int
    reviewer_name: str
    feedback_date: Optional[datetime] = None
