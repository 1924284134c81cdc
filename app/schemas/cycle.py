from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime


class CycleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hr_id: int = Field(alias="hrId")
    cycle_name: str = Field(alias="cycleName")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")


class CycleStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hr_id: int = Field(alias="hrId")
    new_status: str = Field(alias="newStatus")


class CycleResponse(BaseModel):
    cycle_id: int
    cycle_name: str
    start_date: date
    end_date: date
    status: str
    created_at: Optional[datetime] = None
