from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CalculateRatingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hr_id: int = Field(alias="hrId")
    cycle_id: int = Field(alias="cycleId")


class FinalRatingUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hr_id: int = Field(alias="hrId")
    final_rank: str = Field(alias="finalRank")
    final_comments: Optional[str] = Field(default=None, alias="finalComments")


class FinalRatingResponse(BaseModel):
    rating_id: int
    employee_id: int
    employee_name: str
    cycle_id: int
    weighted_score: float
    final_rank: Optional[str] = None
    final_comments: Optional[str] = None
