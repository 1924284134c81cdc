from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.cycle import CycleCreate, CycleResponse, CycleStatusUpdate
from app.schemas.rating import CalculateRatingsRequest, FinalRatingResponse, FinalRatingUpdate
from app.services.cycle_service import CycleService
from app.services.finalization_service import FinalizationService

router = APIRouter(prefix="/hr", tags=["hr"])


@router.get("/cycles", response_model=List[CycleResponse])
def list_cycles(db: Session = Depends(get_db)):
    return [
        {
            "cycle_id": c.id,
            "cycle_name": c.name,
            "start_date": c.start_date,
            "end_date": c.end_date,
            "status": c.status,
            "created_at": c.created_at,
        }
        for c in CycleService(db).list_cycles()
    ]


@router.post("/cycles", status_code=status.HTTP_201_CREATED)
def create_cycle(payload: CycleCreate, db: Session = Depends(get_db)):
    cycle = CycleService(db).create_cycle(
        payload.cycle_name, payload.start_date, payload.end_date, actor_id=payload.hr_id
    )
    return {"message": "Cycle created successfully.", "cycleId": cycle.id}


@router.put("/cycles/{cycle_id}/status")
def set_cycle_status(cycle_id: int, payload: CycleStatusUpdate, db: Session = Depends(get_db)):
    cycle = CycleService(db).set_cycle_status(cycle_id, payload.new_status, actor_id=payload.hr_id)
    return {"message": f"Cycle {cycle.id} status updated to {cycle.status}."}


@router.post("/calculate-ratings")
def calculate_ratings(payload: CalculateRatingsRequest, db: Session = Depends(get_db)):
    ratings = FinalizationService(db).calculate_ratings(payload.cycle_id, actor_id=payload.hr_id)
    return {
        "message": f"Final ratings calculation completed successfully for Cycle ID {payload.cycle_id}.",
        "ratings": len(ratings),
    }


@router.get("/final-ratings/{cycle_id}", response_model=List[FinalRatingResponse])
def list_final_ratings(cycle_id: int, db: Session = Depends(get_db)):
    return FinalizationService(db).list_final_ratings(cycle_id)


@router.put("/final-ratings/{rating_id}")
def update_final_rating(rating_id: int, payload: FinalRatingUpdate, db: Session = Depends(get_db)):
    FinalizationService(db).update_final_rating(
        rating_id, payload.final_rank, payload.final_comments, actor_id=payload.hr_id
    )
    return {"message": "Final rank and comments saved successfully."}
