from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging
from app.core.config import settings
from app.core.limiter import limiter
from app.database import get_db
from app.schemas.auth import LoginRequest, LoginResponse, SignupRequest
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    employee = auth_service.authenticate(db, login_data.email, login_data.password)
    logger.info(f"Employee {employee.id} logged in")
    return {
        "status": "ok",
        "user": {
            "id": employee.id,
            "name": employee.name,
            "role": employee.role.name if employee.role else None,
        },
    }


@router.post("/signup")
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    auth_service.RegistrationService(db).register(
        name=payload.employee_name.strip(),
        email=payload.employee_email,
        password=payload.password,
        role_id=payload.role_id,
        department_id=payload.department_id,
    )
    return {"status": "ok", "message": "User registered successfully"}
