from fastapi import APIRouter
from app.routers import employee, manager, hr

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(employee.router, tags=["Employee"])
api_router.include_router(manager.router, tags=["Manager"])
api_router.include_router(hr.router, tags=["HR"])
