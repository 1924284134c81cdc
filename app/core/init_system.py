import logging
from sqlalchemy.orm import Session
from app.core.config import settings
from app.database import SessionLocal
from app.models.department import Department
from app.models.role import Role, RoleCode

logger = logging.getLogger(__name__)

DEFAULT_ROLES = [
    (RoleCode.ADMIN, "System Admin"),
    (RoleCode.HR, "HR"),
    (RoleCode.MANAGER, "Manager"),
    (RoleCode.EMPLOYEE, "Employee"),
]

DEFAULT_DEPARTMENTS = ["Engineering", "Human Resources", "Finance", "Operations"]


def seed_reference_data(db: Session) -> None:
    """Insert missing roles and departments. Safe to run repeatedly."""
    existing_roles = {r.code for r in db.query(Role).all()}
    for code, name in DEFAULT_ROLES:
        if code not in existing_roles:
            db.add(Role(code=code, name=name))

    existing_departments = {d.name for d in db.query(Department).all()}
    for name in DEFAULT_DEPARTMENTS:
        if name not in existing_departments:
            db.add(Department(name=name))

    db.commit()


def init_system_data():
    """
    Checks if the system needs initialization.
    Seeds the role and department catalogues used by signup and the peer selector.
    """
    if not settings.seed_reference_data:
        logger.info("Reference data seeding disabled.")
        return
    db = SessionLocal()
    try:
        seed_reference_data(db)
        logger.info(
            f"System initialization check: {db.query(Role).count()} role(s), "
            f"{db.query(Department).count()} department(s)."
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
