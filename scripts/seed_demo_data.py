import sys
import os
import logging
from datetime import date
from sqlalchemy.orm import Session

# Ensure we can import app modules
sys.path.append(os.getcwd())

from app.database import SessionLocal, init_db
from app.core.init_system import seed_reference_data
from app.models.appraisal_cycle import AppraisalCycle, CycleStatus
from app.models.department import Department
from app.models.employee import Employee
from app.models.role import Role, RoleCode
from app.services.auth import RegistrationService
from app.services.cycle_service import CycleService
from app.services.employee_service import EmployeeService

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("Harriet Hughes", "hr@example.com", "HrAdmin123!", RoleCode.HR, "Human Resources"),
    ("Marcus Reed", "manager@example.com", "Manager123!", RoleCode.MANAGER, "Engineering"),
    ("Elena Park", "employee@example.com", "Employee123!", RoleCode.EMPLOYEE, "Engineering"),
    ("Tomas Silva", "peer@example.com", "Employee123!", RoleCode.EMPLOYEE, "Engineering"),
]

DEMO_CYCLE = ("FY Demo", date(date.today().year, 1, 1), date(date.today().year, 12, 31))


def create_user(db: Session, name, email, password, role_code, department_name):
    existing_user = db.query(Employee).filter(Employee.email == email).first()
    if existing_user:
        logger.warning(f"User '{email}' already exists. Skipping.")
        return existing_user

    role = db.query(Role).filter(Role.code == role_code).one()
    department = db.query(Department).filter(Department.name == department_name).one()
    employee = RegistrationService(db).register(name, email, password, role.id, department.id)
    logger.info(f"Created {role_code.value} -> {email}")
    return employee


def seed_demo_data():
    init_db()
    db: Session = SessionLocal()
    try:
        seed_reference_data(db)
        users = {
            role_code: create_user(db, name, email, password, role_code, department)
            for name, email, password, role_code, department in DEMO_USERS
        }
        manager = users[RoleCode.MANAGER]
        for employee in db.query(Employee).join(Role).filter(Role.code == RoleCode.EMPLOYEE).all():
            if employee.manager_id is None:
                EmployeeService(db).update_manager(employee.id, manager.id)

        cycles = CycleService(db)
        name, start, end = DEMO_CYCLE
        cycle = db.query(AppraisalCycle).filter(AppraisalCycle.name == name).first()
        if cycle is None:
            cycle = cycles.create_cycle(name, start, end, actor_id=users[RoleCode.HR].id)
        if cycle.status != CycleStatus.ACTIVE.value:
            cycles.set_cycle_status(cycle.id, CycleStatus.ACTIVE.value, actor_id=users[RoleCode.HR].id)

        logger.info(f"Demo data ready. Active cycle: {name}")
        for _, email, password, role_code, _ in DEMO_USERS:
            logger.info(f"{role_code.value:<9} {email} / {password}")
    except Exception as e:
        logger.error(f"Error seeding demo data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo_data()
