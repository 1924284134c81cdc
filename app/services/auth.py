"""
Credential handling. Passwords are only ever stored and compared as bcrypt hashes.
"""
import logging

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ValidationError
from app.models.department import Department
from app.models.employee import Employee
from app.models.role import Role
from app.services.audit import AuditService
from app.services.base import BaseService

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Not a recognised hash (e.g. a legacy plaintext value): never compare it directly
        logger.warning("Stored credential is not a valid hash; rejecting login")
        return False


def authenticate(db: Session, email: str, password: str) -> Employee:
    employee = db.query(Employee).filter(Employee.email == email).first()
    if employee is None or not verify_password(password, employee.hashed_password):
        logger.info("Authentication failed: invalid credentials")
        raise AuthenticationError()
    if not employee.is_active:
        logger.info(f"Authentication failed: employee {employee.id} is inactive")
        raise AuthenticationError("User is inactive")
    return employee


class RegistrationService(BaseService):

    def register(self, name: str, email: str, password: str, role_id: int, department_id: int) -> Employee:
        with self.atomic("signup"):
            if self.db.get(Role, role_id) is None:
                raise ValidationError(f"Unknown role_id {role_id}.")
            if self.db.get(Department, department_id) is None:
                raise ValidationError(f"Unknown department_id {department_id}.")
            if self.db.query(Employee).filter(Employee.email == email).first():
                raise ValidationError("Email is already registered.")

            employee = Employee(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                role_id=role_id,
                department_id=department_id,
                manager_id=None,
            )
            self.db.add(employee)
            try:
                self.db.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent signup for the same address
                raise ValidationError("Email is already registered.") from e

            AuditService.log(
                self.db,
                action="employee_registered",
                entity_type="employee",
                entity_id=employee.id,
                user_id=employee.id,
                user_role=None,
                details={"email": email, "role_id": role_id, "department_id": department_id},
            )
        self.log_info(f"Registered employee {employee.id}")
        return employee
