import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AppException, StorageError, NotFoundError, AccessDeniedError
from app.models.employee import Employee
from app.models.role import RoleCode


class BaseService:
    """
    Common plumbing for domain services: session access, logging helpers
    and the transaction boundary used by every mutating operation.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    # --- Logging helpers ---
    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)

    def log_error(self, message: str, exc_info: bool = False, **extra):
        self._logger.error(message, exc_info=exc_info, extra=extra or None)

    # --- Transaction boundary ---
    @contextmanager
    def atomic(self, operation: str) -> Iterator[Session]:
        """
        Run guards and writes as one unit of work.
        Commits on success; rolls back on every failure path before the error leaves.
        """
        try:
            yield self.db
            self.db.commit()
        except AppException as e:
            self.db.rollback()
            self.log_info(f"{operation} rejected: {e.error_code}", error_code=e.error_code)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            self.log_error(f"{operation} failed at the storage layer: {e}", exc_info=True)
            raise StorageError() from e
        except Exception:
            self.db.rollback()
            raise

    # --- Shared lookups ---
    def get_employee(self, employee_id: int, lock: bool = False) -> Employee:
        query = self.db.query(Employee).filter(Employee.id == employee_id)
        if lock:
            # Row lock serialises concurrent writers for this employee (no-op on SQLite)
            query = query.with_for_update()
        employee = query.first()
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found.")
        return employee

    def require_role(self, actor_id: int, allowed: Iterable[RoleCode]) -> Employee:
        actor = self.get_employee(actor_id)
        allowed = list(allowed)
        if actor.role_code not in allowed:
            raise AccessDeniedError(
                f"Access denied. Required roles: {[r.value for r in allowed]}"
            )
        return actor

    @staticmethod
    def role_value(employee: Optional[Employee]) -> Optional[str]:
        if employee is None or employee.role_code is None:
            return None
        return employee.role_code.value
