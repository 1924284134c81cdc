from typing import Any, Dict, List

from app.core.exceptions import ValidationError
from app.models.department import Department
from app.models.employee import Employee
from app.models.role import Role, RoleCode
from app.services.audit import AuditService
from app.services.base import BaseService


class EmployeeService(BaseService):
    """Employee directory and the reporting line."""

    def get_profile(self, employee_id: int) -> Dict[str, Any]:
        employee = self.get_employee(employee_id)
        return {
            "employee_id": employee.id,
            "employee_name": employee.name,
            "employee_email": employee.email,
            "role": self.role_value(employee),
            "department_id": employee.department_id,
            "manager_id": employee.manager_id,
            "manager_name": employee.manager.name if employee.manager else None,
        }

    def list_managers(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .join(Role, Employee.role_id == Role.id)
            .filter(Role.code == RoleCode.MANAGER)
            .order_by(Employee.name)
            .all()
        )

    def list_roles(self) -> List[Role]:
        return self.db.query(Role).order_by(Role.id).all()

    def list_departments(self) -> List[Department]:
        return self.db.query(Department).order_by(Department.id).all()

    def update_manager(self, employee_id: int, new_manager_id: int) -> Employee:
        """
        Reassign the reporting manager. The employee acts alone here; the new manager
        is not asked to acknowledge the change.
        """
        if int(employee_id) == int(new_manager_id):
            raise ValidationError("An employee cannot report to themselves.")

        with self.atomic("update_manager"):
            employee = self.get_employee(employee_id, lock=True)
            manager = self.get_employee(new_manager_id)
            before = {"manager_id": employee.manager_id}
            employee.manager_id = manager.id
            self.db.flush()

            AuditService.log(
                self.db,
                action="manager_changed",
                entity_type="employee",
                entity_id=employee.id,
                user_id=employee.id,
                user_role=self.role_value(employee),
                details={"acknowledged_by_manager": False},
                before_state=before,
                after_state={"manager_id": employee.manager_id},
            )
        self.log_warning(
            f"Employee {employee_id} changed reporting manager to {new_manager_id} without manager acknowledgement"
        )
        return employee
