from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class RoleResponse(BaseModel):
    role_id: int
    role_name: str


class DepartmentResponse(BaseModel):
    department_id: int
    department_name: str


class EmployeeSummary(BaseModel):
    employee_id: int
    employee_name: str
    department_id: Optional[int] = None


class ProfileResponse(BaseModel):
    employee_id: int
    employee_name: str
    employee_email: str
    role: Optional[str] = None
    department_id: Optional[int] = None
    manager_id: Optional[int] = None
    manager_name: Optional[str] = None


class ManagerUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: int = Field(alias="employeeId")
    new_manager_id: int = Field(alias="newManagerId")
