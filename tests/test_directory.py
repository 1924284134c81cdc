import pytest
from app.core.exceptions import NotFoundError, ValidationError
from app.models import AuditLog, Employee, RoleCode
from app.services.employee_service import EmployeeService


def test_profile(db_session, employee, manager):
    profile = EmployeeService(db_session).get_profile(employee.id)
    assert profile["employee_name"] == "Evan Employee"
    assert profile["role"] == "EMPLOYEE"
    assert profile["manager_name"] == "Maria Manager"


def test_profile_unknown_employee(db_session):
    with pytest.raises(NotFoundError):
        EmployeeService(db_session).get_profile(999)


def test_list_managers(db_session, manager, employee, hr_user, make_employee):
    make_employee("Aaron Lead", role=RoleCode.MANAGER)
    names = [m.name for m in EmployeeService(db_session).list_managers()]
    assert names == ["Aaron Lead", "Maria Manager"]


def test_update_manager(db_session, employee, manager, make_employee):
    new_manager = make_employee("Nora New", role=RoleCode.MANAGER)
    EmployeeService(db_session).update_manager(employee.id, new_manager.id)

    db_session.expire_all()
    assert db_session.get(Employee, employee.id).manager_id == new_manager.id
    log = db_session.query(AuditLog).filter(AuditLog.action == "manager_changed").one()
    assert log.before_state == {"manager_id": manager.id}
    assert log.after_state == {"manager_id": new_manager.id}
    assert log.details["acknowledged_by_manager"] is False


def test_update_manager_rejects_self(db_session, employee):
    with pytest.raises(ValidationError):
        EmployeeService(db_session).update_manager(employee.id, employee.id)


def test_update_manager_unknown_manager_leaves_row(db_session, employee, manager):
    with pytest.raises(NotFoundError):
        EmployeeService(db_session).update_manager(employee.id, 999)
    db_session.expire_all()
    assert db_session.get(Employee, employee.id).manager_id == manager.id
    assert db_session.query(AuditLog).count() == 0


# --- HTTP surface ---

def test_roles_and_departments_api(client):
    roles = client.get("/api/employee/roles").json()
    assert [r["role_name"] for r in roles] == ["System Admin", "HR", "Manager", "Employee"]

    departments = client.get("/api/employee/departments").json()
    assert [d["department_name"] for d in departments] == [
        "Engineering", "Human Resources", "Finance", "Operations",
    ]


def test_profile_api(client, employee):
    resp = client.get(f"/api/employee/profile/{employee.id}")
    assert resp.status_code == 200
    assert resp.json()["employee_email"] == employee.email

    resp = client.get("/api/employee/profile/999")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_managers_list_api(client, manager, employee):
    body = client.get("/api/employee/managers-list").json()
    assert body == [{"employee_id": manager.id, "employee_name": "Maria Manager", "department_id": 1}]


def test_update_manager_api(client, employee, make_employee):
    new_manager = make_employee("Nora New", role=RoleCode.MANAGER)
    resp = client.put(
        "/api/employee/update-manager",
        json={"employeeId": employee.id, "newManagerId": new_manager.id},
    )
    assert resp.status_code == 200
    profile = client.get(f"/api/employee/profile/{employee.id}").json()
    assert profile["manager_name"] == "Nora New"


def test_update_manager_api_missing_field(client, employee):
    resp = client.put("/api/employee/update-manager", json={"employeeId": employee.id})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
