import pytest
from datetime import date
from app.core.exceptions import AccessDeniedError, NoActiveCycleError, NotFoundError, ValidationError
from app.models import AppraisalCycle, AuditLog, CycleStatus
from app.services.cycle_service import CycleService


def test_create_cycle_starts_inactive(db_session, hr_user):
    cycle = CycleService(db_session).create_cycle("FY2026", date(2026, 1, 1), date(2026, 12, 31), actor_id=hr_user.id)
    assert cycle.status == CycleStatus.INACTIVE.value
    log = db_session.query(AuditLog).filter(AuditLog.action == "cycle_created").one()
    assert log.user_id == hr_user.id
    assert log.entity_id == cycle.id


def test_create_cycle_requires_all_fields(db_session, hr_user):
    with pytest.raises(ValidationError):
        CycleService(db_session).create_cycle("", date(2026, 1, 1), date(2026, 12, 31), actor_id=hr_user.id)
    with pytest.raises(ValidationError):
        CycleService(db_session).create_cycle("FY2026", None, date(2026, 12, 31), actor_id=hr_user.id)


def test_create_cycle_requires_hr_role(db_session, employee):
    with pytest.raises(AccessDeniedError):
        CycleService(db_session).create_cycle("FY2026", date(2026, 1, 1), date(2026, 12, 31), actor_id=employee.id)
    assert db_session.query(AppraisalCycle).count() == 0


def test_no_active_cycle(db_session, make_cycle):
    make_cycle("Dormant")
    with pytest.raises(NoActiveCycleError):
        CycleService(db_session).get_active_cycle_id()


def test_activating_cycle_deactivates_previous(db_session, hr_user, make_cycle):
    """cycle 3 active, HR activates cycle 4: exactly one active cycle remains."""
    service = CycleService(db_session)
    first = make_cycle("Cycle A", status=CycleStatus.ACTIVE)
    second = make_cycle("Cycle B")

    service.set_cycle_status(second.id, "active", actor_id=hr_user.id)

    assert service.get_active_cycle_id() == second.id
    db_session.refresh(first)
    assert first.status == CycleStatus.INACTIVE.value
    assert db_session.query(AppraisalCycle).filter(AppraisalCycle.status == "active").count() == 1


def test_reactivating_active_cycle_keeps_single_active(db_session, hr_user, active_cycle):
    service = CycleService(db_session)
    service.set_cycle_status(active_cycle.id, "active", actor_id=hr_user.id)
    assert service.get_active_cycle_id() == active_cycle.id


def test_set_status_unknown_cycle_leaves_active_untouched(db_session, hr_user, active_cycle):
    service = CycleService(db_session)
    with pytest.raises(NotFoundError):
        service.set_cycle_status(9999, "active", actor_id=hr_user.id)
    assert service.get_active_cycle_id() == active_cycle.id


def test_set_status_rejects_unknown_value(db_session, hr_user, active_cycle):
    with pytest.raises(ValidationError):
        CycleService(db_session).set_cycle_status(active_cycle.id, "archived", actor_id=hr_user.id)


def test_close_cycle(db_session, hr_user, active_cycle):
    service = CycleService(db_session)
    service.set_cycle_status(active_cycle.id, "closed", actor_id=hr_user.id)
    with pytest.raises(NoActiveCycleError):
        service.get_active_cycle_id()


# --- HTTP surface ---

def test_cycle_api_flow(client, hr_user):
    resp = client.post(
        "/api/hr/cycles",
        json={"hrId": hr_user.id, "cycleName": "FY2026", "startDate": "2026-01-01", "endDate": "2026-12-31"},
    )
    assert resp.status_code == 201
    cycle_id = resp.json()["cycleId"]

    assert client.get("/api/employee/active-cycle-id").status_code == 404

    resp = client.put(f"/api/hr/cycles/{cycle_id}/status", json={"hrId": hr_user.id, "newStatus": "active"})
    assert resp.status_code == 200
    assert client.get("/api/employee/active-cycle-id").json() == {"cycle_id": cycle_id}

    cycles = client.get("/api/hr/cycles").json()
    assert cycles[0]["cycle_id"] == cycle_id
    assert cycles[0]["status"] == "active"


def test_cycle_api_errors(client, hr_user):
    resp = client.put("/api/hr/cycles/404/status", json={"hrId": hr_user.id, "newStatus": "active"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"

    resp = client.post("/api/hr/cycles", json={"hrId": hr_user.id, "cycleName": "No dates"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_no_active_cycle_api(client):
    resp = client.get("/api/employee/active-cycle-id")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NO_ACTIVE_CYCLE"
