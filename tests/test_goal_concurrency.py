import threading
import time
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import WeightageExceededError
from app.core.init_system import seed_reference_data
from app.database import Base, use_immediate_transactions
from app.models import AppraisalCycle, CycleStatus, Employee, Goal, Role, RoleCode
from app.services import auth as auth_service
from app.services.goal_service import GoalService


@pytest.fixture
def file_db(tmp_path):
    """A file-backed SQLite database configured like the application engine."""
    engine = use_immediate_transactions(create_engine(
        f"sqlite:///{tmp_path / 'apas_concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    ))
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield Session
    engine.dispose()


@pytest.fixture
def employee_at_70_percent(file_db):
    session = file_db()
    try:
        seed_reference_data(session)
        roles = {r.code: r.id for r in session.query(Role).all()}
        manager = Employee(
            name="Maria Manager", email="manager@apascorp.com",
            hashed_password=auth_service.get_password_hash("Password123!"),
            role_id=roles[RoleCode.MANAGER], department_id=1,
        )
        session.add(manager)
        session.flush()
        employee = Employee(
            name="Evan Employee", email="employee@apascorp.com",
            hashed_password=manager.hashed_password,
            role_id=roles[RoleCode.EMPLOYEE], department_id=1, manager_id=manager.id,
        )
        session.add(employee)
        session.add(AppraisalCycle(
            name="FY2025", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31),
            status=CycleStatus.ACTIVE.value,
        ))
        session.commit()
        employee_id = employee.id
    finally:
        session.close()

    base = file_db()
    try:
        GoalService(base).create_goal(employee_id, "Baseline", None, 70)
    finally:
        base.close()
    return employee_id


def test_concurrent_submissions_cannot_overspend_budget(file_db, employee_at_70_percent, monkeypatch):
    original_read = GoalService.get_current_weightage

    def slow_read(self, *args, **kwargs):
        total = original_read(self, *args, **kwargs)
        # Hold the window between the budget read and the insert open
        time.sleep(0.3)
        return total

    monkeypatch.setattr(GoalService, "get_current_weightage", slow_read)

    start = threading.Barrier(2)
    results = []
    lock = threading.Lock()

    def submit():
        session = file_db()
        try:
            start.wait()
            GoalService(session).create_goal(employee_at_70_percent, "parallel", None, 30)
            outcome = "ok"
        except WeightageExceededError:
            outcome = "exceeded"
        except Exception as e:
            outcome = repr(e)
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=submit) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(results) == ["exceeded", "ok"]

    monkeypatch.undo()
    session = file_db()
    try:
        goals = session.query(Goal).filter(Goal.employee_id == employee_at_70_percent).all()
        assert len(goals) == 2
        assert sum(float(g.weightage) for g in goals) == 100.0
    finally:
        session.close()
