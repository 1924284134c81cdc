import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.main import app
from app.core.init_system import seed_reference_data
from app.models import AppraisalCycle, CycleStatus, Employee, Role, RoleCode
from app.services import auth as auth_service
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123!"
# Hash once; bcrypt is deliberately slow
DEFAULT_PASSWORD_HASH = auth_service.get_password_hash(DEFAULT_PASSWORD)


@pytest.fixture(scope="function", autouse=True)
def setup_database():
    """Fresh schema per test so that real commits and rollbacks can be observed."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(setup_database):
    session = TestingSessionLocal()
    seed_reference_data(session)
    yield session
    session.close()


@pytest.fixture(scope="function")
def make_employee(db_session):
    """Factory for employees of a given role, optionally reporting to a manager."""
    counter = {"n": 0}

    def _make(name=None, role=RoleCode.EMPLOYEE, manager=None, department_id=1):
        counter["n"] += 1
        role_row = db_session.query(Role).filter(Role.code == role).one()
        emp = Employee(
            name=name or f"Employee {counter['n']}",
            email=f"user{counter['n']}@apascorp.com",
            hashed_password=DEFAULT_PASSWORD_HASH,
            role_id=role_row.id,
            department_id=department_id,
            manager_id=manager.id if manager else None,
            is_active=True,
        )
        db_session.add(emp)
        db_session.commit()
        return emp
    return _make


@pytest.fixture(scope="function")
def hr_user(make_employee):
    return make_employee("Helen HR", role=RoleCode.HR)


@pytest.fixture(scope="function")
def manager(make_employee):
    return make_employee("Maria Manager", role=RoleCode.MANAGER)


@pytest.fixture(scope="function")
def employee(make_employee, manager):
    return make_employee("Evan Employee", manager=manager)


@pytest.fixture(scope="function")
def make_cycle(db_session):
    def _make(name="FY Cycle", status=CycleStatus.INACTIVE):
        cycle = AppraisalCycle(
            name=name,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 12, 31),
            status=status.value,
        )
        db_session.add(cycle)
        db_session.commit()
        return cycle
    return _make


@pytest.fixture(scope="function")
def active_cycle(make_cycle):
    return make_cycle("FY2025", status=CycleStatus.ACTIVE)


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
