import sqlite3

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import DuplicateFeedbackError, NoActiveCycleError, SelfReviewError, StorageError
from app.models import AuditLog, Feedback360, RoleCode
from app.services.feedback_service import FeedbackService, is_duplicate_feedback


@pytest.fixture
def peer(make_employee, manager):
    return make_employee("Paula Peer", manager=manager)


def test_submit_feedback(db_session, employee, peer, active_cycle):
    fb = FeedbackService(db_session).submit_feedback(employee.id, peer.id, 4, "Great collaborator")
    assert fb.cycle_id == active_cycle.id
    log = db_session.query(AuditLog).filter(AuditLog.action == "feedback_360_submitted").one()
    assert log.user_id == peer.id


def test_self_review_rejected_before_write(db_session, employee, active_cycle):
    with pytest.raises(SelfReviewError):
        FeedbackService(db_session).submit_feedback(employee.id, employee.id, 5, "I am great")
    assert db_session.query(Feedback360).count() == 0


def test_duplicate_feedback_rejected_and_first_kept(db_session, employee, peer, active_cycle):
    service = FeedbackService(db_session)
    first = service.submit_feedback(employee.id, peer.id, 4, "First take")

    with pytest.raises(DuplicateFeedbackError):
        service.submit_feedback(employee.id, peer.id, 1, "Changed my mind")

    rows = db_session.query(Feedback360).all()
    assert len(rows) == 1
    assert rows[0].id == first.id
    assert rows[0].rating == 4
    assert rows[0].comments == "First take"


def test_same_reviewer_may_review_again_next_cycle(db_session, employee, peer, active_cycle, make_cycle):
    service = FeedbackService(db_session)
    service.submit_feedback(employee.id, peer.id, 4, "Cycle one")
    later = make_cycle("Next year")
    service.submit_feedback(employee.id, peer.id, 5, "Cycle two", cycle_id=later.id)
    assert db_session.query(Feedback360).count() == 2


def test_feedback_requires_active_cycle(db_session, employee, peer):
    with pytest.raises(NoActiveCycleError):
        FeedbackService(db_session).submit_feedback(employee.id, peer.id, 3, "No cycle")


def test_list_feedback_newest_first(db_session, employee, peer, make_employee, active_cycle):
    another = make_employee("Nina Newer")
    service = FeedbackService(db_session)
    service.submit_feedback(employee.id, peer.id, 3, "older")
    service.submit_feedback(employee.id, another.id, 5, "newer")

    items = service.list_feedback_for(employee.id, active_cycle.id)
    assert [i["reviewer_name"] for i in items] == ["Nina Newer", "Paula Peer"]


def test_eligible_peers_exclude_staff_roles(db_session, employee, peer, manager, hr_user, make_employee):
    make_employee("Adam Admin", role=RoleCode.ADMIN)
    names = [e.name for e in FeedbackService(db_session).list_eligible_peers()]
    assert names == ["Evan Employee", "Paula Peer"]


def test_eligible_peers_custom_exclusion(db_session, employee, manager):
    names = [e.name for e in FeedbackService(db_session).list_eligible_peers(["EMPLOYEE"])]
    assert names == ["Maria Manager"]


# --- HTTP surface ---

def _submit(client, subject, reviewer, rating=4):
    return client.post(
        "/api/employee/submit-360-feedback",
        json={"employeeId": subject.id, "reviewerId": reviewer.id, "rating": rating, "comments": "Solid"},
    )


def test_feedback_api(client, employee, peer, active_cycle):
    assert _submit(client, employee, peer).status_code == 201

    resp = _submit(client, employee, peer)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_FEEDBACK"

    resp = _submit(client, employee, employee)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "SELF_REVIEW"

    listing = client.get(f"/api/manager/360-feedback/{employee.id}").json()
    assert len(listing) == 1
    assert listing[0]["reviewer_name"] == "Paula Peer"


def test_feedback_api_rating_out_of_range(client, employee, peer, active_cycle):
    resp = _submit(client, employee, peer, rating=9)
    assert resp.status_code == 400


def test_all_employees_api(client, employee, peer, hr_user):
    names = [e["employee_name"] for e in client.get("/api/employee/all-employees").json()]
    assert names == ["Evan Employee", "Paula Peer"]


class _PostgresDiag:
    def __init__(self, constraint_name):
        self.constraint_name = constraint_name


class _PostgresError(Exception):
    def __init__(self, constraint_name):
        super().__init__(f'violates constraint "{constraint_name}"')
        self.diag = _PostgresDiag(constraint_name)


def _integrity_error(orig):
    return IntegrityError("INSERT INTO feedback_360 ...", {}, orig)


def test_only_the_uniqueness_violation_counts_as_duplicate():
    assert is_duplicate_feedback(_integrity_error(sqlite3.IntegrityError(
        "UNIQUE constraint failed: feedback_360.employee_id, feedback_360.reviewer_id, feedback_360.cycle_id"
    )))
    assert is_duplicate_feedback(_integrity_error(_PostgresError("uq_feedback_360_reviewer_cycle")))

    assert not is_duplicate_feedback(_integrity_error(sqlite3.IntegrityError(
        "CHECK constraint failed: ck_feedback_360_not_self"
    )))
    assert not is_duplicate_feedback(_integrity_error(sqlite3.IntegrityError("FOREIGN KEY constraint failed")))
    assert not is_duplicate_feedback(_integrity_error(_PostgresError("feedback_360_cycle_id_fkey")))


@pytest.fixture
def enforced_foreign_keys(db_session):
    db_session.execute(text("PRAGMA foreign_keys=ON"))
    yield
    db_session.rollback()
    db_session.execute(text("PRAGMA foreign_keys=OFF"))
    db_session.commit()


def test_other_integrity_failures_are_storage_errors(db_session, employee, peer, active_cycle, enforced_foreign_keys):
    with pytest.raises(StorageError):
        FeedbackService(db_session).submit_feedback(employee.id, peer.id, 4, "Unknown cycle", cycle_id=999)
    assert db_session.query(Feedback360).count() == 0
