"""
Warden request workflow tests.
- one pending request per user
- approve promotes the requester, reject locks the account
- both decisions are audited

"""

import pytest
from sqlalchemy.exc import IntegrityError

from app.db.base import utcnow
from app.models.user import ApprovalStatus, Role
from app.models.warden_request import WardenRequest
from app.services import warden_requests as request_service
from app.services.warden_requests import ALREADY_PENDING_MESSAGE
from tests.helpers import (
    create_admin_in_db,
    create_student_in_db,
    create_warden_in_db,
    get_user,
    headers_for,
)


def test_submit_once_and_read_back(client, db):
    student = create_student_in_db(db)
    h = headers_for(student)

    r = client.get("/warden-requests/my-request", headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["data"] is None

    r = client.post("/warden-requests", headers=h)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["status"] == "pending"
    assert data["email"] == student.email
    assert data["college_id"] == student.college_id

    r = client.post("/warden-requests", headers=h)
    assert r.status_code == 400
    assert r.json()["message"] == ALREADY_PENDING_MESSAGE

    r = client.get("/warden-requests/my-request", headers=h)
    assert r.json()["data"]["id"] == data["id"]


def test_wardens_and_admins_cannot_request(client, db):
    r = client.post("/warden-requests", headers=headers_for(create_warden_in_db(db)))
    assert r.status_code == 400
    assert r.json()["message"] == "You already have warden access"

    r = client.post("/warden-requests", headers=headers_for(create_admin_in_db(db)))
    assert r.status_code == 400


def test_approve_promotes_requester(client, db):
    admin = create_admin_in_db(db)
    student = create_student_in_db(db)
    req = client.post("/warden-requests", headers=headers_for(student)).json()["data"]

    listing = client.get("/warden-requests", headers=headers_for(admin), params={"status": "pending"})
    assert listing.status_code == 200, listing.text
    assert listing.json()["count"] == 1
    assert listing.json()["stats"]["pending"] == 1

    r = client.put(f"/warden-requests/{req['id']}/approve", headers=headers_for(admin), json={"notes": "ok"})
    assert r.status_code == 200, r.text
    body = r.json()["data"]
    assert body["request"]["status"] == "approved"
    assert body["request"]["reviewed_by"] == str(admin.id)
    assert body["request"]["review_notes"] == "ok"
    assert body["user"]["role"] == "warden"

    user = get_user(db, student.id)
    assert user.role == Role.WARDEN
    assert user.approval_status == ApprovalStatus.APPROVED

    # decided requests stay decided
    r = client.put(f"/warden-requests/{req['id']}/reject", headers=headers_for(admin))
    assert r.status_code == 400

    logs = client.get("/admin/logs", headers=headers_for(admin)).json()["data"]
    assert logs[0]["action"] == "APPROVE_WARDEN_REQUEST"
    assert logs[0]["before_role"] == "student"
    assert logs[0]["after_role"] == "warden"


def test_reject_locks_requester_out(client, db):
    admin = create_admin_in_db(db)
    student = create_student_in_db(db)
    req = client.post("/warden-requests", headers=headers_for(student)).json()["data"]

    r = client.put(
        f"/warden-requests/{req['id']}/reject", headers=headers_for(admin), json={"reason": "Not eligible"}
    )
    assert r.status_code == 200, r.text
    body = r.json()["data"]
    assert body["request"]["status"] == "rejected"
    assert body["request"]["review_notes"] == "Not eligible"
    assert body["user"]["approval_status"] == "rejected"
    assert body["user"]["rejection_reason"] == "Not eligible"

    r = client.get("/auth/me", headers=headers_for(student))
    assert r.status_code == 401
    assert r.json()["message"] == "Your account is rejected. Access denied."

    logs = client.get("/admin/logs", headers=headers_for(admin)).json()["data"]
    assert logs[0]["action"] == "REJECT_WARDEN_REQUEST"


def test_only_admin_reviews(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)
    req = client.post("/warden-requests", headers=headers_for(student)).json()["data"]

    assert client.get("/warden-requests", headers=headers_for(warden)).status_code == 403
    r = client.put(f"/warden-requests/{req['id']}/approve", headers=headers_for(warden))
    assert r.status_code == 403

    db.expire_all()
    assert db.query(WardenRequest).one().status == ApprovalStatus.PENDING


def test_new_request_allowed_after_decision(client, db):
    admin = create_admin_in_db(db)
    student = create_student_in_db(db)
    req = client.post("/warden-requests", headers=headers_for(student)).json()["data"]
    client.put(f"/warden-requests/{req['id']}/reject", headers=headers_for(admin))

    # the rejected account is locked; an admin re-approves it
    user = get_user(db, student.id)
    user.approval_status = ApprovalStatus.APPROVED
    db.commit()

    r = client.post("/warden-requests", headers=headers_for(student))
    assert r.status_code == 201, r.text
    assert db.query(WardenRequest).count() == 2


def _pending_request(user) -> WardenRequest:
    return WardenRequest(
        user_id=user.id,
        name=user.name,
        email=user.email,
        college_id=user.college_id,
        status=ApprovalStatus.PENDING,
        requested_at=utcnow(),
    )


def test_store_allows_one_pending_request_per_user(db):
    student = create_student_in_db(db)
    db.add(_pending_request(student))
    db.commit()

    db.add(_pending_request(student))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    # decided requests do not count against the index
    first = db.query(WardenRequest).one()
    first.status = ApprovalStatus.REJECTED
    db.commit()
    db.add(_pending_request(student))
    db.commit()
    assert db.query(WardenRequest).count() == 2


def test_concurrent_submit_reports_already_pending(client, db, monkeypatch):
    student = create_student_in_db(db)
    # another request landed after the service's pending lookup
    db.add(_pending_request(student))
    db.commit()

    def submit_without_lookup(session, *, user):
        req = _pending_request(user)
        session.add(req)
        return req

    monkeypatch.setattr(request_service, "submit_request", submit_without_lookup)

    r = client.post("/warden-requests", headers=headers_for(student))
    assert r.status_code == 400
    assert r.json()["message"] == ALREADY_PENDING_MESSAGE

    db.expire_all()
    assert db.query(WardenRequest).count() == 1
