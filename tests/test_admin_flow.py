"""
Admin account management tests.
- pending list, approve / reject with audit log
- role changes and their safety rules
- activation toggle

"""

from app.models.user import ApprovalStatus, Role
from tests.helpers import (
    PASSWORD,
    create_admin_in_db,
    create_student_in_db,
    create_warden_in_db,
    get_user,
    headers_for,
)


def test_pending_warden_approve_then_login(client, db):
    admin = create_admin_in_db(db)
    warden = create_warden_in_db(db, approval_status=ApprovalStatus.PENDING)
    h = headers_for(admin)

    r = client.get("/admin/users/pending", headers=h)
    assert r.status_code == 200, r.text
    assert [u["id"] for u in r.json()["data"]] == [str(warden.id)]

    r = client.post(f"/admin/users/{warden.id}/approve", headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["approval_status"] == "approved"

    # second decision on the same account is refused
    r = client.post(f"/admin/users/{warden.id}/approve", headers=h)
    assert r.status_code == 400

    r = client.post("/auth/login", json={"email": warden.email, "password": PASSWORD})
    assert r.status_code == 200, r.text

    logs = client.get("/admin/logs", headers=h)
    assert logs.status_code == 200, logs.text
    entry = logs.json()["data"][0]
    assert entry["action"] == "APPROVE_USER"
    assert entry["actor"]["id"] == str(admin.id)
    assert entry["target"]["id"] == str(warden.id)


def test_reject_with_default_reason(client, db):
    admin = create_admin_in_db(db)
    warden = create_warden_in_db(db, approval_status=ApprovalStatus.PENDING)

    r = client.post(f"/admin/users/{warden.id}/reject", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["approval_status"] == "rejected"
    assert r.json()["data"]["rejection_reason"] == "Rejected by admin"

    r = client.post("/auth/login", json={"email": warden.email, "password": PASSWORD})
    assert r.status_code == 403
    assert r.json()["rejection_reason"] == "Rejected by admin"


def test_set_role_rules(client, db):
    admin = create_admin_in_db(db)
    other_admin = create_admin_in_db(db)
    student = create_student_in_db(db)
    h = headers_for(admin)

    r = client.patch(f"/admin/users/{student.id}/set_role", headers=h, json={"role": "warden"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["before_role"] == "student"
    assert r.json()["data"]["after_role"] == "warden"
    assert get_user(db, student.id).role == Role.WARDEN

    r = client.patch(f"/admin/users/{student.id}/set_role", headers=h, json={"role": "warden"})
    assert r.status_code == 400

    r = client.patch(f"/admin/users/{student.id}/set_role", headers=h, json={"role": "admin"})
    assert r.status_code == 403

    r = client.patch(f"/admin/users/{other_admin.id}/set_role", headers=h, json={"role": "student"})
    assert r.status_code == 403

    r = client.patch(f"/admin/users/{admin.id}/set_role", headers=h, json={"role": "warden"})
    assert r.status_code == 400

    r = client.patch(f"/admin/users/{student.id}/set_role", headers=h, json={"role": "superuser"})
    assert r.status_code == 400


def test_deactivate_blocks_access(client, db):
    admin = create_admin_in_db(db)
    student = create_student_in_db(db)
    h = headers_for(admin)

    r = client.patch(f"/admin/users/{student.id}/active", headers=h, json={"is_active": False})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["is_active"] is False

    r = client.get("/auth/me", headers=headers_for(student))
    assert r.status_code == 401
    assert r.json()["message"] == "Your account has been deactivated"

    r = client.patch(f"/admin/users/{admin.id}/active", headers=h, json={"is_active": False})
    assert r.status_code == 400

    r = client.patch(f"/admin/users/{student.id}/active", headers=h, json={"is_active": True})
    assert r.status_code == 200, r.text
    assert client.get("/auth/me", headers=headers_for(student)).status_code == 200


def test_admin_routes_require_admin(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)

    r = client.get("/admin/users/pending", headers=headers_for(warden))
    assert r.status_code == 403
    assert r.json()["message"] == "User role 'warden' is not authorized to access this route"

    # staff may read the user list
    r = client.get("/admin/users", headers=headers_for(warden), params={"role": "student"})
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 1

    r = client.get("/admin/users", headers=headers_for(student))
    assert r.status_code == 403
