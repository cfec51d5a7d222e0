"""
Complaint ticket tests.
- ticket id format and initial history
- warden status updates append history; resolved stamped once
- ownership, filters and analytics

"""

import re

from tests.helpers import create_admin_in_db, create_student_in_db, create_warden_in_db, headers_for

TICKET_RE = re.compile(r"^TKT-\d{6}-[0-9A-F]{8}$")


def _submit(client, student, **overrides):
    body = {"category": "plumbing", "description": "Tap in the washroom is leaking badly"}
    body.update(overrides)
    return client.post("/complaints", headers=headers_for(student), json=body)


def test_submit_complaint(client, db):
    student = create_student_in_db(db)

    r = _submit(client, student)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert TICKET_RE.match(data["ticket_id"])
    assert data["status"] == "pending"
    assert data["priority"] == "medium"
    assert len(data["history"]) == 1
    assert data["history"][0]["status"] == "pending"
    assert data["history"][0]["remarks"] == "Complaint submitted"

    r = _submit(client, student, description="short")
    assert r.status_code == 400
    assert r.json()["message"].startswith("description")

    warden = create_warden_in_db(db)
    r = _submit(client, warden)
    assert r.status_code == 403


def test_status_updates_build_history(client, db):
    student = create_student_in_db(db)
    warden = create_warden_in_db(db)
    h = headers_for(warden)
    complaint = _submit(client, student).json()["data"]
    url = f"/complaints/{complaint['id']}"

    r = client.put(url, headers=h, json={"status": "in_progress", "remarks": "Plumber called"})
    assert r.status_code == 200, r.text

    r = client.put(url, headers=h, json={"status": "resolved", "resolution_notes": "Washer replaced"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert [e["status"] for e in data["history"]] == ["pending", "in_progress", "resolved"]
    assert data["history"][1]["remarks"] == "Plumber called"
    assert data["resolved_by"] == str(warden.id)
    resolved_at = data["resolved_at"]
    assert resolved_at is not None

    # a same-status update adds no history
    r = client.put(url, headers=h, json={"status": "resolved"})
    assert len(r.json()["data"]["history"]) == 3

    # reopening and resolving again keeps the first resolution stamp
    client.put(url, headers=h, json={"status": "in_progress"})
    r = client.put(url, headers=h, json={"status": "resolved"})
    assert len(r.json()["data"]["history"]) == 5
    assert r.json()["data"]["resolved_at"] == resolved_at


def test_only_wardens_update_and_delete(client, db):
    student = create_student_in_db(db)
    admin = create_admin_in_db(db)
    complaint = _submit(client, student).json()["data"]

    r = client.put(f"/complaints/{complaint['id']}", headers=headers_for(admin), json={"status": "resolved"})
    assert r.status_code == 403

    r = client.put(f"/complaints/{complaint['id']}", headers=headers_for(student), json={"status": "resolved"})
    assert r.status_code == 403

    warden = create_warden_in_db(db)
    r = client.put(f"/complaints/{complaint['id']}", headers=headers_for(warden), json={})
    assert r.status_code == 400

    r = client.delete(f"/complaints/{complaint['id']}", headers=headers_for(warden))
    assert r.status_code == 200, r.text
    r = client.get(f"/complaints/{complaint['id']}", headers=headers_for(warden))
    assert r.status_code == 404


def test_assign_to_unknown_user(client, db):
    student = create_student_in_db(db)
    warden = create_warden_in_db(db)
    complaint = _submit(client, student).json()["data"]

    r = client.put(
        f"/complaints/{complaint['id']}",
        headers=headers_for(warden),
        json={"assigned_to": "00000000-0000-0000-0000-000000000000"},
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Assignee not found"


def test_ownership_and_listing(client, db):
    student = create_student_in_db(db)
    other = create_student_in_db(db)
    warden = create_warden_in_db(db)

    mine = _submit(client, student).json()["data"]
    _submit(client, student, category="wifi", description="Wifi keeps dropping every evening")
    _submit(client, other, category="wifi", description="No wifi signal on the third floor")

    assert client.get(f"/complaints/{mine['id']}", headers=headers_for(other)).status_code == 403
    assert client.get(f"/complaints/{mine['id']}", headers=headers_for(student)).status_code == 200

    r = client.get("/complaints/my", headers=headers_for(student))
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 2
    assert r.json()["stats"]["pending"] == 2

    r = client.get("/complaints", headers=headers_for(warden), params={"category": "wifi"})
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 2

    r = client.get("/complaints", headers=headers_for(warden))
    assert r.json()["stats"]["by_category"] == {"plumbing": 1, "wifi": 2}

    assert client.get("/complaints", headers=headers_for(student)).status_code == 403


def test_analytics_summary(client, db):
    student = create_student_in_db(db)
    warden = create_warden_in_db(db)
    h = headers_for(warden)

    c1 = _submit(client, student).json()["data"]
    _submit(client, student, category="mess", description="Food was served cold at dinner")
    client.put(f"/complaints/{c1['id']}", headers=h, json={"status": "resolved"})

    r = client.get("/complaints/analytics/summary", headers=h)
    assert r.status_code == 200, r.text
    summary = r.json()["summary"]
    assert summary["total"] == 2
    assert summary["resolved"] == 1
    assert summary["avg_resolution_time_hours"] >= 0
    assert summary["category_stats"]["plumbing"]["resolved"] == 1
    assert summary["category_stats"]["mess"]["pending"] == 1
