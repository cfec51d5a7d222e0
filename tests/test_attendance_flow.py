"""
Attendance tests.
- student self-mark (pending) and the one-per-day rule
- staff marking, edits, approve / reject
- daily, pending and monthly views

"""

from datetime import date

import pytest

from app.core.exceptions import ValidationFailed
from app.models.attendance import AttendanceStatus
from app.models.user import ApprovalStatus
from app.services.attendance import month_range
from tests.helpers import (
    add_attendance,
    create_student_in_db,
    create_warden_in_db,
    headers_for,
)


def test_student_self_mark_is_pending_and_once_per_day(client, db):
    student = create_student_in_db(db)
    h = headers_for(student)

    r = client.post("/attendance/mark", headers=h, json={"status": "absent", "remarks": "in class"})
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    # students can only mark themselves present
    assert data["status"] == "present"
    assert data["approval_status"] == "pending"
    assert data["date"] == date.today().isoformat()
    assert data["student_id"] == str(student.id)

    r = client.post("/attendance/mark", headers=h, json={})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Attendance already marked for this date"
    assert body["data"]["id"] == data["id"]

    mine = client.get("/attendance/my", headers=h)
    assert mine.status_code == 200, mine.text
    assert mine.json()["count"] == 1
    assert mine.json()["approval_stats"]["pending"] == 1


def test_staff_mark_creates_approved_then_edits(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)
    h = headers_for(warden)
    day = "2025-03-10"

    r = client.post("/attendance/mark", headers=h, json={"date": day, "status": "present"})
    assert r.status_code == 400
    assert r.json()["message"] == "Student ID is required"

    r = client.post(
        "/attendance/mark", headers=h, json={"student_id": str(student.id), "date": day, "status": "late"}
    )
    assert r.status_code == 201, r.text
    record = r.json()["data"]
    assert record["approval_status"] == "approved"
    assert record["approved_by"] == str(warden.id)
    assert record["is_edited"] is False

    r = client.post(
        "/attendance/mark", headers=h, json={"student_id": str(student.id), "date": day, "status": "absent"}
    )
    assert r.status_code == 200, r.text
    edited = r.json()["data"]
    assert edited["id"] == record["id"]
    assert edited["status"] == "absent"
    assert edited["is_edited"] is True
    assert edited["edited_by"] == str(warden.id)
    assert edited["approval_status"] == "approved"


def test_approve_and_reject_only_from_pending(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)
    first, second = add_attendance(
        db, student, [date(2025, 3, 1), date(2025, 3, 2)], approval_status=ApprovalStatus.PENDING
    )
    h = headers_for(warden)

    r = client.get("/attendance/pending", headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 2

    r = client.put(f"/attendance/{first.id}/approve", headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["approval_status"] == "approved"

    r = client.put(f"/attendance/{first.id}/reject", headers=h)
    assert r.status_code == 400

    r = client.put(f"/attendance/{second.id}/reject", headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["rejection_reason"] == "Rejected by warden"

    r = client.get("/attendance/statistics", headers=h)
    assert r.status_code == 200, r.text
    stats = r.json()["stats"]
    assert stats["approved"] == 1
    assert stats["rejected"] == 1
    assert stats["pending"] == 0
    assert stats["total"] == 2


def test_staff_update_keeps_approval_state(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)
    (record,) = add_attendance(db, student, [date(2025, 3, 5)], approval_status=ApprovalStatus.PENDING)

    r = client.put(f"/attendance/{record.id}", headers=headers_for(warden), json={"status": "leave"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "leave"
    assert data["approval_status"] == "pending"
    assert data["is_edited"] is True

    r = client.put(f"/attendance/{record.id}", headers=headers_for(warden), json={})
    assert r.status_code == 400


def test_student_cannot_read_other_students_records(client, db):
    student = create_student_in_db(db)
    other = create_student_in_db(db)
    warden = create_warden_in_db(db)

    r = client.get(f"/attendance/student/{other.id}", headers=headers_for(student))
    assert r.status_code == 403
    assert r.json()["message"] == "You are not authorized to access this data"

    r = client.get(f"/attendance/student/{student.id}", headers=headers_for(student))
    assert r.status_code == 200, r.text

    r = client.get(f"/attendance/student/{other.id}", headers=headers_for(warden))
    assert r.status_code == 200, r.text

    r = client.put(f"/attendance/{other.id}/approve", headers=headers_for(student))
    assert r.status_code == 403


def test_today_summary_counts_unmarked_students(client, db):
    warden = create_warden_in_db(db)
    marked = create_student_in_db(db)
    create_student_in_db(db)
    create_student_in_db(db)
    add_attendance(db, marked, [date.today()])

    r = client.get("/attendance/today", headers=headers_for(warden))
    assert r.status_code == 200, r.text
    stats = r.json()["stats"]
    assert stats["total_students"] == 3
    assert stats["marked"] == 1
    assert stats["not_marked"] == 2
    assert stats["present"] == 1


def test_monthly_report_percentage(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db, hostel_block="B")
    add_attendance(db, student, [date(2025, 2, d) for d in range(1, 4)])
    add_attendance(db, student, [date(2025, 2, 4)], status=AttendanceStatus.ABSENT)

    r = client.get(
        "/attendance/report", headers=headers_for(warden), params={"month": 2, "year": 2025, "hostel_block": "B"}
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_students"] == 1
    row = body["data"][0]["attendance"]
    assert row["present"] == 3
    assert row["absent"] == 1
    assert row["percentage"] == 75.0


def test_delete_attendance(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)
    (record,) = add_attendance(db, student, [date(2025, 1, 15)])

    r = client.delete(f"/attendance/{record.id}", headers=headers_for(warden))
    assert r.status_code == 200, r.text

    r = client.delete(f"/attendance/{record.id}", headers=headers_for(warden))
    assert r.status_code == 404


def test_out_of_range_year_is_rejected(client, db):
    student = create_student_in_db(db)
    warden = create_warden_in_db(db)

    r = client.get("/attendance/my", headers=headers_for(student), params={"month": 3, "year": 0})
    assert r.status_code == 400
    assert r.json()["success"] is False

    r = client.get("/attendance/report", headers=headers_for(warden), params={"month": 3, "year": 10000})
    assert r.status_code == 400

    with pytest.raises(ValidationFailed):
        month_range(3, 0)
    assert month_range(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))
