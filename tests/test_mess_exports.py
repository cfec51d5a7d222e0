"""
Mess bill export tests.
- CSV: BOM, attachment header, one row per bill
- XLSX: readable workbook with the same columns
- staff only, month validated

"""

import csv
import io
from datetime import date

from openpyxl import load_workbook

from app.services.mess import EXPORT_COLUMNS
from tests.helpers import add_attendance, create_student_in_db, create_warden_in_db, headers_for


def _bill_month(client, db):
    warden = create_warden_in_db(db)
    a = create_student_in_db(db, name="Asha", hostel_block="A", room_number="101")
    b = create_student_in_db(db, name="Bilal", hostel_block="B", room_number="204")
    add_attendance(db, a, [date(2025, 3, d) for d in range(1, 11)])
    add_attendance(db, b, [date(2025, 3, d) for d in range(1, 6)])
    h = headers_for(warden)
    r = client.post("/mess-bills/generate-all", headers=h, json={"month": 3, "year": 2025})
    assert r.status_code == 200, r.text
    return h


def test_export_csv(client, db):
    h = _bill_month(client, db)

    res = client.get("/mess-bills/export", headers=h, params={"month": 3, "year": 2025})
    assert res.status_code == 200, res.text
    assert res.headers["content-type"].startswith("text/csv")
    cd = res.headers.get("content-disposition", "")
    assert "attachment" in cd
    assert "mess_bills_2025-03.csv" in cd

    # BOM first so spreadsheet apps pick UTF-8
    assert res.content.startswith(b"\xef\xbb\xbf")

    rows = list(csv.reader(io.StringIO(res.content.decode("utf-8-sig"))))
    assert rows[0] == EXPORT_COLUMNS
    assert len(rows) == 3
    by_name = {r[2]: r for r in rows[1:]}
    assert by_name["Asha"][6] == "10"
    assert float(by_name["Asha"][10]) == 1000.0
    assert by_name["Bilal"][5] == "B"
    assert by_name["Bilal"][12] == "pending"


def test_export_xlsx(client, db):
    h = _bill_month(client, db)

    res = client.get("/mess-bills/export.xlsx", headers=h, params={"month": 3, "year": 2025})
    assert res.status_code == 200, res.text
    assert res.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "mess_bills_2025-03.xlsx" in res.headers.get("content-disposition", "")
    # XLSX is a zip container
    assert res.content[:2] == b"PK"

    wb = load_workbook(io.BytesIO(res.content))
    ws = wb.active
    values = list(ws.iter_rows(values_only=True))
    assert list(values[0]) == EXPORT_COLUMNS
    assert len(values) == 3
    assert {v[2] for v in values[1:]} == {"Asha", "Bilal"}


def test_export_requires_staff_and_valid_month(client, db):
    warden = create_warden_in_db(db)
    student = create_student_in_db(db)

    res = client.get("/mess-bills/export", headers=headers_for(student), params={"month": 3, "year": 2025})
    assert res.status_code == 403

    res = client.get("/mess-bills/export", headers=headers_for(warden), params={"month": 13, "year": 2025})
    assert res.status_code == 400

    res = client.get("/mess-bills/export.xlsx", headers=headers_for(warden), params={"year": 2025})
    assert res.status_code == 400
