"""
mess_bills.py

Mess bill API (staff management + student self view).

Main endpoints:
- single / bulk bill generation for a month
- bill listing with payment stats, monthly summary
- CSV / XLSX export of a month's bills
- edits, payment updates, recalculation from attendance, deletion

Design rules:
- bill arithmetic and billing rules are delegated to app.services.mess
- generate-all commits per student inside the service
- students only see their own bills (ownership check)
- static paths are declared before /{bill_id}

Related files:
- app.services.mess        : billing engine
- app.models.mess          : MessBill / MessRate models
- app.schemas.mess         : request / response schemas

"""

import csv
import io
import uuid

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.responses import StreamingResponse, Response
from openpyxl import Workbook

from app.core.deps import (
    get_db,
    get_current_user,
    get_current_student,
    get_current_staff,
    ensure_self_or_privileged,
)
from app.core.responses import ok
from app.models.mess import PaymentStatus
from app.models.user import User
from app.schemas.mess import (
    BillUpdateRequest,
    GenerateAllRequest,
    GenerateBillRequest,
    PaymentRequest,
    bill_payload,
)
from app.services import mess as mess_service

router = APIRouter(prefix="/mess-bills", tags=["mess-bills"])


"""
Generate one bill

- billable days = present, non-rejected attendance days of the month
- daily rate from the month's active rate card, else the default
- existing bill -> 400 with the existing bill attached

"""

@router.post("/generate")
def generate_bill(
    data: GenerateBillRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        bill = mess_service.generate_bill(
            db, student_id=data.student_id, month=data.month, year=data.year, actor_id=user.id
        )
        db.commit()
        db.refresh(bill)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(bill_payload(bill), message="Bill generated successfully"),
    )


"""
Generate bills for every active student

- each student ends up generated, skipped (already billed) or failed
- one failure does not stop the run or undo earlier bills

"""

@router.post("/generate-all")
def generate_all_bills(
    data: GenerateAllRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    result = mess_service.generate_all(db, month=data.month, year=data.year, actor_id=user.id)
    summary = result["summary"]
    return ok(
        message=(
            f"Generated {summary['generated']} bills, skipped {summary['skipped']}, "
            f"failed {summary['failed']}"
        ),
        **result,
    )


@router.get("/all")
def list_all_bills(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    payment_status: PaymentStatus | None = Query(default=None),
    student_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    bills = mess_service.list_bills(
        db, month=month, year=year, payment_status=payment_status, student_id=student_id
    )
    return ok(
        [bill_payload(b) for b in bills],
        count=len(bills),
        stats=mess_service.bill_stats(bills),
    )


@router.get("/my")
def my_bills(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_student),
):
    bills = mess_service.list_bills(db, student_id=user.id)
    return ok([bill_payload(b) for b in bills], count=len(bills))


@router.get("/student/{student_id}")
def student_bills(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_privileged(user, student_id)
    bills = mess_service.list_bills(db, student_id=student_id)
    return ok([bill_payload(b) for b in bills], count=len(bills))


@router.get("/summary/{month}/{year}")
def month_summary(
    month: int,
    year: int = Path(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    return ok(summary=mess_service.month_summary(db, month, year))


"""
CSV export of a month's bills

- streamed row by row
- UTF-8 BOM first so spreadsheet apps detect the encoding

"""

@router.get("/export")
def export_bills_csv(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    rows = mess_service.export_rows(db, month=month, year=year)

    def generate():
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(mess_service.EXPORT_COLUMNS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for r in rows:
            writer.writerow(r)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"mess_bills_{year}-{month:02d}.csv"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"'
    }

    return StreamingResponse(
        generate(),
        media_type="text/csv; charset=utf-8",
        headers=headers,
    )


"""
XLSX export of a month's bills

- same columns as the CSV export, built with openpyxl

"""

@router.get("/export.xlsx")
def export_bills_xlsx(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    rows = mess_service.export_rows(db, month=month, year=year)

    wb = Workbook()
    ws = wb.active
    ws.title = "mess_bills"

    ws.append(mess_service.EXPORT_COLUMNS)
    for r in rows:
        ws.append(r)

    buf = io.BytesIO()
    wb.save(buf)
    data = buf.getvalue()

    filename = f"mess_bills_{year}-{month:02d}.xlsx"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"'
    }

    return Response(
        content=data,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


@router.get("/{bill_id}")
def get_bill(
    bill_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    bill = mess_service.get_bill_or_404(db, bill_id)
    ensure_self_or_privileged(user, bill.student_id)
    return ok(bill_payload(bill))


@router.put("/{bill_id}")
def update_bill(
    bill_id: uuid.UUID,
    data: BillUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        bill = mess_service.get_bill_or_404(db, bill_id)
        mess_service.update_bill(bill, changes=data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(bill)
    except Exception:
        db.rollback()
        raise

    return ok(bill_payload(bill), message="Bill updated successfully")


@router.put("/{bill_id}/pay")
def pay_bill(
    bill_id: uuid.UUID,
    data: PaymentRequest | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    data = data or PaymentRequest()
    try:
        bill = mess_service.get_bill_or_404(db, bill_id)
        mess_service.apply_payment(bill, paid_amount=data.paid_amount, payment_status=data.payment_status)
        db.commit()
        db.refresh(bill)
    except Exception:
        db.rollback()
        raise

    return ok(bill_payload(bill), message="Bill payment status updated successfully")


@router.put("/{bill_id}/recalculate")
def recalculate_bill(
    bill_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        bill = mess_service.get_bill_or_404(db, bill_id)
        mess_service.recalculate_bill(db, bill)
        db.commit()
        db.refresh(bill)
    except Exception:
        db.rollback()
        raise

    return ok(bill_payload(bill), message="Bill recalculated successfully")


@router.delete("/{bill_id}")
def delete_bill(
    bill_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        bill = mess_service.get_bill_or_404(db, bill_id)
        db.delete(bill)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Bill deleted successfully")
