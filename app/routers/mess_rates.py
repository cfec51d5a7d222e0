import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_staff
from app.core.responses import ok
from app.models.user import User
from app.schemas.mess import MessRateCreate, MessRateUpdate, rate_payload
from app.services import mess as mess_service

router = APIRouter(prefix="/mess-rates", tags=["mess-rates"])


# one rate card per month
@router.post("")
def create_rate(
    data: MessRateCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        rate = mess_service.create_rate(db, data=data, actor=user)
        db.commit()
        db.refresh(rate)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(rate_payload(rate), message="Mess rate set successfully"),
    )


# active rate for the month, or the defaults
@router.get("/current")
def current_rate(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    today = date.today()
    month = month or today.month
    year = year or today.year

    rate = mess_service.get_active_rate(db, month, year)
    if rate is None:
        return ok(mess_service.default_rate_payload(month, year), message="Using default rates")
    return ok({**rate_payload(rate), "is_default": False})


@router.get("")
def list_rates(
    year: int | None = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    rates = mess_service.list_rates(db, year)
    return ok([rate_payload(r) for r in rates], count=len(rates))


# daily_rate change re-prices every bill of the month in the same commit
@router.put("/{rate_id}")
def update_rate(
    rate_id: uuid.UUID,
    data: MessRateUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        rate = mess_service.get_rate_or_404(db, rate_id)
        bills_updated = mess_service.update_rate(
            db, rate, changes=data.model_dump(exclude_unset=True, exclude_none=True), actor=user
        )
        db.commit()
        db.refresh(rate)
    except Exception:
        db.rollback()
        raise

    return ok(rate_payload(rate), message="Mess rate updated successfully", bills_updated=bills_updated)


@router.delete("/{rate_id}")
def delete_rate(
    rate_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        rate = mess_service.get_rate_or_404(db, rate_id)
        db.delete(rate)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Mess rate deleted successfully")
