"""
main.py

FastAPI application entry point.

Loaded first when the server starts; assembles the application:
- creates the FastAPI instance
- configures logging, CORS and the access-log middleware
- maps errors onto the {"success": false, "message": ...} envelope
- registers the resource routers (auth, admin, attendance, mess, ...)
- exposes health and database ping endpoints

Design rules:
- no business logic here, only wiring
- real work is delegated to the routers / services layers
- health / db-ping stay cheap enough for load balancer probes

Related files:
- app.core.config        : environment settings
- app.core.exceptions    : typed service errors
- app.routers.*          : per-resource API routers

"""

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.deps import get_db
from app.core.exceptions import ServiceError
from app.core.logging import get_logger, setup_logging
from app.core.middleware import LoggingMiddleware
from app.core.responses import error_body, ok
from app.routers import (
    admin,
    announcements,
    attendance,
    auth,
    complaints,
    mess_bills,
    mess_rates,
    rooms,
    warden_requests,
)

setup_logging()
logger = get_logger(__name__)

app = FastAPI(title="Hostel Management API")

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


"""
Error envelope

- ServiceError        : its own status, message and context
- HTTPException       : message = detail
- validation errors   : 400, first offending field named in message
- IntegrityError      : 400 "Duplicate record"
- anything else       : 500, logged with traceback, detail not echoed

"""

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, **exc.context))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    first = errors[0] if errors else {"field": "", "message": "Invalid request"}
    message = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
    return JSONResponse(status_code=400, content=error_body(message, errors=errors))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity_error", error=str(exc.orig))
    return JSONResponse(status_code=400, content=error_body("Duplicate record"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(attendance.router)
app.include_router(mess_bills.router)
app.include_router(mess_rates.router)
app.include_router(complaints.router)
app.include_router(warden_requests.router)
app.include_router(announcements.router)
app.include_router(rooms.router)


"""
Health check

- confirms the application process is up
- used by load balancers / deploy probes

"""
@app.get("/health")
def health():
    return ok(message="Hostel Management API is running", status="ok")

"""
Database ping

- SELECT 1 against the configured database
- separates "app up, database down" from a dead process

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return ok(db="ok", value=value)
