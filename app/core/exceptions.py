"""
exceptions.py

Typed business errors raised by the service layer.

Services stay free of FastAPI imports and raise these instead of
HTTPException. The handlers registered in app.main turn them into the
standard {"success": false, "message": ...} envelope.

ServiceError extends ValueError so code that only cares about
"bad input" can still catch ValueError.

Extra keyword arguments are carried as response context
(e.g. the existing attendance record on a duplicate mark).

"""

from typing import Any


class ServiceError(ValueError):
    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationFailed(ServiceError):
    status_code = 400


class AuthenticationFailed(ServiceError):
    status_code = 401


class PermissionDenied(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


# duplicates are reported as 400, same as the rest of the API
class Conflict(ServiceError):
    status_code = 400


class InvalidTransition(ServiceError):
    status_code = 400


class EmailDeliveryError(ServiceError):
    status_code = 502


class ConfigurationError(ServiceError):
    status_code = 503
