"""
responses.py

Response envelope helpers.

Every endpoint answers with {"success": bool, ...}. Success bodies carry an
optional message, an optional data payload and any aggregate keys
(count, stats, summary). Error bodies are built by the exception handlers
in app.main through error_body().

"""

from typing import Any


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def error_body(message: str, **extra: Any) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return body
