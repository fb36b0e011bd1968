# placely/web/errors.py
from __future__ import annotations
import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from placely.errors import ReminderNotFound, ValidationFailed

log = logging.getLogger("errors")


async def validation_failed_handler(request: Request, exc: ValidationFailed):
    rid = getattr(request.state, "request_id", "-")
    log.warning("validation_failed rid=%s field=%s", rid, exc.field)
    return JSONResponse(
        {"ok": False, "error": "validation_failed", "field": exc.field, "detail": exc.message, "rid": rid},
        status_code=422,
    )


async def not_found_handler(request: Request, exc: ReminderNotFound):
    rid = getattr(request.state, "request_id", "-")
    return JSONResponse(
        {"ok": False, "error": "not_found", "reminder_id": exc.reminder_id, "rid": rid},
        status_code=404,
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = getattr(request.state, "request_id", "-")
    log.error("unhandled_exception", extra={"rid": rid, "path": request.url.path, "error": str(exc)}, exc_info=exc)
    # не палим детали наружу, но даем признак
    return JSONResponse({"ok": False, "error": "internal_error", "rid": rid}, status_code=500)
