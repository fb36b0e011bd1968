# placely/web/middleware_logging.py
from __future__ import annotations
import logging
import re
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

log = logging.getLogger("http")

REMINDER_PATH_RE = re.compile(r"^/reminders/(\d+)")


class LoggingMiddleware(BaseHTTPMiddleware):
    """request-id + время ответа; для /reminders/{id} кладём reminder_id в extra."""

    async def dispatch(self, request: Request, call_next: Callable):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        path = request.url.path
        m = REMINDER_PATH_RE.match(path)
        ctx = {
            "rid": rid,
            "method": request.method,
            "path": path,
            "reminder_id": int(m.group(1)) if m else "-",
        }
        log.info("http_request", extra=ctx)

        # Прокидываем request-id дальше
        request.state.request_id = rid
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            log.exception("http_error", extra={**ctx, "ms": round((time.perf_counter() - start) * 1000, 2)})
            raise
        log.info("http_response", extra={
            **ctx, "status": response.status_code, "ms": round((time.perf_counter() - start) * 1000, 2),
        })
        response.headers["x-request-id"] = rid
        return response
