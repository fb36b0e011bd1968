# placely/web/server.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from placely.config import settings
from placely.errors import ReminderNotFound, ValidationFailed
from placely.services.scheduling_service import ReminderScheduler
from placely.web.middleware_logging import LoggingMiddleware
from placely.web.errors import not_found_handler, unhandled_exception_handler, validation_failed_handler
from placely.web.routes import router as api_router

log = logging.getLogger("startup")


def create_app(scheduling: Optional[ReminderScheduler] = None) -> FastAPI:
    """
    HTTP-морда к напоминаниям. Планировщик передаётся снаружи:
    в процессе должен быть ровно один AsyncIOScheduler.
    """
    app = FastAPI(title="Placely Reminders")
    app.state.scheduling = scheduling

    # Middleware
    app.add_middleware(LoggingMiddleware)

    # Routers
    app.include_router(api_router)

    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(ReminderNotFound, not_found_handler)

    @app.exception_handler(Exception)
    async def _unhandled(request, exc):
        return await unhandled_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation(request, exc: RequestValidationError):
        rid = getattr(request.state, "request_id", "-")
        logging.getLogger("errors").warning(
            "validation_error rid=%s detail=%s", rid, exc.errors()
        )
        return JSONResponse(
            {"ok": False, "error": "validation_error", "detail": jsonable_encoder(exc.errors()), "rid": rid},
            status_code=422,
        )

    return app


def build_server(app: FastAPI) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.WEBAPP_HOST,
        port=settings.WEBAPP_PORT,
        log_level=settings.log_level.lower(),
        access_log=True,
        log_config=None,  # пишем через наш root-хендлер
        lifespan="off",
    )
    server = uvicorn.Server(config)
    log.info("webapp configured host=%s port=%s", settings.WEBAPP_HOST, settings.WEBAPP_PORT)
    return server
