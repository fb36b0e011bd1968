# placely/middlewares/logging.py
import logging
import time
from typing import Any, Dict, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import Update

from placely.keyboards.reminders import parse_open_callback

logger = logging.getLogger("placely.middleware.logging")


def _safe_get(obj: Any, path: str, default: Any = None):
    cur = obj
    for p in path.split("."):
        if cur is None:
            return default
        cur = getattr(cur, p, None)
    return cur if cur is not None else default


def _extract_reminder_id(event: Any) -> int | str:
    # тап по кнопке алерта: reminder:open:{id}
    rid = parse_open_callback(_safe_get(event, "callback_query.data") or _safe_get(event, "data"))
    return rid if rid is not None else "-"


class LoggingMiddleware(BaseMiddleware):
    async def __call__(
        self,
        handler: Callable[[Any, Dict[str, Any]], Awaitable[Any]],
        event: Any,
        data: Dict[str, Any]
    ) -> Any:
        # Достаём Update, если он есть в данных
        update: Update | None = data.get("event_update") or data.get("update")
        ctx = {
            "update_id": getattr(update, "update_id", "-"),
            "user_id": (
                _safe_get(event, "message.from_user.id")
                or _safe_get(event, "callback_query.from_user.id")
                or "-"
            ),
            "reminder_id": _extract_reminder_id(event),
            "event_type": getattr(event, "event_type", type(event).__name__),
        }

        logger.info("incoming", extra=ctx)

        started = time.perf_counter()
        try:
            result = await handler(event, data)
        except Exception:
            logger.exception(
                "handler_error",
                extra={**ctx, "duration_ms": int((time.perf_counter() - started) * 1000)},
            )
            raise
        logger.info(
            "handled",
            extra={**ctx, "duration_ms": int((time.perf_counter() - started) * 1000)},
        )
        return result
