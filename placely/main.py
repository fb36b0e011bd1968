# placely/main.py
from __future__ import annotations

import os
import asyncio
import logging
import signal

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import BotCommand

from placely.config import settings
from placely.core.logging import setup_logging, attach_ctx_filter
from placely.container import build_dp, build_services
from placely.db import SessionLocal, engine, init_db
from placely.middlewares.deps import DepsMiddleware
from placely.middlewares.logging import LoggingMiddleware
from placely.scheduler.jobs import build_scheduler
from placely.web.server import build_server, create_app

# ---- Логи первыми ----
setup_logging()
attach_ctx_filter()
logger = logging.getLogger("placely.main")

from placely.handlers.reminders import router as reminders_router
from placely.handlers.errors import router as errors_router


async def setup_bot_commands(bot: Bot) -> None:
    await bot.set_my_commands(
        [
            BotCommand(command="reminders", description="Upcoming reminders"),
        ]
    )


async def main() -> None:
    logger.info(
        "boot: starting with LOG_LEVEL=%s SQL_ECHO=%s tz=%s",
        settings.log_level,
        settings.SQL_ECHO,
        settings.SCHEDULER_TZ,
    )

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    # На всякий: сносим вебхук, чтобы polling не конфликтовал
    try:
        await bot.delete_webhook(drop_pending_updates=True)
    except Exception:
        logger.warning("delete_webhook failed; continue with polling")

    dp = await build_dp(bot)

    # DB init: в проде миграции через Alembic, create_all только если явно включили
    if os.getenv("INIT_DB_ON_START", "0") == "1":
        try:
            await init_db()
            logger.info("DB init done (create_all enabled by ENV)")
        except Exception:
            logger.exception("DB init failed (dev-only path)")
    else:
        logger.info("DB init skipped (use alembic upgrade head)")

    # ---------- Scheduler ----------
    # Стартуем до resync: джобы, проспанные пока процесс лежал, отработают сразу
    scheduler = build_scheduler()
    scheduler.start()

    session = SessionLocal()
    services = await build_services(bot, session, scheduler)

    if settings.RESYNC_ON_START:
        try:
            await services["reminders"].resync()
        except Exception:
            logger.exception("resync failed; jobs from the store are still live")

    # Middlewares
    dp.update.outer_middleware(LoggingMiddleware())
    dp.update.middleware(DepsMiddleware(session_factory=SessionLocal, scheduling=services["scheduling"]))

    # Routers — порядок важен
    dp.include_routers(
        reminders_router,
        errors_router,
    )

    await setup_bot_commands(bot)
    logger.info("Commands set, start polling")

    # Корректное завершение по сигналам
    stop_evt = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _stop(*_: object) -> None:
        stop_evt.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _stop)
        except NotImplementedError:
            pass

    async def _poll():
        try:
            await dp.start_polling(bot, handle_signals=False)
        except asyncio.CancelledError:
            pass

    poll_task = asyncio.create_task(_poll())

    # ---------- HTTP API ----------
    web_server = None
    web_task = None
    if settings.WEBAPP_ENABLED:
        web_server = build_server(create_app(services["scheduling"]))

        async def _serve():
            try:
                await web_server.serve()
            finally:
                # uvicorn сам ловит SIGINT/SIGTERM — гасим и всё остальное
                stop_evt.set()

        web_task = asyncio.create_task(_serve())

    await stop_evt.wait()

    # ---------- Shutdown ----------
    try:
        await dp.stop_polling()
    except RuntimeError:
        # polling ещё не успел стартовать
        pass

    if web_server is not None:
        web_server.should_exit = True
        try:
            await web_task
        except Exception:
            logger.exception("webapp shutdown failed")

    # Останавливаем scheduler
    try:
        scheduler.shutdown(wait=False)
    except Exception:
        logger.exception("scheduler shutdown failed")

    if not poll_task.done():
        poll_task.cancel()
        try:
            await poll_task
        except asyncio.CancelledError:
            pass

    # close bot session
    try:
        await bot.session.close()
    except Exception:
        logger.exception("bot session close failed")

    # close DB session
    try:
        await session.close()
    except Exception:
        logger.exception("db session close failed")

    # dispose engine
    try:
        await engine.dispose()
    except Exception:
        logger.exception("engine dispose failed")


if __name__ == "__main__":
    asyncio.run(main())
