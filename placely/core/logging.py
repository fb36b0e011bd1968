import logging
import sys
from logging.config import dictConfig

from placely.config import settings

CTX_FIELDS = ("reminder_id", "job", "alert_id")


def setup_logging() -> None:
    """Базовая настройка логирования всего приложения."""
    level = settings.log_level.upper()

    fmt = (
        "%(asctime)s | %(levelname)5s | %(name)s | %(message)s "
        "| rem=%(reminder_id)s job=%(job)s alert=%(alert_id)s"
    )
    if settings.log_json:
        formatter = {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(reminder_id)s %(job)s %(alert_id)s",
            "json_ensure_ascii": False,
        }
    else:
        formatter = {"format": fmt}

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
            }
        },
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            # Для SQLAlchemy можно включить подробности при отладке:
            "sqlalchemy.engine": {"level": settings.log_sql.upper()},
            # Для aiogram — INFO или DEBUG, если нужно видеть апдейты:
            "aiogram": {"level": settings.log_aiogram.upper()},
            # APScheduler на INFO болтлив: каждый запуск джоба
            "apscheduler": {"level": "WARNING"},
            # Для наших модулей:
            "placely": {"level": level},
        },
    })


class CtxFilter(logging.Filter):
    """Добавляет безопасные поля, чтобы форматтер не падал, когда нет extra."""
    def filter(self, record: logging.LogRecord) -> bool:
        for k in CTX_FIELDS:
            if not hasattr(record, k):
                setattr(record, k, "-")
        return True


def attach_ctx_filter() -> None:
    """Подключает фильтр к каждому хендлеру, чтобы extra всегда был безопасен."""
    f = CtxFilter()
    for h in logging.getLogger().handlers:
        h.addFilter(f)
