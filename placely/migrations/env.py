from __future__ import annotations

import os
import sys
import importlib
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

# ------------------------------------------------------------------------------
# PYTHONPATH: корень репозитория, чтобы импортировался пакет placely
# ------------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# ------------------------------------------------------------------------------
# Alembic config + логирование
# ------------------------------------------------------------------------------
config = context.config
if config.config_file_name and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# ------------------------------------------------------------------------------
# Грузим Base и МОДУЛИ МОДЕЛЕЙ явно
# ------------------------------------------------------------------------------
from placely.config import settings, _to_sync_dsn  # noqa: E402
from placely.models.base import Base  # noqa: E402

MODEL_MODULES = [
    "placely.models.reminder",
    "placely.models.alert",
]
for mod in MODEL_MODULES:
    importlib.import_module(mod)

# Если ключевые таблицы не видны — валимся громко
required = {"reminders", "alerts"}
missing = required.difference(Base.metadata.tables.keys())
if missing:
    raise RuntimeError(f"[env.py] Missing tables in Base.metadata: {missing}")

# ------------------------------------------------------------------------------
# DSN: Alembic ходит синхронным драйвером
# ------------------------------------------------------------------------------
config.set_main_option("sqlalchemy.url", _to_sync_dsn(settings.DATABASE_URL))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=True,  # sqlite не умеет ALTER COLUMN
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
