from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# Alembic identifiers
revision = "0001_reminders"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing = set(inspect(bind).get_table_names())

    # таблицы могли создаться через INIT_DB_ON_START=1 — тогда выходим тихо
    if "reminders" not in existing:
        op.create_table(
            "reminders",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("event_time", sa.BigInteger(), nullable=False),
            sa.Column("category", sa.String(length=32), nullable=False),
            sa.Column("lead_time", sa.BigInteger(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_reminders_event_time", "reminders", ["event_time"])

    if "alerts" not in existing:
        op.create_table(
            "alerts",
            sa.Column("alert_id", sa.Integer(), primary_key=True, autoincrement=False),
            sa.Column("reminder_id", sa.Integer(), nullable=False),
            sa.Column("kind", sa.String(length=16), nullable=False),
            sa.Column("chat_id", sa.BigInteger(), nullable=False),
            sa.Column("message_id", sa.BigInteger(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_alerts_reminder_id", "alerts", ["reminder_id"])


def downgrade():
    existing = set(inspect(op.get_bind()).get_table_names())
    if "alerts" in existing:
        op.drop_index("ix_alerts_reminder_id", table_name="alerts")
        op.drop_table("alerts")
    if "reminders" in existing:
        op.drop_index("ix_reminders_event_time", table_name="reminders")
        op.drop_table("reminders")
