"""create reminders and push_subscriptions

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from reminder_service.core.database.types import UTCDateTime

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            UTCDateTime(),
            server_default=sa.func.now(),
            nullable=False,
            comment="Timestamp of record creation",
        ),
        sa.Column(
            "updated_at",
            UTCDateTime(),
            server_default=sa.func.now(),
            nullable=False,
            comment="Timestamp of last update",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "reminders",
        sa.Column("id", sa.Uuid(), nullable=False, comment="UUID v4 primary key"),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("target_item", sa.String(length=255), nullable=False),
        sa.Column(
            "message",
            sa.String(length=500),
            nullable=True,
            comment="Snapshot of the item text shown in notifications",
        ),
        sa.Column("fire_time", UTCDateTime(), nullable=False),
        sa.Column(
            "timezone",
            sa.String(length=64),
            server_default="UTC",
            nullable=False,
            comment="IANA zone used for recurrence wall-clock arithmetic",
        ),
        sa.Column("recurrence_unit", sa.String(length=16), nullable=True),
        sa.Column("recurrence_interval", sa.Integer(), nullable=True),
        sa.Column("sent", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("sent_at", UTCDateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(recurrence_unit IS NULL AND recurrence_interval IS NULL) "
            "OR (recurrence_unit IS NOT NULL AND recurrence_interval >= 1)",
            name=op.f("ck_reminders_recurrence_complete"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reminders")),
    )
    op.create_index(op.f("ix_reminders_owner"), "reminders", ["owner"])
    op.create_index(op.f("ix_reminders_target_item"), "reminders", ["target_item"])
    op.create_index("ix_reminders_sent_fire_time", "reminders", ["sent", "fire_time"])

    op.create_table(
        "push_subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False, comment="UUID v4 primary key"),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("endpoint", sa.String(length=2048), nullable=False),
        sa.Column("encryption_key", sa.String(length=255), nullable=False),
        sa.Column("auth_secret", sa.String(length=255), nullable=False),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_push_subscriptions")),
        sa.UniqueConstraint("owner", "endpoint", name="uq_push_subscriptions_owner_endpoint"),
    )
    op.create_index(op.f("ix_push_subscriptions_owner"), "push_subscriptions", ["owner"])


def downgrade() -> None:
    op.drop_index(op.f("ix_push_subscriptions_owner"), table_name="push_subscriptions")
    op.drop_table("push_subscriptions")
    op.drop_index("ix_reminders_sent_fire_time", table_name="reminders")
    op.drop_index(op.f("ix_reminders_target_item"), table_name="reminders")
    op.drop_index(op.f("ix_reminders_owner"), table_name="reminders")
    op.drop_table("reminders")
