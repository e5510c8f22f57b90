"""Add searchable canonical columns to catalog items.

Revision ID: 0002
Revises: 0001
Create Date: 2026-11-02
"""

from __future__ import annotations

import json
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

SEARCH_COLUMNS = ("title", "series", "publisher")


def _backfill() -> None:
    items = sa.table(
        "catalog_item",
        sa.column("id", sa.Uuid()),
        sa.column("record", sa.Text()),
        *(sa.column(name, sa.Text()) for name in SEARCH_COLUMNS),
    )
    connection = op.get_bind()
    for item_id, raw_record in connection.execute(sa.select(items.c.id, items.c.record)):
        record = json.loads(raw_record) if raw_record else {}
        values: dict[str, str | None] = {}
        for name in SEARCH_COLUMNS:
            entry = record.get(name)
            value = entry.get("value") if isinstance(entry, dict) else None
            values[name] = None if value is None else str(value)
        connection.execute(items.update().where(items.c.id == item_id).values(**values))


def upgrade() -> None:
    with op.batch_alter_table("catalog_item") as batch_op:
        for name in SEARCH_COLUMNS:
            batch_op.add_column(sa.Column(name, sa.Text(), nullable=True))
        batch_op.create_index(
            op.f("ix_catalog_item_completeness_score"), ["completeness_score"]
        )
    _backfill()


def downgrade() -> None:
    with op.batch_alter_table("catalog_item") as batch_op:
        batch_op.drop_index(op.f("ix_catalog_item_completeness_score"))
        for name in reversed(SEARCH_COLUMNS):
            batch_op.drop_column(name)
