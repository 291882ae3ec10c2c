"""Additional index creation for sibling-range queries.

These indexes complement the basic indexes defined in SQLModel Field()
declarations. They are partial/composite indexes that cannot be expressed
via Field(index=True).

The (parent_id, index) index over active rows is deliberately non-unique:
every shift is a single UPDATE, and engines check non-deferred unique
indexes row by row while such a statement runs, so a unique index would
reject shifts whose final state is valid. Uniqueness is enforced by the
invariant check that runs before every commit.

Call create_additional_indexes() after Database.create_all().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import text

if TYPE_CHECKING:
    from sqlalchemy import Engine


ADDITIONAL_INDEXES = [
    # Sibling range scans for allocation, shifts and duplicate detection
    'CREATE INDEX IF NOT EXISTS idx_ordered_items_parent_active_index '
    'ON ordered_items(parent_id, "index") WHERE deleted_at IS NULL',
    # Active-parent lookups
    "CREATE INDEX IF NOT EXISTS idx_ordered_parents_active "
    "ON ordered_parents(id) WHERE deleted_at IS NULL",
]

ADDITIONAL_INDEX_NAMES = [
    "idx_ordered_items_parent_active_index",
    "idx_ordered_parents_active",
]


def create_additional_indexes(engine: Engine) -> None:
    """
    Create additional partial indexes.

    Call this after Database.create_all().
    """
    with engine.connect() as conn:
        for sql in ADDITIONAL_INDEXES:
            conn.execute(text(sql))
        conn.commit()


def drop_additional_indexes(engine: Engine) -> None:
    """Drop additional indexes (for testing/reset)."""
    with engine.connect() as conn:
        for name in ADDITIONAL_INDEX_NAMES:
            conn.execute(text(f"DROP INDEX IF EXISTS {name}"))
        conn.commit()
