"""Dense re-indexing of a parent's active items."""

from __future__ import annotations

from sqlalchemy import text
from sqlmodel import Session

# Ties on "index" are broken by internal id, so the result is deterministic
# even when duplicates are present. Only rows whose index changes are written.
# The statement must start with UPDATE: sqlite3 leaves rowcount at -1 for
# statements that start with WITH on Python < 3.12.
_COMPACT_SQL = text("""
    UPDATE ordered_items
    SET "index" = ordered.new_index
    FROM (
        SELECT id, ROW_NUMBER() OVER (ORDER BY "index", id) - 1 AS new_index
        FROM ordered_items
        WHERE parent_id = :parent_id AND deleted_at IS NULL
    ) AS ordered
    WHERE ordered.id = ordered_items.id
      AND ordered_items."index" <> ordered.new_index
""")


def compact(session: Session, parent_id: str) -> int:
    """Rewrite active indices of `parent_id` to 0..n-1 in one statement.

    Returns the number of rows whose index changed. Running it again on the
    same state changes nothing.
    """
    result = session.execute(_COMPACT_SQL, {"parent_id": parent_id})
    return int(result.rowcount)  # type: ignore[attr-defined]
