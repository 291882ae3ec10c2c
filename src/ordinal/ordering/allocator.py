"""Append-index allocation."""

from __future__ import annotations

from sqlalchemy import text
from sqlmodel import Session

_MAX_ACTIVE_INDEX_SQL = text("""
    SELECT MAX("index") FROM ordered_items
    WHERE parent_id = :parent_id AND deleted_at IS NULL
""")


def allocate_append_index(session: Session, parent_id: str) -> int:
    """Index for an item appended to `parent_id`: max active index + 1, or 0.

    Must run in the same transaction as the insert that uses it. The write
    transaction holds the writer lock, so a concurrent append waits instead
    of reading the same maximum.
    """
    current = session.execute(_MAX_ACTIVE_INDEX_SQL, {"parent_id": parent_id}).scalar()
    return 0 if current is None else int(current) + 1
