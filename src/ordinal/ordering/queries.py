"""Lookups shared by the ordering operations.

All functions take the caller's session so they run inside the same
transaction as the mutation that needs them. Item lookups refresh any
instance already in the session's identity map, because set-based UPDATE
statements change rows behind the ORM's back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import func
from sqlmodel import Session, col, select

from ordinal.core.errors import NotFoundError
from ordinal.models import OrderedItem, OrderedParent

# Keeps IN (...) lists well under the SQLite bound-parameter limit
_LOOKUP_CHUNK = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_public_id(length: int = 12) -> str:
    """Generate a public identifier (hex, `length` characters)."""
    return (uuid4().hex + uuid4().hex)[:length]


def get_parent(session: Session, parent_id: str, *, active_only: bool = True) -> OrderedParent:
    """Fetch a parent row or raise NotFoundError."""
    stmt = select(OrderedParent).where(OrderedParent.id == parent_id)
    if active_only:
        stmt = stmt.where(col(OrderedParent.deleted_at).is_(None))
    parent = session.exec(stmt.execution_options(populate_existing=True)).first()
    if parent is None:
        raise NotFoundError.parent(parent_id)
    return parent


def get_item(
    session: Session,
    *,
    item_id: int | None = None,
    public_id: str | None = None,
    active_only: bool = True,
) -> OrderedItem:
    """Fetch an item by internal id or public id, or raise NotFoundError."""
    if (item_id is None) == (public_id is None):
        raise ValueError("Pass exactly one of item_id or public_id")

    stmt = select(OrderedItem)
    if item_id is not None:
        stmt = stmt.where(OrderedItem.id == item_id)
    else:
        stmt = stmt.where(OrderedItem.public_id == public_id)
    if active_only:
        stmt = stmt.where(col(OrderedItem.deleted_at).is_(None))

    item = session.exec(stmt.execution_options(populate_existing=True)).first()
    if item is None:
        raise NotFoundError.item(item_id if item_id is not None else str(public_id))
    return item


def list_active_items(session: Session, parent_id: str) -> list[OrderedItem]:
    """Active items of a parent in index order (internal id breaks ties)."""
    stmt = (
        select(OrderedItem)
        .where(OrderedItem.parent_id == parent_id, col(OrderedItem.deleted_at).is_(None))
        .order_by(col(OrderedItem.index), col(OrderedItem.id))
        .execution_options(populate_existing=True)
    )
    return list(session.exec(stmt).all())


def count_active_items(session: Session, parent_id: str | None = None) -> int:
    """Count active items, optionally scoped to one parent."""
    stmt = select(func.count()).select_from(OrderedItem).where(
        col(OrderedItem.deleted_at).is_(None)
    )
    if parent_id is not None:
        stmt = stmt.where(OrderedItem.parent_id == parent_id)
    return int(session.exec(stmt).one())


def existing_public_ids(session: Session, public_ids: list[str]) -> set[str]:
    """Subset of `public_ids` already taken by any item, active or deleted."""
    found: set[str] = set()
    for start in range(0, len(public_ids), _LOOKUP_CHUNK):
        chunk = public_ids[start : start + _LOOKUP_CHUNK]
        stmt = select(OrderedItem.public_id).where(col(OrderedItem.public_id).in_(chunk))
        found.update(session.exec(stmt).all())
    return found


def items_by_public_id(session: Session, public_ids: list[str]) -> dict[str, OrderedItem]:
    """Read items back by public id (read-after-write for bulk inserts)."""
    found: dict[str, OrderedItem] = {}
    for start in range(0, len(public_ids), _LOOKUP_CHUNK):
        chunk = public_ids[start : start + _LOOKUP_CHUNK]
        stmt = (
            select(OrderedItem)
            .where(col(OrderedItem.public_id).in_(chunk))
            .execution_options(populate_existing=True)
        )
        found.update({item.public_id: item for item in session.exec(stmt).all()})
    return found
