"""Soft deletion of items and whole ordered collections."""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy import update
from sqlmodel import Session, col, select

from ordinal.models import ItemRecord, OrderedItem
from ordinal.ordering.invariant import maintain_ordering
from ordinal.ordering.queries import get_item, get_parent
from ordinal.ordering.reorder import close_slot

logger = structlog.get_logger()

_items = OrderedItem.__table__


def soft_delete(session: Session, item_id: int, who: str, when: datetime) -> ItemRecord:
    """Mark an active item deleted and close the gap it leaves.

    The deleted row keeps its former index; it no longer takes part in
    ordering. Active siblings after it shift down by one in one statement.
    """
    item = get_item(session, item_id=item_id)
    parent_id = item.parent_id
    former_index = item.index

    session.execute(
        update(_items)
        .where(_items.c.id == item_id, _items.c.deleted_at.is_(None))
        .values(deleted_at=when, deleted_by=who)
    )
    close_slot(session, parent_id, former_index)
    logger.debug(
        "item_soft_deleted",
        item_id=item_id,
        parent_id=parent_id,
        former_index=former_index,
    )

    maintain_ordering(session, parent_id)
    return ItemRecord.from_model(get_item(session, item_id=item_id, active_only=False))


def soft_delete_all_by_parent(
    session: Session, parent_id: str, who: str, when: datetime
) -> list[int]:
    """Mark every active item of a parent deleted. Returns the affected ids.

    Nothing is re-indexed: no active items remain to keep dense.
    """
    get_parent(session, parent_id, active_only=False)
    return _soft_delete_where(session, [parent_id], who, when)


def soft_delete_all_by_parents(
    session: Session, parent_ids: list[str], who: str, when: datetime
) -> list[int]:
    """soft_delete_all_by_parent over several parents, in one statement."""
    if not parent_ids:
        return []
    for parent_id in dict.fromkeys(parent_ids):
        get_parent(session, parent_id, active_only=False)
    return _soft_delete_where(session, list(dict.fromkeys(parent_ids)), who, when)


def _soft_delete_where(
    session: Session, parent_ids: list[str], who: str, when: datetime
) -> list[int]:
    active = col(OrderedItem.deleted_at).is_(None)
    stmt = (
        select(OrderedItem.id)
        .where(col(OrderedItem.parent_id).in_(parent_ids), active)
        .order_by(col(OrderedItem.id))
    )
    item_ids = [item_id for item_id in session.exec(stmt).all() if item_id is not None]
    if not item_ids:
        return []

    session.execute(
        update(_items)
        .where(_items.c.parent_id.in_(parent_ids), _items.c.deleted_at.is_(None))
        .values(deleted_at=when, deleted_by=who)
    )
    logger.debug("items_soft_deleted", parent_ids=parent_ids, count=len(item_ids))
    return item_ids
