"""Reordering within a parent and moving between parents.

Every sibling shift is one conditional UPDATE over the affected range of the
parent's active rows. Rows are never read, adjusted and written back one at a
time: the write transaction plus a single statement is what keeps a concurrent
reorder from working against a stale view of the sibling indices.
"""

from __future__ import annotations

import structlog
from sqlalchemy import text
from sqlmodel import Session

from ordinal.config.models import BoundsPolicy
from ordinal.core.errors import InvalidArgumentError
from ordinal.models import ItemRecord
from ordinal.ordering.compactor import compact
from ordinal.ordering.invariant import maintain_ordering
from ordinal.ordering.queries import count_active_items, get_item, get_parent

logger = structlog.get_logger()

_REORDER_SQL = text("""
    UPDATE ordered_items
    SET "index" = CASE
        WHEN id = :item_id THEN :new_index
        WHEN :cur < :new_index AND "index" > :cur AND "index" <= :new_index THEN "index" - 1
        WHEN :cur > :new_index AND "index" >= :new_index AND "index" < :cur THEN "index" + 1
        ELSE "index"
    END
    WHERE parent_id = :parent_id
      AND deleted_at IS NULL
      AND (id = :item_id OR "index" BETWEEN :low AND :high)
""")

_OPEN_SLOT_SQL = text("""
    UPDATE ordered_items
    SET "index" = "index" + 1
    WHERE parent_id = :parent_id AND deleted_at IS NULL AND "index" >= :index
""")

_CLOSE_SLOT_SQL = text("""
    UPDATE ordered_items
    SET "index" = "index" - 1
    WHERE parent_id = :parent_id AND deleted_at IS NULL AND "index" > :index
""")

_REPARENT_SQL = text("""
    UPDATE ordered_items
    SET parent_id = :parent_id, "index" = :index
    WHERE id = :item_id AND deleted_at IS NULL
""")


def resolve_target_index(
    new_index: int,
    last_position: int,
    bounds: BoundsPolicy,
    argument: str = "new_index",
) -> int:
    """Apply the bounds policy to a requested target index.

    Negative indices are always rejected. Past `last_position`, the policy
    decides: reject raises, clamp returns `last_position`, trust returns the
    value unchanged and the caller compacts the parent after writing it.
    """
    if new_index < 0:
        raise InvalidArgumentError.create(argument, new_index, "index must be non-negative")
    if new_index <= last_position or bounds == "trust":
        return new_index
    if bounds == "clamp":
        return max(last_position, 0)
    raise InvalidArgumentError.create(
        argument,
        new_index,
        f"index must be between 0 and {max(last_position, 0)}",
    )


def reorder(
    session: Session,
    item_public_id: str,
    new_index: int,
    bounds: BoundsPolicy = "reject",
) -> ItemRecord:
    """Move an active item to `new_index` within its parent.

    Forward moves shift the siblings in (cur, new] down by one; backward
    moves shift the siblings in [new, cur) up by one. Moving to the current
    index issues no statement.
    """
    item = get_item(session, public_id=item_public_id)
    assert item.id is not None
    parent_id = item.parent_id
    cur = item.index

    last_position = count_active_items(session, parent_id) - 1
    target = resolve_target_index(new_index, last_position, bounds)

    if target != cur:
        session.execute(
            _REORDER_SQL,
            {
                "item_id": item.id,
                "parent_id": parent_id,
                "cur": cur,
                "new_index": target,
                "low": min(cur, target),
                "high": max(cur, target),
            },
        )
        logger.debug(
            "item_reordered",
            public_id=item_public_id,
            parent_id=parent_id,
            from_index=cur,
            to_index=target,
        )
        if target > last_position:
            # A trusted index past the end leaves a gap behind it
            compact(session, parent_id)

    maintain_ordering(session, parent_id)
    return ItemRecord.from_model(get_item(session, item_id=item.id))


def move(
    session: Session,
    item_public_id: str,
    new_parent_id: str,
    new_index: int | None = None,
    bounds: BoundsPolicy = "reject",
) -> ItemRecord:
    """Move an active item to another parent, at `new_index` or at the end.

    Three set-based statements: open a slot in the target, close the gap in
    the source, re-parent the item. Both parents are checked afterwards.
    Moving within the same parent is a reorder.
    """
    item = get_item(session, public_id=item_public_id)
    assert item.id is not None
    source_id = item.parent_id
    cur = item.index

    if new_parent_id == source_id:
        if new_index is None:
            new_index = max(count_active_items(session, source_id) - 1, 0)
        return reorder(session, item_public_id, new_index, bounds)

    get_parent(session, new_parent_id)
    target_count = count_active_items(session, new_parent_id)
    if new_index is None:
        target = target_count
    else:
        target = resolve_target_index(new_index, target_count, bounds)

    insert_slot(session, new_parent_id, target)
    close_slot(session, source_id, cur)
    session.execute(
        _REPARENT_SQL,
        {"parent_id": new_parent_id, "index": target, "item_id": item.id},
    )
    logger.debug(
        "item_moved",
        public_id=item_public_id,
        from_parent=source_id,
        to_parent=new_parent_id,
        from_index=cur,
        to_index=target,
    )
    if target > target_count:
        compact(session, new_parent_id)

    maintain_ordering(session, source_id)
    maintain_ordering(session, new_parent_id)
    return ItemRecord.from_model(get_item(session, item_id=item.id))


def insert_slot(session: Session, parent_id: str, index: int) -> None:
    """Shift active items at or after `index` up by one."""
    session.execute(_OPEN_SLOT_SQL, {"parent_id": parent_id, "index": index})


def close_slot(session: Session, parent_id: str, index: int) -> None:
    """Shift active items after `index` down by one."""
    session.execute(_CLOSE_SLOT_SQL, {"parent_id": parent_id, "index": index})
