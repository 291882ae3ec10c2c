"""Order-preserving batch insert across one or more parents."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import insert
from sqlmodel import Session

from ordinal.core.errors import InternalError, InvalidArgumentError
from ordinal.models import BulkItem, ItemRecord, OrderedItem
from ordinal.ordering.allocator import allocate_append_index
from ordinal.ordering.invariant import maintain_ordering
from ordinal.ordering.queries import (
    existing_public_ids,
    get_parent,
    items_by_public_id,
    new_public_id,
    utcnow,
)

logger = structlog.get_logger()


def _group_by_parent(items: Sequence[BulkItem]) -> dict[str, list[BulkItem]]:
    # dicts keep insertion order: parents appear in first-seen order
    groups: dict[str, list[BulkItem]] = {}
    for item in items:
        groups.setdefault(item.parent_id, []).append(item)
    return groups


def _sorted_by_key(parent_id: str, batch: list[BulkItem]) -> list[BulkItem]:
    try:
        return sorted(batch, key=lambda item: item.order_key)
    except TypeError as e:
        raise InvalidArgumentError.create(
            "order_key", parent_id, f"order keys in one parent must be comparable: {e}"
        ) from e


def bulk_insert(
    session: Session,
    items: Sequence[BulkItem],
    *,
    public_id_length: int = 12,
    created_by: str | None = None,
) -> list[ItemRecord]:
    """Insert many items, each parent's batch appended in `order_key` order.

    Every parent's batch starts at that parent's next append index and takes
    consecutive indices in ascending `order_key` order. Equal keys keep their
    input order. All rows go in with one multi-row INSERT, then are read back
    by public id.

    Returns the records grouped by parent (first-appearance order), each
    group in index order. An empty batch returns [] without touching storage.
    """
    if not items:
        return []

    supplied = [item.public_id for item in items if item.public_id is not None]
    if "" in supplied:
        raise InvalidArgumentError.create("public_id", "", "must not be empty")
    if len(supplied) != len(set(supplied)):
        raise InvalidArgumentError.create("public_id", supplied, "duplicate public ids in batch")
    taken = existing_public_ids(session, supplied) if supplied else set()
    if taken:
        raise InvalidArgumentError.create("public_id", sorted(taken), "public id already in use")

    groups = _group_by_parent(items)
    now = utcnow()
    rows: list[dict[str, Any]] = []
    order: dict[str, list[str]] = {}

    for parent_id, batch in groups.items():
        get_parent(session, parent_id)
        base = allocate_append_index(session, parent_id)
        public_ids = order.setdefault(parent_id, [])
        for offset, item in enumerate(_sorted_by_key(parent_id, batch)):
            public_id = (
                item.public_id if item.public_id is not None else new_public_id(public_id_length)
            )
            public_ids.append(public_id)
            rows.append(
                {
                    "public_id": public_id,
                    "parent_id": parent_id,
                    "index": base + offset,
                    "payload": item.payload,
                    "created_by": item.created_by or created_by,
                    "created_at": now,
                    "deleted_at": None,
                    "deleted_by": None,
                }
            )

    session.execute(insert(OrderedItem.__table__), rows)
    for parent_id in groups:
        maintain_ordering(session, parent_id)

    all_ids = [public_id for ids in order.values() for public_id in ids]
    found = items_by_public_id(session, all_ids)
    missing = [public_id for public_id in all_ids if public_id not in found]
    if missing:
        raise InternalError.unexpected("Inserted rows not found on read-back", missing=missing)

    logger.debug("bulk_inserted", parents=len(groups), count=len(rows))
    # Each group's public ids were assigned in ascending index order
    return [ItemRecord.from_model(found[public_id]) for public_id in all_ids]
