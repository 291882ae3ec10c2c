"""Single-item creation at the end or the start of a parent."""

from __future__ import annotations

from typing import Any, Literal

from sqlmodel import Session

from ordinal.core.errors import InternalError, InvalidArgumentError
from ordinal.models import ItemRecord, OrderedItem
from ordinal.ordering.allocator import allocate_append_index
from ordinal.ordering.invariant import maintain_ordering
from ordinal.ordering.queries import (
    existing_public_ids,
    get_item,
    get_parent,
    new_public_id,
    utcnow,
)
from ordinal.ordering.reorder import insert_slot

Position = Literal["start", "end"]


def create_item(
    session: Session,
    parent_id: str,
    payload: Any = None,
    *,
    position: Position = "end",
    created_by: str | None = None,
    public_id: str | None = None,
    public_id_length: int = 12,
) -> ItemRecord:
    """Insert one item into an active parent.

    "end" takes the next append index; "start" shifts every active sibling up
    by one in a single statement and takes index 0.
    """
    get_parent(session, parent_id)
    if public_id == "":
        raise InvalidArgumentError.create("public_id", public_id, "must not be empty")
    if public_id is not None and existing_public_ids(session, [public_id]):
        raise InvalidArgumentError.create("public_id", public_id, "public id already in use")

    if position == "start":
        index = 0
        insert_slot(session, parent_id, 0)
    else:
        index = allocate_append_index(session, parent_id)

    item = OrderedItem(
        public_id=public_id if public_id is not None else new_public_id(public_id_length),
        parent_id=parent_id,
        index=index,
        payload=payload,
        created_by=created_by,
        created_at=utcnow(),
    )
    session.add(item)
    session.flush()
    if item.id is None:
        raise InternalError.unexpected(f"Failed to create item for parent {parent_id}")

    maintain_ordering(session, parent_id)
    return ItemRecord.from_model(get_item(session, item_id=item.id))
