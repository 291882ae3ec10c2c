"""SQLModel definitions and result records for the ordering engine.

Single source of truth for table schemas. Tables:
- ordered_parents: owners of ordered collections (a board, a list)
- ordered_items: children carrying the positional `index`

Result records are immutable snapshots handed back to callers after the
transaction that produced them has committed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

# ============================================================================
# TABLES
# ============================================================================


class OrderedParent(SQLModel, table=True):
    """Owner of an ordered collection. Keyed by the caller's identifier."""

    __tablename__ = "ordered_parents"

    id: str = Field(primary_key=True)
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    deleted_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    deleted_by: str | None = None


class OrderedItem(SQLModel, table=True):
    """A child row ordered by `index` within its parent.

    Active rows (deleted_at IS NULL) of one parent hold the indices 0..n-1.
    Soft-deleted rows keep their last index but no longer take part in ordering.
    """

    __tablename__ = "ordered_items"

    id: int | None = Field(default=None, primary_key=True)
    public_id: str = Field(unique=True, index=True)
    parent_id: str = Field(foreign_key="ordered_parents.id", index=True)
    index: int
    payload: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_by: str | None = None
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    deleted_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    deleted_by: str | None = None


# ============================================================================
# RECORDS
# ============================================================================


@dataclass(frozen=True, slots=True)
class ItemRecord:
    """Snapshot of an ordered item as returned to the caller."""

    id: int
    public_id: str
    parent_id: str
    index: int
    payload: Any
    created_by: str | None
    created_at: datetime
    deleted_at: datetime | None = None
    deleted_by: str | None = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @classmethod
    def from_model(cls, item: OrderedItem) -> "ItemRecord":
        assert item.id is not None
        return cls(
            id=item.id,
            public_id=item.public_id,
            parent_id=item.parent_id,
            index=item.index,
            payload=item.payload,
            created_by=item.created_by,
            created_at=item.created_at,
            deleted_at=item.deleted_at,
            deleted_by=item.deleted_by,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "public_id": self.public_id,
            "parent_id": self.parent_id,
            "index": self.index,
            "payload": self.payload,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "deleted_by": self.deleted_by,
        }


@dataclass(frozen=True, slots=True)
class ParentRecord:
    """Snapshot of a parent row."""

    id: str
    created_at: datetime
    deleted_at: datetime | None = None
    deleted_by: str | None = None

    @classmethod
    def from_model(cls, parent: OrderedParent) -> "ParentRecord":
        return cls(
            id=parent.id,
            created_at=parent.created_at,
            deleted_at=parent.deleted_at,
            deleted_by=parent.deleted_by,
        )


@dataclass(frozen=True, slots=True)
class BulkItem:
    """One entry of a bulk insert.

    `order_key` carries the caller's intended relative order within the
    parent (e.g. the position in an imported document); it is only compared,
    never stored.
    """

    parent_id: str
    order_key: int | float | str
    payload: Any = None
    public_id: str | None = None
    created_by: str | None = None
