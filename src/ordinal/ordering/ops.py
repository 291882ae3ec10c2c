"""Public entry points of the ordering engine.

OrderingEngine wraps every mutation in exactly one write transaction and
runs the invariant pass for each touched parent before commit. Results are
returned as immutable records once the transaction has committed.

Usage::

    db = Database(Path(".ordinal/ordinal.db"))
    db.create_all()
    engine = OrderingEngine(db)
    engine.create_parent("board-1")
    a = engine.create_appended("board-1", {"title": "A"})
    engine.reorder(a.public_id, 0)
"""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog
from sqlmodel import Session, col, select
from structlog.contextvars import bound_contextvars

from ordinal.config.models import BoundsPolicy, OrdinalConfig
from ordinal.core.errors import InvalidArgumentError, OrdinalError
from ordinal.models import BulkItem, ItemRecord, OrderedParent, ParentRecord
from ordinal.ordering.bulk import bulk_insert
from ordinal.ordering.compactor import compact
from ordinal.ordering.create import Position, create_item
from ordinal.ordering.delete import (
    soft_delete,
    soft_delete_all_by_parent,
    soft_delete_all_by_parents,
)
from ordinal.ordering.invariant import InvariantReport, check_parent, maintain_ordering
from ordinal.ordering.queries import (
    count_active_items,
    get_item,
    get_parent,
    list_active_items,
    utcnow,
)
from ordinal.ordering.reorder import move as move_item
from ordinal.ordering.reorder import reorder as reorder_item
from ordinal.store.database import Database

logger = structlog.get_logger()


class OrderingEngine:
    """Index maintenance for ordered collections stored in one database."""

    def __init__(self, database: Database, config: OrdinalConfig | None = None) -> None:
        self.db = database
        self.config = config or OrdinalConfig()

    @classmethod
    def from_config(
        cls, config: OrdinalConfig, project_root: Path | None = None
    ) -> OrderingEngine:
        return cls(Database.from_config(config.database, project_root), config)

    @property
    def bounds(self) -> BoundsPolicy:
        return self.config.ordering.bounds

    @property
    def _public_id_length(self) -> int:
        return self.config.ordering.public_id_length

    @contextmanager
    def _mutation(self, operation: str, **context: Any) -> Generator[Session, None, None]:
        """One write transaction with the operation bound to the log context."""
        with bound_contextvars(operation=operation, mutation_id=uuid4().hex[:12], **context):
            try:
                with self.db.write_transaction(operation) as session:
                    yield session
            except OrdinalError as e:
                logger.info("ordering_mutation_failed", error=e)
                raise
            logger.debug("ordering_mutation_committed")

    # =========================================================================
    # Parents
    # =========================================================================

    def create_parent(self, parent_id: str) -> ParentRecord:
        """Register a parent. Returns the existing row if already active."""
        if not parent_id:
            raise InvalidArgumentError.create("parent_id", parent_id, "must not be empty")
        with self._mutation("create_parent", parent_id=parent_id) as session:
            parent = session.get(OrderedParent, parent_id)
            if parent is None:
                parent = OrderedParent(id=parent_id, created_at=utcnow())
                session.add(parent)
                session.flush()
                session.refresh(parent)
            elif parent.deleted_at is not None:
                raise InvalidArgumentError.create(
                    "parent_id", parent_id, "parent exists and is deleted"
                )
            record = ParentRecord.from_model(parent)
        return record

    def list_parent_ids(self, *, include_deleted: bool = False) -> list[str]:
        with self.db.session() as session:
            stmt = select(OrderedParent.id).order_by(col(OrderedParent.id))
            if not include_deleted:
                stmt = stmt.where(col(OrderedParent.deleted_at).is_(None))
            return list(session.exec(stmt).all())

    # =========================================================================
    # Creation
    # =========================================================================

    def create_appended(
        self,
        parent_id: str,
        payload: Any = None,
        *,
        created_by: str | None = None,
        public_id: str | None = None,
    ) -> ItemRecord:
        """Append an item at `max(active index) + 1` (or 0 for an empty parent)."""
        return self.create(parent_id, payload, created_by=created_by, public_id=public_id)

    def create(
        self,
        parent_id: str,
        payload: Any = None,
        *,
        position: Position = "end",
        created_by: str | None = None,
        public_id: str | None = None,
    ) -> ItemRecord:
        if position not in ("start", "end"):
            raise InvalidArgumentError.create("position", position, "must be 'start' or 'end'")
        with self._mutation("create", parent_id=parent_id, position=position) as session:
            return create_item(
                session,
                parent_id,
                payload,
                position=position,
                created_by=created_by,
                public_id=public_id,
                public_id_length=self._public_id_length,
            )

    def bulk_insert(
        self, items: Sequence[BulkItem], *, created_by: str | None = None
    ) -> list[ItemRecord]:
        """Insert a batch, preserving `order_key` order within each parent."""
        if not items:
            return []
        with self._mutation("bulk_insert", count=len(items)) as session:
            return bulk_insert(
                session,
                items,
                public_id_length=self._public_id_length,
                created_by=created_by,
            )

    # =========================================================================
    # Reordering
    # =========================================================================

    def reorder(
        self, item_public_id: str, new_index: int, *, bounds: BoundsPolicy | None = None
    ) -> ItemRecord:
        with self._mutation("reorder", public_id=item_public_id, new_index=new_index) as session:
            return reorder_item(session, item_public_id, new_index, bounds or self.bounds)

    def move(
        self,
        item_public_id: str,
        new_parent_id: str,
        new_index: int | None = None,
        *,
        bounds: BoundsPolicy | None = None,
    ) -> ItemRecord:
        """Move an item to another parent (or within its own), at `new_index` or the end."""
        with self._mutation(
            "move", public_id=item_public_id, parent_id=new_parent_id, new_index=new_index
        ) as session:
            return move_item(
                session, item_public_id, new_parent_id, new_index, bounds or self.bounds
            )

    # =========================================================================
    # Soft deletion
    # =========================================================================

    def soft_delete(self, item_id: int, who: str, when: datetime | None = None) -> ItemRecord:
        with self._mutation("soft_delete", item_id=item_id) as session:
            return soft_delete(session, item_id, who, when or utcnow())

    def soft_delete_all_by_parent(
        self, parent_id: str, who: str, when: datetime | None = None
    ) -> list[int]:
        with self._mutation("soft_delete_all_by_parent", parent_id=parent_id) as session:
            return soft_delete_all_by_parent(session, parent_id, who, when or utcnow())

    def soft_delete_all_by_parents(
        self, parent_ids: Sequence[str], who: str, when: datetime | None = None
    ) -> list[int]:
        if not parent_ids:
            return []
        with self._mutation("soft_delete_all_by_parents", parent_ids=list(parent_ids)) as session:
            return soft_delete_all_by_parents(
                session, list(parent_ids), who, when or utcnow()
            )

    # =========================================================================
    # Maintenance
    # =========================================================================

    def compact(self, parent_id: str) -> list[ItemRecord]:
        """Rewrite the parent's active indices to 0..n-1 and return them in order."""
        with self._mutation("compact", parent_id=parent_id) as session:
            get_parent(session, parent_id, active_only=False)
            rewritten = compact(session, parent_id)
            maintain_ordering(session, parent_id)
            records = [ItemRecord.from_model(i) for i in list_active_items(session, parent_id)]
        logger.info("parent_compacted", parent_id=parent_id, rows_rewritten=rewritten)
        return records

    def check(self, parent_id: str) -> InvariantReport:
        """Read-only report of duplicates and gaps for one parent."""
        with self.db.session() as session:
            get_parent(session, parent_id, active_only=False)
            return check_parent(session, parent_id)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_by_public_id(self, public_id: str, *, include_deleted: bool = False) -> ItemRecord:
        with self.db.session() as session:
            item = get_item(session, public_id=public_id, active_only=not include_deleted)
            return ItemRecord.from_model(item)

    def list_active(self, parent_id: str) -> list[ItemRecord]:
        with self.db.session() as session:
            get_parent(session, parent_id, active_only=False)
            return [ItemRecord.from_model(i) for i in list_active_items(session, parent_id)]

    def count_active(self, parent_id: str | None = None) -> int:
        with self.db.session() as session:
            return count_active_items(session, parent_id)

