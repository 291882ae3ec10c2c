"""Ordering module - index maintenance for ordered collections.

This module provides:
- Append allocation: next index for a parent inside the write transaction
- Set-based sibling shifts: reorder, cross-parent move, soft delete
- Order-preserving bulk insert across parents
- Compaction and the invariant pass run before every commit

Public API is in `ordinal.ordering.ops`:
- OrderingEngine: transaction-scoped entry points
- InvariantReport, DuplicateIndex: verification results
"""

from ordinal.ordering.allocator import allocate_append_index
from ordinal.ordering.bulk import bulk_insert
from ordinal.ordering.compactor import compact
from ordinal.ordering.create import create_item
from ordinal.ordering.delete import (
    soft_delete,
    soft_delete_all_by_parent,
    soft_delete_all_by_parents,
)
from ordinal.ordering.invariant import (
    DuplicateIndex,
    InvariantChecker,
    InvariantReport,
    check_parent,
    maintain_ordering,
)
from ordinal.ordering.ops import OrderingEngine
from ordinal.ordering.reorder import move, reorder

__all__ = [
    "OrderingEngine",
    # Components
    "allocate_append_index",
    "bulk_insert",
    "compact",
    "create_item",
    "move",
    "reorder",
    "soft_delete",
    "soft_delete_all_by_parent",
    "soft_delete_all_by_parents",
    # Invariant
    "DuplicateIndex",
    "InvariantChecker",
    "InvariantReport",
    "check_parent",
    "maintain_ordering",
]
