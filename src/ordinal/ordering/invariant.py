"""Ordering invariant verification and healing.

Invariant: among active items of one parent, no two share an index, and
after a committed transaction the indices are exactly 0..n-1.

maintain_ordering() is the single routine every mutating operation runs for
each parent it touched, inside the same transaction and before commit:

1. Group active items by index; any group larger than one is a duplicate.
2. On duplicates, compact the parent once and check again.
3. If duplicates remain, raise InvariantViolationError so the whole
   transaction (including the mutation that caused it) rolls back.

The set-based statements issued by each operation are what keep the order
correct; this pass is the safety net.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlalchemy import text
from sqlmodel import Session

from ordinal.core.errors import InvariantViolationError
from ordinal.ordering.compactor import compact

logger = structlog.get_logger()

_DUPLICATES_SQL = text("""
    SELECT "index", COUNT(*) AS n FROM ordered_items
    WHERE parent_id = :parent_id AND deleted_at IS NULL
    GROUP BY "index"
    HAVING COUNT(*) > 1
    ORDER BY "index"
""")

_ACTIVE_INDICES_SQL = text("""
    SELECT "index" FROM ordered_items
    WHERE parent_id = :parent_id AND deleted_at IS NULL
    ORDER BY "index"
""")


@dataclass
class DuplicateIndex:
    """An index held by more than one active item."""

    index: int
    count: int


@dataclass
class InvariantReport:
    """Result of checking one parent."""

    parent_id: str
    passed: bool = True
    duplicates: list[DuplicateIndex] = field(default_factory=list)
    gaps: list[int] = field(default_factory=list)  # missing from 0..n-1
    active_count: int = 0
    compacted: bool = False
    rows_rewritten: int = 0

    @property
    def dense(self) -> bool:
        return not self.duplicates and not self.gaps

    def to_dict(self) -> dict[str, object]:
        return {
            "parent_id": self.parent_id,
            "passed": self.passed,
            "dense": self.dense,
            "active_count": self.active_count,
            "duplicates": [{"index": d.index, "count": d.count} for d in self.duplicates],
            "gaps": self.gaps,
            "compacted": self.compacted,
            "rows_rewritten": self.rows_rewritten,
        }


class InvariantChecker:
    """Checks and heals the ordering invariant within one session.

    Usage::

        checker = InvariantChecker(session)
        checker.maintain(parent_id)   # after a mutation, before commit
        report = checker.verify(parent_id)   # read-only, includes gaps
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_duplicates(self, parent_id: str) -> list[DuplicateIndex]:
        rows = self._session.execute(_DUPLICATES_SQL, {"parent_id": parent_id}).all()
        return [DuplicateIndex(index=int(row[0]), count=int(row[1])) for row in rows]

    def verify(self, parent_id: str) -> InvariantReport:
        """Report duplicates and gaps without changing anything."""
        report = InvariantReport(parent_id=parent_id)
        indices = [
            int(row[0])
            for row in self._session.execute(_ACTIVE_INDICES_SQL, {"parent_id": parent_id})
        ]
        report.active_count = len(indices)
        report.duplicates = self.find_duplicates(parent_id)
        report.gaps = sorted(set(range(len(indices))) - set(indices))
        report.passed = report.dense
        return report

    def maintain(self, parent_id: str) -> InvariantReport:
        """Detect duplicates, compact once, re-verify; raise if they persist."""
        report = InvariantReport(parent_id=parent_id)
        duplicates = self.find_duplicates(parent_id)
        if not duplicates:
            return report

        report.duplicates = duplicates
        logger.warning(
            "duplicate_indices_detected",
            parent_id=parent_id,
            indices=[d.index for d in duplicates],
        )
        report.rows_rewritten = compact(self._session, parent_id)
        report.compacted = True

        remaining = self.find_duplicates(parent_id)
        if remaining:
            report.passed = False
            logger.error(
                "invariant_violation",
                parent_id=parent_id,
                indices=[d.index for d in remaining],
            )
            raise InvariantViolationError.duplicates(parent_id, [d.index for d in remaining])

        logger.info(
            "duplicate_indices_healed",
            parent_id=parent_id,
            rows_rewritten=report.rows_rewritten,
        )
        return report


def maintain_ordering(session: Session, parent_id: str) -> InvariantReport:
    """Run the invariant pass for one parent. Called by every mutating operation."""
    return InvariantChecker(session).maintain(parent_id)


def check_parent(session: Session, parent_id: str) -> InvariantReport:
    """Read-only density check for one parent (duplicates and gaps)."""
    return InvariantChecker(session).verify(parent_id)
