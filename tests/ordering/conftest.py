"""Shared fixtures for ordering tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from ordinal.models import ItemRecord
    from ordinal.ordering.ops import OrderingEngine
    from ordinal.store.database import Database


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir: Path) -> Generator[Database, None, None]:
    """Create a temporary database with schema."""
    from ordinal.store import Database, create_additional_indexes

    db = Database(temp_dir / "test.db")
    db.create_all()
    create_additional_indexes(db.engine)
    yield db
    db.dispose()


@pytest.fixture
def engine(temp_db: Database) -> OrderingEngine:
    """OrderingEngine over the temporary database with default config."""
    from ordinal.ordering.ops import OrderingEngine

    return OrderingEngine(temp_db)


@pytest.fixture
def seeded(engine: OrderingEngine) -> Callable[..., list[ItemRecord]]:
    """Factory: create a parent and append one item per label, in order.

    The label goes into the payload as {"label": ...}.
    """

    def _seed(parent_id: str, *labels: str) -> list[ItemRecord]:
        engine.create_parent(parent_id)
        return [engine.create_appended(parent_id, {"label": label}) for label in labels]

    return _seed


@pytest.fixture
def labels(engine: OrderingEngine) -> Callable[[str], list[tuple[str, int]]]:
    """Factory: (label, index) pairs of a parent's active items in index order."""

    def _labels(parent_id: str) -> list[tuple[str, int]]:
        return [(item.payload["label"], item.index) for item in engine.list_active(parent_id)]

    return _labels
