"""Tests for append-index allocation."""

from __future__ import annotations

from collections.abc import Callable

from ordinal.models import ItemRecord
from ordinal.ordering.allocator import allocate_append_index
from ordinal.ordering.ops import OrderingEngine


class TestAllocateAppendIndex:
    """allocate_append_index reads max(active index) + 1 inside the transaction."""

    def test_given_empty_parent_when_allocate_then_zero(self, engine: OrderingEngine) -> None:
        """An empty parent starts at 0."""
        # Given
        engine.create_parent("p")

        # When
        with engine.db.session() as session:
            index = allocate_append_index(session, "p")

        # Then
        assert index == 0

    def test_given_items_when_allocate_then_max_plus_one(
        self, engine: OrderingEngine, seeded: Callable[..., list[ItemRecord]]
    ) -> None:
        """Next index follows the highest active index."""
        seeded("p", "a", "b", "c")

        with engine.db.session() as session:
            assert allocate_append_index(session, "p") == 3

    def test_deleted_items_do_not_count(
        self, engine: OrderingEngine, seeded: Callable[..., list[ItemRecord]]
    ) -> None:
        """Soft-deleted rows are ignored by the allocator."""
        items = seeded("p", "a", "b")
        engine.soft_delete(items[1].id, who="tester")

        with engine.db.session() as session:
            assert allocate_append_index(session, "p") == 1

    def test_other_parents_do_not_count(
        self, engine: OrderingEngine, seeded: Callable[..., list[ItemRecord]]
    ) -> None:
        """Allocation is scoped to one parent."""
        seeded("p", "a", "b", "c")
        engine.create_parent("q")

        with engine.db.session() as session:
            assert allocate_append_index(session, "q") == 0


class TestCreateAppended:
    """Appending through the engine."""

    def test_given_four_appends_when_listed_then_indices_zero_to_three(
        self,
        seeded: Callable[..., list[ItemRecord]],
        labels: Callable[[str], list[tuple[str, int]]],
    ) -> None:
        """Append four items to an empty parent -> indices 0,1,2,3 in call order."""
        # Given / When
        created = seeded("p", "a", "b", "c", "d")

        # Then
        assert [item.index for item in created] == [0, 1, 2, 3]
        assert labels("p") == [("a", 0), ("b", 1), ("c", 2), ("d", 3)]

    def test_append_returns_payload_unchanged(self, engine: OrderingEngine) -> None:
        """The domain payload passes through untouched."""
        engine.create_parent("p")
        payload = {"title": "Card", "tags": ["x", "y"], "n": 3}

        item = engine.create_appended("p", payload, created_by="alice")

        assert item.payload == payload
        assert item.created_by == "alice"
        assert item.is_active
        assert engine.get_by_public_id(item.public_id) == item

    def test_append_after_delete_reuses_tail(
        self,
        engine: OrderingEngine,
        seeded: Callable[..., list[ItemRecord]],
        labels: Callable[[str], list[tuple[str, int]]],
    ) -> None:
        """After deleting the last item the next append takes its slot."""
        items = seeded("p", "a", "b", "c")
        engine.soft_delete(items[2].id, who="tester")

        engine.create_appended("p", {"label": "d"})

        assert labels("p") == [("a", 0), ("b", 1), ("d", 2)]
