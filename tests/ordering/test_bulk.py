"""Tests for order-preserving bulk insert."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from ordinal.core.errors import InvalidArgumentError, NotFoundError
from ordinal.models import BulkItem, ItemRecord
from ordinal.ordering.ops import OrderingEngine

Labels = Callable[[str], list[tuple[str, int]]]
Seed = Callable[..., list[ItemRecord]]


def _item(parent_id: str, key: int | float | str, label: str, **kwargs: object) -> BulkItem:
    return BulkItem(parent_id=parent_id, order_key=key, payload={"label": label}, **kwargs)  # type: ignore[arg-type]


class TestBulkInsert:
    """Batches are appended per parent in order_key order."""

    def test_given_reversed_keys_when_inserted_then_key_order_wins(
        self, engine: OrderingEngine, labels: Labels
    ) -> None:
        """[{key:2, X}, {key:1, Y}] into an empty parent -> Y=0, X=1."""
        # Given
        engine.create_parent("p")
        batch = [_item("p", 2, "X"), _item("p", 1, "Y")]

        # When
        records = engine.bulk_insert(batch)

        # Then
        assert [(r.payload["label"], r.index) for r in records] == [("Y", 0), ("X", 1)]
        assert labels("p") == [("Y", 0), ("X", 1)]

    def test_appends_after_existing_items(
        self, engine: OrderingEngine, seeded: Seed, labels: Labels
    ) -> None:
        seeded("p", "A", "B")

        engine.bulk_insert([_item("p", 10, "D"), _item("p", 5, "C")])

        assert labels("p") == [("A", 0), ("B", 1), ("C", 2), ("D", 3)]

    def test_equal_keys_keep_input_order(self, engine: OrderingEngine, labels: Labels) -> None:
        engine.create_parent("p")

        engine.bulk_insert([_item("p", 1, "first"), _item("p", 0, "zero"), _item("p", 1, "second")])

        assert labels("p") == [("zero", 0), ("first", 1), ("second", 2)]

    def test_multiple_parents_grouped_in_first_appearance_order(
        self, engine: OrderingEngine, labels: Labels
    ) -> None:
        engine.create_parent("p")
        engine.create_parent("q")
        batch = [
            _item("q", "b", "Q2"),
            _item("p", 2, "P2"),
            _item("q", "a", "Q1"),
            _item("p", 1, "P1"),
        ]

        records = engine.bulk_insert(batch)

        assert [(r.parent_id, r.payload["label"], r.index) for r in records] == [
            ("q", "Q1", 0),
            ("q", "Q2", 1),
            ("p", "P1", 0),
            ("p", "P2", 1),
        ]
        assert labels("p") == [("P1", 0), ("P2", 1)]
        assert labels("q") == [("Q1", 0), ("Q2", 1)]

    def test_empty_batch_returns_empty_list(self, engine: OrderingEngine) -> None:
        assert engine.bulk_insert([]) == []

    def test_supplied_public_ids_and_created_by_are_kept(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")

        records = engine.bulk_insert(
            [_item("p", 0, "A", public_id="import-a", created_by="importer")],
            created_by="fallback",
        )

        assert records[0].public_id == "import-a"
        assert records[0].created_by == "importer"
        assert engine.get_by_public_id("import-a").payload == {"label": "A"}

    def test_batch_created_by_fills_missing_authors(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")

        records = engine.bulk_insert([_item("p", 0, "A")], created_by="importer")

        assert records[0].created_by == "importer"

    def test_large_batch_stays_dense(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")
        batch = [_item("p", 1200 - i, f"item-{i}") for i in range(1200)]

        records = engine.bulk_insert(batch)

        assert [r.index for r in records] == list(range(1200))
        assert records[0].payload["label"] == "item-1199"
        assert engine.count_active("p") == 1200
        assert engine.check("p").passed


class TestBulkInsertErrors:
    """Invalid batches are rejected before anything is written."""

    def test_unknown_parent_raises_and_writes_nothing(
        self, engine: OrderingEngine, labels: Labels
    ) -> None:
        engine.create_parent("p")

        with pytest.raises(NotFoundError):
            engine.bulk_insert([_item("p", 0, "A"), _item("missing", 0, "B")])

        assert labels("p") == []

    def test_duplicate_public_ids_in_batch(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")

        with pytest.raises(InvalidArgumentError):
            engine.bulk_insert(
                [_item("p", 0, "A", public_id="dup"), _item("p", 1, "B", public_id="dup")]
            )

        assert engine.count_active("p") == 0

    @pytest.mark.parametrize("count", [1, 2])
    def test_empty_public_id_rejected(self, engine: OrderingEngine, count: int) -> None:
        """An empty public id is an error whether it appears once or repeated."""
        engine.create_parent("p")
        batch = [_item("p", n, f"L{n}", public_id="") for n in range(count)]

        with pytest.raises(InvalidArgumentError, match="must not be empty"):
            engine.bulk_insert(batch)

        assert engine.count_active("p") == 0

    def test_public_id_already_in_use(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")
        engine.create_appended("p", {"label": "A"}, public_id="taken")

        with pytest.raises(InvalidArgumentError):
            engine.bulk_insert([_item("p", 0, "B", public_id="taken")])

        assert engine.count_active("p") == 1

    def test_incomparable_order_keys(self, engine: OrderingEngine) -> None:
        engine.create_parent("p")

        with pytest.raises(InvalidArgumentError):
            engine.bulk_insert([_item("p", 1, "A"), _item("p", "x", "B")])

        assert engine.count_active("p") == 0
