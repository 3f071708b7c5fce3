from __future__ import annotations

import pytest

from loan_register.grid import (
    GridMutator,
    GridStore,
    cell_reference,
    column_index,
    column_label,
    parse_cell_reference,
)
from loan_register.models import Cell


def test_get_out_of_range_returns_empty() -> None:
    store = GridStore([["a"]])

    assert store.get(0, 0) == Cell.text("a")
    assert store.get(0, 5).is_empty
    assert store.get(9, 0).is_empty
    assert store.get(-1, 0).is_empty


def test_set_grows_rows_and_columns_implicitly() -> None:
    store = GridStore()

    store.set(2, 3, "x")

    assert store.row_count == 3
    assert store.to_rows() == [[], [], ["", "", "", "x"]]
    assert store.get(2, 3).as_text() == "x"


def test_set_does_not_touch_other_cells() -> None:
    store = GridStore([["a", "b"], ["c"]])

    store.set(1, 0, "z")

    assert store.to_rows() == [["a", "b"], ["z"]]


def test_dimensions_respect_viewport_minimums() -> None:
    store = GridStore([["a", "b"], ["c"]])

    assert store.dimensions() == (20, 10)

    wide = GridStore([["x"] * 12] * 25)
    assert wide.dimensions() == (25, 12)


def test_dimensions_recomputed_after_writes() -> None:
    store = GridStore(min_rows=0, min_cols=0)
    assert store.dimensions() == (0, 0)

    store.set(4, 6, 1)

    assert store.dimensions() == (5, 7)


def test_from_rows_keeps_ragged_shape_and_types() -> None:
    store = GridStore.from_rows([["h1", "h2", "h3"], ["v", 12], [], [None, 3.5]])

    assert store.to_rows() == [["h1", "h2", "h3"], ["v", 12], [], ["", 3.5]]
    assert store.longest_row == 3
    assert store.get(1, 1) == Cell.number(12)


def test_append_row_returns_new_index() -> None:
    store = GridStore([["h"]])

    index = store.append_row(["a", "b"])

    assert index == 1
    assert store.row(1) == [Cell.text("a"), Cell.text("b")]


def test_revision_increases_on_write() -> None:
    store = GridStore()
    before = store.revision

    store.set(0, 0, "x")

    assert store.revision > before


# ── mutator ──────────────────────────────────────────────────────


def test_add_column_pads_to_longest_row() -> None:
    store = GridStore([["A1", "B1"], ["A2", "B2"]])

    new_col = GridMutator(store).add_column()

    assert new_col == 2
    assert store.to_rows() == [["A1", "B1", ""], ["A2", "B2", ""]]


def test_add_column_on_ragged_rows_fills_up_to_new_column() -> None:
    store = GridStore([["a", "b", "c"], ["d"], []])

    GridMutator(store).add_column()

    assert store.to_rows() == [["a", "b", "c", ""], ["d", "", "", ""], ["", "", "", ""]]


def test_add_column_on_empty_store_changes_nothing() -> None:
    store = GridStore()
    revision = store.revision

    assert GridMutator(store).add_column() == 0
    assert store.to_rows() == []
    assert store.revision == revision


def test_add_column_grows_stored_column_count_by_one() -> None:
    store = GridStore([["a"] * 11, ["b"]], min_rows=0, min_cols=0)
    before = store.dimensions()[1]

    GridMutator(store).add_column()

    assert store.dimensions()[1] == before + 1
    assert store.dimensions()[1] >= store.longest_row


def test_add_row_then_delete_last_row_is_identity() -> None:
    rows = [["h1", "h2"], ["a", 1], ["b"]]
    store = GridStore(rows)
    mutator = GridMutator(store)

    index = mutator.add_row()
    assert store.row_count == 4
    assert store.row(index) == []

    assert mutator.delete_row(index) is True
    assert store.to_rows() == rows


def test_delete_row_shifts_later_rows_down() -> None:
    store = GridStore([["r0"], ["r1"], ["r2"], ["r3"]])

    GridMutator(store).delete_row(1)

    assert store.to_rows() == [["r0"], ["r2"], ["r3"]]


def test_delete_row_out_of_range_is_noop() -> None:
    store = GridStore([["r0"]])
    mutator = GridMutator(store)

    assert mutator.delete_row(5) is False
    assert mutator.delete_row(-1) is False
    assert store.to_rows() == [["r0"]]


def test_delete_column_handles_ragged_rows_independently() -> None:
    store = GridStore([["a", "b", "c"], ["d"], ["e", "f"]])

    changed = GridMutator(store).delete_column(1)

    assert changed is True
    assert store.to_rows() == [["a", "c"], ["d"], ["e"]]


def test_delete_column_beyond_all_rows_is_noop() -> None:
    store = GridStore([["a"], ["b"]])
    revision = store.revision

    assert GridMutator(store).delete_column(4) is False
    assert store.revision == revision


# ── labels ───────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("index", "label"),
    [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA")],
)
def test_column_label_and_index_are_inverse(index: int, label: str) -> None:
    assert column_label(index) == label
    assert column_index(label) == index
    assert column_index(label.lower()) == index


def test_column_label_rejects_negative_index() -> None:
    with pytest.raises(ValueError, match="column index"):
        column_label(-1)


@pytest.mark.parametrize("bad", ["", "1", "A1", "É"])
def test_column_index_rejects_bad_labels(bad: str) -> None:
    with pytest.raises(ValueError, match="Invalid column label"):
        column_index(bad)


def test_cell_reference_round_trip() -> None:
    assert parse_cell_reference("B3") == (2, 1)
    assert parse_cell_reference(" aa10 ") == (9, 26)
    assert cell_reference(2, 1) == "B3"


@pytest.mark.parametrize("bad", ["B0", "3B", "B", "", "B-1"])
def test_parse_cell_reference_rejects_bad_input(bad: str) -> None:
    with pytest.raises(ValueError, match="Invalid cell reference"):
        parse_cell_reference(bad)
