"""In-memory register grid: storage, growth, and row/column mutation."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from loan_register.models import EMPTY, Cell

DEFAULT_MIN_ROWS = 20
DEFAULT_MIN_COLS = 10

_CELL_REF_RE = re.compile(r"^\s*([A-Za-z]+)\s*([1-9]\d*)\s*$")


# ── Column labels ────────────────────────────────────────────────


def column_label(index: int) -> str:
    """Return the sheet letter(s) for a 0-based column: 0 → A, 25 → Z, 26 → AA."""
    if index < 0:
        raise ValueError(f"column index must be >= 0, got {index}")
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def column_index(label: str) -> int:
    """Inverse of :func:`column_label` (case-insensitive)."""
    cleaned = label.strip().upper()
    if not cleaned or not cleaned.isascii() or not cleaned.isalpha():
        raise ValueError(f"Invalid column label: {label!r}")
    n = 0
    for ch in cleaned:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def cell_reference(row: int, col: int) -> str:
    return f"{column_label(col)}{row + 1}"


def parse_cell_reference(ref: str) -> tuple[int, int]:
    """Parse an A1-style reference into 0-based ``(row, col)``."""
    match = _CELL_REF_RE.match(ref)
    if not match:
        raise ValueError(f"Invalid cell reference: {ref!r} (expected e.g. B3)")
    return int(match.group(2)) - 1, column_index(match.group(1))


# ── Store ────────────────────────────────────────────────────────


class GridStore:
    """Ragged rows of cells with a display rectangle of at least
    ``min_rows`` x ``min_cols``.

    Reads outside stored bounds return an empty cell; writes outside them
    grow the storage. ``revision`` increases on every change.
    """

    def __init__(
        self,
        rows: Iterable[Sequence[Any]] | None = None,
        *,
        min_rows: int = DEFAULT_MIN_ROWS,
        min_cols: int = DEFAULT_MIN_COLS,
    ) -> None:
        if min_rows < 0 or min_cols < 0:
            raise ValueError("min_rows and min_cols must be >= 0")
        self.min_rows = min_rows
        self.min_cols = min_cols
        self._rows: list[list[Cell]] = []
        if rows is not None:
            for row in rows:
                self._rows.append([Cell.from_scalar(v) for v in (row or [])])
        self.revision = 0

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]], **kwargs: int) -> GridStore:
        """Build a store from load-boundary rows of scalars, keeping their shape."""
        return cls(rows, **kwargs)

    # -- reads --

    def get(self, row: int, col: int) -> Cell:
        if row < 0 or col < 0 or row >= len(self._rows):
            return EMPTY
        stored = self._rows[row]
        if col >= len(stored):
            return EMPTY
        return stored[col]

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def longest_row(self) -> int:
        return max((len(r) for r in self._rows), default=0)

    def dimensions(self) -> tuple[int, int]:
        """Display ``(row_count, col_count)``."""
        return (
            max(self.row_count, self.min_rows),
            max(self.longest_row, self.min_cols),
        )

    def row(self, index: int) -> list[Cell]:
        if index < 0 or index >= len(self._rows):
            return []
        return list(self._rows[index])

    def cells(self) -> list[list[Cell]]:
        """Copy of the stored rows, ragged as stored."""
        return [list(r) for r in self._rows]

    def to_rows(self) -> list[list[Any]]:
        """Rows of scalars for the save boundary (empty cells become ``""``)."""
        return [[c.to_scalar() for c in r] for r in self._rows]

    # -- writes --

    def set(self, row: int, col: int, value: Any) -> None:
        while len(self._rows) <= row:
            self._rows.append([])
        stored = self._rows[row]
        while len(stored) <= col:
            stored.append(EMPTY)
        stored[col] = Cell.from_scalar(value)
        self.revision += 1

    def append_row(self, values: Sequence[Any]) -> int:
        """Append *values* as a new last row and return its index."""
        index = len(self._rows)
        self._rows.append([])
        for col, value in enumerate(values):
            self.set(index, col, value)
        self.revision += 1
        return index

    # Used by GridMutator; callers outside this module go through it.
    def _insert_row(self, index: int, row: list[Cell]) -> None:
        self._rows.insert(index, row)
        self.revision += 1

    def _pop_row(self, index: int) -> list[Cell]:
        removed = self._rows.pop(index)
        self.revision += 1
        return removed

    def _stored_rows(self) -> list[list[Cell]]:
        return self._rows

    def _touch(self) -> None:
        self.revision += 1

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"GridStore(rows={self.row_count}, longest_row={self.longest_row})"


# ── Mutation ─────────────────────────────────────────────────────


class GridMutator:
    """Row/column insertion and deletion on a :class:`GridStore`."""

    def __init__(self, store: GridStore) -> None:
        self.store = store

    def add_row(self) -> int:
        """Append an empty row; returns its index."""
        index = self.store.row_count
        self.store._insert_row(index, [])
        return index

    def add_column(self) -> int:
        """Append one column after the longest row; returns the new column index.

        Shorter rows get empty filler up to the new column.
        """
        rows = self.store._stored_rows()
        new_col = self.store.longest_row
        for row in rows:
            while len(row) < new_col:
                row.append(EMPTY)
            row.append(EMPTY)
        if rows:
            self.store._touch()
        return new_col

    def delete_row(self, index: int) -> bool:
        """Remove row *index*; out-of-range is a no-op returning ``False``."""
        if index < 0 or index >= self.store.row_count:
            return False
        self.store._pop_row(index)
        return True

    def delete_column(self, index: int) -> bool:
        """Remove cell *index* from every row long enough to have one."""
        if index < 0:
            return False
        changed = False
        for row in self.store._stored_rows():
            if index < len(row):
                del row[index]
                changed = True
        if changed:
            self.store._touch()
        return changed
