"""The open register: one grid store plus the editor and helpers bound to it."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from loan_register import HEADERS
from loan_register.editing import CellEditSession
from loan_register.grid import GridMutator, GridStore
from loan_register.io import load_grid, save_grid
from loan_register.records import RecordAppender


class Document:
    """A register file opened for editing.

    Opening or creating a document always builds a fresh :class:`GridStore`;
    nothing carries over from a previously open one.
    """

    def __init__(self, store: GridStore, path: Path | None = None) -> None:
        self.store = store
        self.path = Path(path) if path is not None else None
        self.editor = CellEditSession(store)
        self.mutator = GridMutator(store)
        self.appender = RecordAppender(store)
        self._saved_revision = store.revision

    @classmethod
    def new(
        cls, path: Path | None = None, headers: Sequence[str] | None = None
    ) -> Document:
        header_row = list(HEADERS if headers is None else headers)
        store = GridStore([header_row] if header_row else [])
        return cls(store, path)

    @classmethod
    def open(cls, path: Path) -> Document:
        rows = load_grid(path)
        return cls(GridStore.from_rows(rows), path)

    @property
    def dirty(self) -> bool:
        return self.store.revision != self._saved_revision

    def save(self, path: Path | None = None) -> Path:
        """Save to *path* (becoming the document's path) or to the current path."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("Document has no file path yet; save it under a new name")
        saved = save_grid(target, self.store.to_rows())
        self.path = saved
        self._saved_revision = self.store.revision
        return saved
