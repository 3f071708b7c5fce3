"""Cell edit lifecycle: select, edit, commit or cancel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from loan_register.grid import GridStore


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selected:
    row: int
    col: int


@dataclass(frozen=True)
class Editing:
    row: int
    col: int
    buffer: str


EditState = Union[Idle, Selected, Editing]


class CellEditSession:
    """Single-cursor editor over a :class:`GridStore`.

    Only :meth:`commit` writes to the store. Entering ``Editing`` replaces
    any edit already in progress, so at most one cell is ever being edited;
    callers that want focus-loss semantics call :meth:`commit` first.
    """

    def __init__(self, store: GridStore) -> None:
        self.store = store
        self.state: EditState = Idle()
        self.selection: tuple[int, int] | None = None

    @property
    def is_editing(self) -> bool:
        return isinstance(self.state, Editing)

    def click(self, row: int, col: int) -> EditState:
        self.selection = (row, col)
        self.state = Selected(row, col)
        return self.state

    def double_click(self, row: int, col: int) -> EditState:
        self.selection = (row, col)
        self.state = Editing(row, col, self.store.get(row, col).as_text())
        return self.state

    def type_into(self, value: str) -> EditState:
        if isinstance(self.state, Editing):
            self.state = Editing(self.state.row, self.state.col, value)
        return self.state

    def commit(self) -> tuple[int, int] | None:
        """Write the buffer into the store; returns the written coordinate."""
        state = self.state
        if not isinstance(state, Editing):
            return None
        self.store.set(state.row, state.col, state.buffer)
        self.state = Selected(state.row, state.col)
        return state.row, state.col

    # Enter and blur both confirm in place; selection does not move.
    commit_and_advance = commit

    def cancel(self) -> EditState:
        state = self.state
        if isinstance(state, Editing):
            self.state = Selected(state.row, state.col)
        return self.state
