"""Data models / typed values used across the package."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from enum import Enum
from numbers import Integral, Real
from typing import Any, Union


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_optional_index(value: Any, field_name: str) -> int | None:
    if value is None:
        return None
    return _to_non_negative_int(value, field_name)


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


# ── Cells ────────────────────────────────────────────────────────


class CellKind(str, Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class Cell:
    """A single grid value: empty, text, or number.

    Use the ``empty``/``text``/``number`` constructors or ``from_scalar``;
    an empty string is never stored as text.
    """

    kind: CellKind = CellKind.EMPTY
    value: Union[str, int, float, None] = None

    def __post_init__(self) -> None:
        if self.kind is CellKind.EMPTY:
            if self.value is not None:
                raise ValueError("empty cell must not carry a value")
        elif self.kind is CellKind.TEXT:
            if not isinstance(self.value, str) or not self.value:
                raise TypeError("text cell value must be a non-empty string")
        elif self.kind is CellKind.NUMBER:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise TypeError("number cell value must be an int or float")
            if not math.isfinite(self.value):
                raise ValueError("number cell value must be finite")
        else:
            raise TypeError(f"unknown cell kind: {self.kind!r}")

    @classmethod
    def empty(cls) -> Cell:
        return EMPTY

    @classmethod
    def text(cls, value: str) -> Cell:
        if value == "":
            return EMPTY
        return cls(CellKind.TEXT, value)

    @classmethod
    def number(cls, value: int | float) -> Cell:
        if isinstance(value, Integral):
            return cls(CellKind.NUMBER, int(value))
        return cls(CellKind.NUMBER, float(value))

    @classmethod
    def from_scalar(cls, value: Any) -> Cell:
        """Coerce a loosely-typed scalar (as read from a file) into a cell."""
        if isinstance(value, Cell):
            return value
        if value is None:
            return EMPTY
        if isinstance(value, bool):
            return cls.text("Yes" if value else "No")
        if isinstance(value, Real):
            number = float(value)
            if math.isnan(number):
                return EMPTY
            if math.isinf(number):
                return cls.text(str(value))
            return cls.number(value)  # type: ignore[arg-type]
        if isinstance(value, str):
            return cls.text(value)
        return cls.text(str(value))

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def as_text(self) -> str:
        """Text form used for editing and comparisons (``""`` when empty)."""
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.NUMBER:
            number = self.value
            if isinstance(number, float) and number.is_integer():
                return str(int(number))
            return str(number)
        return str(self.value)

    def to_scalar(self) -> str | int | float:
        """Scalar handed back across the save boundary."""
        if self.kind is CellKind.EMPTY:
            return ""
        return self.value  # type: ignore[return-value]


EMPTY = Cell()


# ── Loan records ─────────────────────────────────────────────────


@dataclass
class LoanRecord:
    """One loan agreement as captured by the entry form.

    Field order is the column order of the register sheet.
    """

    serial_no: str = ""
    membership_no: str = ""
    member_name: str = ""
    father_husband_name: str = ""
    society_name_address: str = ""
    loan_amount_figures: str = ""
    loan_amount_words: str = ""
    loan_start_month_year: str = ""
    loan_installment_figures: str = ""
    loan_installment_words: str = ""
    number_of_installments: str = ""
    share_value_figures: str = ""
    share_value_words: str = ""
    share_value_start_month_year: str = ""
    fixed_deposit_figures: str = ""
    fixed_deposit_words: str = ""
    fixed_deposit_start_month_year: str = ""
    employee_number: str = ""
    department_name: str = ""
    designation: str = ""
    salary_figures: str = ""
    salary_words: str = ""
    monthly_deduction_figures: str = ""
    monthly_deduction_words: str = ""
    total_deduction_figures: str = ""
    total_deduction_words: str = ""
    agreement_date: str = ""
    witness_name_1: str = ""
    witness_name_2: str = ""
    member_signature: bool = False
    manager_signature: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise TypeError(f"{f.name} must be a bool")
            elif not isinstance(value, str):
                raise TypeError(f"{f.name} must be a string")

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_row(self) -> list[str]:
        """Flatten into an ordinal register row; flags become ``Yes``/``No``."""
        row: list[str] = []
        for name in self.field_names():
            value = getattr(self, name)
            if isinstance(value, bool):
                row.append("Yes" if value else "No")
            else:
                row.append(value)
        return row


BOOL_FIELDS: frozenset[str] = frozenset({"member_signature", "manager_signature"})

# Each figures field mirrors into the paired words field.
FIGURES_TO_WORDS: dict[str, str] = {
    "loan_amount_figures": "loan_amount_words",
    "loan_installment_figures": "loan_installment_words",
    "share_value_figures": "share_value_words",
    "fixed_deposit_figures": "fixed_deposit_words",
    "salary_figures": "salary_words",
    "monthly_deduction_figures": "monthly_deduction_words",
    "total_deduction_figures": "total_deduction_words",
}


@dataclass
class AppendOutcome:
    """Result of trying to append a record to the register."""

    appended: bool = False
    row_index: int | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    duplicate_error: str = ""

    def __post_init__(self) -> None:
        self.row_index = _to_optional_index(self.row_index, "row_index")
        if self.appended and self.row_index is None:
            raise ValueError("row_index is required when appended is true")
        if self.appended and (self.field_errors or self.duplicate_error):
            raise ValueError("an appended outcome must not carry errors")

    def to_dict(self) -> dict[str, Any]:
        return {
            "appended": self.appended,
            "row_index": self.row_index,
            "field_errors": dict(self.field_errors),
            "duplicate_error": self.duplicate_error,
        }


# ── Audit artifacts ──────────────────────────────────────────────


@dataclass
class IdentityCollision:
    """A data row whose identity field repeats an earlier row's value."""

    row: int
    earlier_row: int
    field_name: str
    value: str

    def __post_init__(self) -> None:
        self.row = _to_non_negative_int(self.row, "row")
        self.earlier_row = _to_non_negative_int(self.earlier_row, "earlier_row")
        if self.earlier_row >= self.row:
            raise ValueError("earlier_row must be < row")

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row,
            "earlier_row": self.earlier_row,
            "field": self.field_name,
            "value": self.value,
        }


@dataclass
class CheckReport:
    """Identity audit emitted by ``lregister check``."""

    rows_checked: int = 0
    collisions: list[IdentityCollision] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_checked = _to_non_negative_int(self.rows_checked, "rows_checked")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.collisions is None:
            self.collisions = []
        for item in self.collisions:
            if not isinstance(item, IdentityCollision):
                raise TypeError("collisions items must be IdentityCollision")

    @property
    def passed(self) -> bool:
        return not self.collisions

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_checked": self.rows_checked,
            "collisions": [c.to_dict() for c in self.collisions],
            "warnings": list(self.warnings),
            "passed": self.passed,
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single check run."""

    tool: str = "loan-register"
    version: str = ""
    run_id: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    rows_checked: int = 0
    sha256: str = ""
    status: str = "success"
    error_code: int | None = None
    error_message: str = ""

    def __post_init__(self) -> None:
        self.rows_checked = _to_non_negative_int(self.rows_checked, "rows_checked")
        self.error_code = _to_optional_index(self.error_code, "error_code")
        if self.status not in {"success", "failed"}:
            raise ValueError(f"status must be 'success' or 'failed', got {self.status!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "run_id": self.run_id,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "rows_checked": self.rows_checked,
            "sha256": self.sha256,
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
