"""Loan-record validation, duplicate detection, and appending to the grid."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import fields, replace
from typing import Any

from loan_register import EMPLOYEE_NO_COLUMN, MEMBERSHIP_NO_COLUMN
from loan_register.grid import GridStore
from loan_register.models import (
    BOOL_FIELDS,
    FIGURES_TO_WORDS,
    AppendOutcome,
    Cell,
    LoanRecord,
)
from loan_register.numerals import amount_in_words

DEFAULT_SOCIETY_NAME_ADDRESS = "Default Society Name & Address"
DUPLICATE_MESSAGE = "A record with this Membership No. or Employee No. already exists!"

REQUIRED_FIELDS: dict[str, str] = {
    "serial_no": "Serial No. is required",
    "membership_no": "Membership No. is required",
    "member_name": "Member Name is required",
    "father_husband_name": "Father/Husband Name is required",
    "loan_amount_figures": "Loan Amount (Figures) is required",
    "loan_amount_words": "Loan Amount (Words) is required",
    "loan_start_month_year": "Loan Start Month/Year is required",
    "employee_number": "Employee Number is required",
    "agreement_date": "Agreement Date is required",
}

IDENTITY_FIELDS = ("membership_no", "employee_number")
WORDS_FIELDS: frozenset[str] = frozenset(FIGURES_TO_WORDS.values())


def _cell_text(row: Sequence[Any], index: int) -> str:
    if index >= len(row):
        return ""
    return Cell.from_scalar(row[index]).as_text()


def is_duplicate(
    rows: Sequence[Sequence[Any]],
    key_a: int,
    key_b: int,
    candidate_a: str,
    candidate_b: str,
) -> bool:
    """True when any data row matches *candidate_a* at *key_a* **or**
    *candidate_b* at *key_b*.

    Row 0 is the header and is never compared. Cells are compared by their
    text form; a missing cell reads as ``""``.
    """
    for row in rows[1:]:
        row = row or []
        if _cell_text(row, key_a) == candidate_a or _cell_text(row, key_b) == candidate_b:
            return True
    return False


def validate_required(record: LoanRecord) -> dict[str, str]:
    """Return ``{field: message}`` for every required field left blank."""
    errors: dict[str, str] = {}
    for name, message in REQUIRED_FIELDS.items():
        if not getattr(record, name).strip():
            errors[name] = message
    return errors


class RecordAppender:
    """Validate a :class:`LoanRecord` and append it as a new register row."""

    def __init__(
        self,
        store: GridStore,
        *,
        key_a: int = MEMBERSHIP_NO_COLUMN,
        key_b: int = EMPLOYEE_NO_COLUMN,
    ) -> None:
        self.store = store
        self.key_a = key_a
        self.key_b = key_b

    def check(self, record: LoanRecord) -> AppendOutcome:
        """Run both validation stages without appending."""
        field_errors = validate_required(record)
        if field_errors:
            return AppendOutcome(field_errors=field_errors)
        if is_duplicate(
            self.store.cells(),
            self.key_a,
            self.key_b,
            record.membership_no.strip(),
            record.employee_number.strip(),
        ):
            return AppendOutcome(duplicate_error=DUPLICATE_MESSAGE)
        return AppendOutcome()

    def append(self, record: LoanRecord) -> AppendOutcome:
        outcome = self.check(record)
        if outcome.field_errors or outcome.duplicate_error:
            return outcome
        row_index = self.store.append_row(record.to_row())
        return AppendOutcome(appended=True, row_index=row_index)


class LoanForm:
    """Entry-form state for one loan record at a time.

    Figures fields drive their words fields; words fields cannot be set
    directly. After a successful submit the form resets, except that the
    society name & address keeps its last non-empty value.
    """

    def __init__(self, defaults: Mapping[str, Any] | None = None) -> None:
        base: dict[str, Any] = {"society_name_address": DEFAULT_SOCIETY_NAME_ADDRESS}
        for name, value in (defaults or {}).items():
            _check_field_name(name)
            if name in WORDS_FIELDS:
                raise ValueError(f"{name} is computed from its figures field and has no default")
            base[name] = _coerce_field(name, value)
        self._defaults = base
        self.record = self._fresh_record()
        self.errors: dict[str, str] = {}
        self.duplicate_error = ""

    def _fresh_record(self) -> LoanRecord:
        record = LoanRecord(**self._defaults)
        for figures, words in FIGURES_TO_WORDS.items():
            computed = amount_in_words(getattr(record, figures))
            if computed:
                record = replace(record, **{words: computed})
        return record

    def set_field(self, name: str, value: Any) -> None:
        _check_field_name(name)
        if name in WORDS_FIELDS:
            raise ValueError(f"{name} is read-only; set its figures field instead")
        updates: dict[str, Any] = {name: _coerce_field(name, value)}
        words_field = FIGURES_TO_WORDS.get(name)
        if words_field is not None:
            computed = amount_in_words(updates[name])
            # An invalid or cleared amount keeps the last computed words.
            if computed:
                updates[words_field] = computed
                self.errors.pop(words_field, None)
        self.record = replace(self.record, **updates)
        self.errors.pop(name, None)
        if name in IDENTITY_FIELDS:
            self.duplicate_error = ""

    def update(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    def reset(self) -> None:
        society = self.record.society_name_address
        self.record = self._fresh_record()
        if society.strip():
            self.record = replace(self.record, society_name_address=society)
        self.errors = {}
        self.duplicate_error = ""

    def submit(self, appender: RecordAppender) -> AppendOutcome:
        outcome = appender.append(self.record)
        self.errors = dict(outcome.field_errors)
        self.duplicate_error = outcome.duplicate_error
        if outcome.appended:
            self.reset()
        return outcome


def _check_field_name(name: str) -> None:
    if name not in _FIELD_NAMES:
        raise ValueError(f"Unknown record field: {name!r}")


def _coerce_field(name: str, value: Any) -> str | bool:
    if name in BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in {"yes", "y", "true", "1"}:
            return True
        if text in {"no", "n", "false", "0", ""}:
            return False
        raise ValueError(f"{name} must be yes/no, got {value!r}")
    if value is None:
        return ""
    return str(value)


_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in fields(LoanRecord))
