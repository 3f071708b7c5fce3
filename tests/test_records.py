from __future__ import annotations

import pytest

from loan_register import EMPLOYEE_NO_COLUMN, HEADERS, MEMBERSHIP_NO_COLUMN
from loan_register.grid import GridStore
from loan_register.models import LoanRecord
from loan_register.records import (
    DEFAULT_SOCIETY_NAME_ADDRESS,
    DUPLICATE_MESSAGE,
    LoanForm,
    RecordAppender,
    is_duplicate,
    validate_required,
)


def _record(**overrides: object) -> LoanRecord:
    values: dict[str, object] = {
        "serial_no": "1",
        "membership_no": "M1",
        "member_name": "Asha Rao",
        "father_husband_name": "K. Rao",
        "society_name_address": "Staff Society, Main Road",
        "loan_amount_figures": "50000",
        "loan_amount_words": "Fifty Thousand Rupees Only",
        "loan_start_month_year": "2024-04",
        "employee_number": "E100",
        "agreement_date": "2024-03-28",
    }
    values.update(overrides)
    return LoanRecord(**values)  # type: ignore[arg-type]


def _register(*records: LoanRecord) -> GridStore:
    store = GridStore([list(HEADERS)])
    for record in records:
        store.append_row(record.to_row())
    return store


# ── is_duplicate ─────────────────────────────────────────────────


def test_is_duplicate_skips_header_row() -> None:
    rows = [["Serial No.", "M1"]]

    assert is_duplicate(rows, 1, 17, "M1", "E1") is False


def test_is_duplicate_matches_on_either_field() -> None:
    rows = [["h"] * 18, ["1", "M1"] + [""] * 15 + ["E1"]]

    assert is_duplicate(rows, 1, 17, "M1", "E-new") is True
    assert is_duplicate(rows, 1, 17, "M-new", "E1") is True
    assert is_duplicate(rows, 1, 17, "M-new", "E-new") is False


def test_is_duplicate_compares_text_forms() -> None:
    rows = [["h", "h"], ["x", 101.0]]

    assert is_duplicate(rows, 1, 5, "101", "zzz") is True


def test_is_duplicate_treats_missing_cells_as_empty() -> None:
    rows = [["h"], ["only-one-cell"]]

    assert is_duplicate(rows, 1, 17, "", "E1") is True
    assert is_duplicate(rows, 1, 17, "M1", "E1") is False


# ── validation / append ─────────────────────────────────────────


def test_validate_required_reports_each_blank_field() -> None:
    errors = validate_required(LoanRecord(member_name="  "))

    assert errors["serial_no"] == "Serial No. is required"
    assert errors["member_name"] == "Member Name is required"
    assert "department_name" not in errors
    assert len(errors) == 9


def test_append_writes_31_column_row_with_yes_no_flags() -> None:
    store = _register()
    appender = RecordAppender(store)

    outcome = appender.append(_record(member_signature=True))

    assert outcome.appended is True
    assert outcome.row_index == 1
    row = store.to_rows()[1]
    assert len(row) == 31
    assert row[MEMBERSHIP_NO_COLUMN] == "M1"
    assert row[EMPLOYEE_NO_COLUMN] == "E100"
    assert row[29] == "Yes"
    assert row[30] == "No"


def test_append_blocked_by_missing_required_fields() -> None:
    store = _register()

    outcome = RecordAppender(store).append(_record(agreement_date="", serial_no=" "))

    assert outcome.appended is False
    assert set(outcome.field_errors) == {"agreement_date", "serial_no"}
    assert outcome.duplicate_error == ""
    assert store.row_count == 1


def test_append_rejects_membership_collision_with_new_employee_number() -> None:
    store = _register(_record())

    outcome = RecordAppender(store).append(
        _record(serial_no="2", employee_number="E-brand-new")
    )

    assert outcome.appended is False
    assert outcome.duplicate_error == DUPLICATE_MESSAGE
    assert outcome.field_errors == {}
    assert store.row_count == 2


def test_append_rejects_employee_collision_and_trims_candidates() -> None:
    store = _register(_record())

    outcome = RecordAppender(store).append(
        _record(membership_no="M2", employee_number="  E100  ")
    )

    assert outcome.duplicate_error == DUPLICATE_MESSAGE


def test_required_errors_take_precedence_over_duplicates() -> None:
    store = _register(_record())

    outcome = RecordAppender(store).append(_record(member_name=""))

    assert outcome.field_errors == {"member_name": "Member Name is required"}
    assert outcome.duplicate_error == ""


# ── form ─────────────────────────────────────────────────────────


def test_form_mirrors_figures_into_words() -> None:
    form = LoanForm()

    form.set_field("loan_amount_figures", "125000")
    form.set_field("salary_figures", "38000")

    assert form.record.loan_amount_words == "One Lakh Twenty Five Thousand Rupees Only"
    assert form.record.salary_words == "Thirty Eight Thousand Rupees Only"


def test_form_keeps_last_words_when_figures_cleared_or_invalid() -> None:
    form = LoanForm()
    form.set_field("loan_amount_figures", "500")

    form.set_field("loan_amount_figures", "")
    assert form.record.loan_amount_figures == ""
    assert form.record.loan_amount_words == "Five Hundred Rupees Only"

    form.set_field("loan_amount_figures", "abc")
    assert form.record.loan_amount_words == "Five Hundred Rupees Only"


def test_form_words_fields_are_read_only() -> None:
    form = LoanForm()

    with pytest.raises(ValueError, match="read-only"):
        form.set_field("loan_amount_words", "Lots")


def test_form_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError, match="Unknown record field"):
        LoanForm().set_field("nickname", "x")

    with pytest.raises(ValueError, match="Unknown record field"):
        LoanForm({"nickname": "x"})


def test_form_parses_signature_flags() -> None:
    form = LoanForm()

    form.set_field("member_signature", "yes")
    form.set_field("manager_signature", True)
    assert form.record.member_signature is True
    assert form.record.manager_signature is True

    with pytest.raises(ValueError, match="member_signature"):
        form.set_field("member_signature", "maybe")


def test_form_editing_clears_field_and_duplicate_errors() -> None:
    store = _register(_record())
    form = LoanForm()
    form.update({k: v for k, v in _record().__dict__.items() if not k.endswith("_words")})
    form.set_field("member_name", "")

    outcome = form.submit(RecordAppender(store))
    assert "member_name" in form.errors
    assert outcome.appended is False

    form.set_field("member_name", "Someone")
    assert "member_name" not in form.errors

    form.submit(RecordAppender(store))
    assert form.duplicate_error == DUPLICATE_MESSAGE

    form.set_field("employee_number", "E200")
    assert form.duplicate_error == ""


def test_form_submit_resets_but_keeps_society_address() -> None:
    store = _register()
    form = LoanForm()
    form.update(
        {
            "serial_no": "1",
            "membership_no": "M9",
            "member_name": "Ravi",
            "father_husband_name": "Mohan",
            "society_name_address": "Co-op Society, Ward 4",
            "loan_amount_figures": "2000",
            "loan_start_month_year": "2024-05",
            "employee_number": "E9",
            "agreement_date": "2024-05-01",
            "member_signature": True,
        }
    )

    outcome = form.submit(RecordAppender(store))

    assert outcome.appended is True
    assert store.to_rows()[1][6] == "Two Thousand Rupees Only"
    assert form.record.society_name_address == "Co-op Society, Ward 4"
    assert form.record.membership_no == ""
    assert form.record.loan_amount_words == ""
    assert form.record.member_signature is False


def test_form_reset_restores_default_society_when_blank() -> None:
    form = LoanForm()
    form.set_field("society_name_address", "  ")

    form.reset()

    assert form.record.society_name_address == DEFAULT_SOCIETY_NAME_ADDRESS


def test_form_defaults_from_profile_apply_to_fresh_records() -> None:
    form = LoanForm({"society_name_address": "Profile Society", "department_name": "Stores"})

    assert form.record.society_name_address == "Profile Society"
    assert form.record.department_name == "Stores"

    with pytest.raises(ValueError, match="computed"):
        LoanForm({"salary_words": "x"})
