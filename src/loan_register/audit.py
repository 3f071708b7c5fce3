"""Register audit — identity collisions, check report and run manifest."""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loan_register import EMPLOYEE_NO_COLUMN, MEMBERSHIP_NO_COLUMN, __version__
from loan_register.io import write_json
from loan_register.models import Cell, CheckReport, IdentityCollision, RunManifest

_KEY_NAMES = {
    MEMBERSHIP_NO_COLUMN: "membership_no",
    EMPLOYEE_NO_COLUMN: "employee_number",
}


def find_identity_collisions(
    rows: Sequence[Sequence[Any]],
    key_a: int = MEMBERSHIP_NO_COLUMN,
    key_b: int = EMPLOYEE_NO_COLUMN,
) -> list[IdentityCollision]:
    """Report data rows whose identity value repeats an earlier data row.

    Uses the same policy as the append guard: a repeat on either key is a
    collision. Blank keys are ignored; row 0 is the header.
    """
    seen: dict[int, dict[str, int]] = {key_a: {}, key_b: {}}
    collisions: list[IdentityCollision] = []
    for row_idx in range(1, len(rows)):
        row = rows[row_idx] or []
        for key in seen:
            value = Cell.from_scalar(row[key]).as_text() if key < len(row) else ""
            if not value.strip():
                continue
            first = seen[key].get(value)
            if first is None:
                seen[key][value] = row_idx
                continue
            collisions.append(
                IdentityCollision(
                    row=row_idx,
                    earlier_row=first,
                    field_name=_KEY_NAMES.get(key, f"column_{key}"),
                    value=value,
                )
            )
    return collisions


def check_register(rows: Sequence[Sequence[Any]]) -> CheckReport:
    data_rows = max(len(rows) - 1, 0)
    report = CheckReport(rows_checked=data_rows, collisions=find_identity_collisions(rows))
    if not rows:
        report.warnings.append("Register is empty (no header row)")
    elif data_rows == 0:
        report.warnings.append("Register has a header row but no records")
    for collision in report.collisions:
        report.warnings.append(
            f"Row {collision.row + 1} repeats {collision.field_name} "
            f"{collision.value!r} from row {collision.earlier_row + 1}"
        )
    return report


def write_check_report(out_dir: Path, report: CheckReport) -> Path:
    """Write ``register_check.json`` into *out_dir* and return the path."""
    return write_json(out_dir / "register_check.json", report.to_dict())


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def write_manifest(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    rows_checked: int,
    *,
    status: str = "success",
    error_code: int | None = None,
    error_message: str = "",
) -> Path:
    """Write ``run_manifest.json`` describing one check run."""
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    manifest = RunManifest(
        version=__version__,
        run_id=created_at,
        input_path=str(Path(input_file).resolve()),
        output_dir=str(Path(out_dir).resolve()),
        created_at_utc=created_at,
        rows_checked=rows_checked,
        sha256=sha256,
        status=status,
        error_code=error_code,
        error_message=error_message,
    )
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())
