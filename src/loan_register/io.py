"""I/O helpers — load and save register grids, write JSON artifacts."""

from __future__ import annotations

import csv
import json
import zipfile
from collections.abc import Sequence
from datetime import date, datetime, time
from io import StringIO
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
SHEET_NAME = "Sheet1"

# ── Loading ──────────────────────────────────────────────────────


def _scalar(value: Any) -> Any:
    """Normalise a raw file value into None / str / int / float / bool."""
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    item = getattr(value, "item", None)
    if callable(item):
        return item()
    return value


def _row(values: Sequence[Any]) -> list[Any]:
    return ["" if v is None else v for v in map(_scalar, values)]


def _load_excel(path: Path) -> list[list[Any]]:
    try:
        wb = load_workbook(path, data_only=True)
    except (OSError, KeyError, zipfile.BadZipFile, InvalidFileException) as exc:
        raise ValueError(f"Could not read workbook {path}: {exc}") from exc
    try:
        ws = wb.worksheets[0]
        rows = [
            _row(values)
            for values in ws.iter_rows(
                min_row=1, min_col=1,
                max_row=ws.max_row, max_col=ws.max_column,
                values_only=True,
            )
        ]
    finally:
        wb.close()
    # A blank sheet still reports A1 as its used range.
    if rows == [[""]]:
        return []
    return rows


def _field_counts(text: str, delimiter: str) -> list[int]:
    return [len(fields) for fields in csv.reader(StringIO(text), delimiter=delimiter)]


def _load_csv(path: Path, delimiter: str) -> list[list[Any]]:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            text = path.read_text(encoding=encoding)
            counts = _field_counts(text, delimiter)
            if not counts:
                return []
            df = pd.read_csv(
                StringIO(text),
                header=None,
                names=range(max(counts)),
                dtype="string",
                sep=delimiter,
                skip_blank_lines=False,
                keep_default_na=False,
                na_values=[""],
            )
        except pd.errors.EmptyDataError:
            return []
        except (UnicodeDecodeError, csv.Error, pd.errors.ParserError) as exc:
            last_exc = exc
            continue
        records = list(df.itertuples(index=False, name=None))
        if len(records) != len(counts):
            raise ValueError(f"Could not read CSV {path} (line count mismatch)")
        # Each line keeps its own field count.
        return [_row(values[:n]) for values, n in zip(records, counts)]
    raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def load_grid(path: Path, delimiter: str = ",") -> list[list[Any]]:
    """Load the first sheet of *path* as rows of scalars.

    Empty cells come back as ``""``; nothing is trimmed. Workbook rows span
    the sheet's used range, CSV rows keep the field count of their line.
    The header row (if any) is returned as row 0.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If *path* is a directory, the extension is not supported, or
        decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _load_csv(path, delimiter)

    if suffix in EXCEL_SUFFIXES:
        return _load_excel(path)

    if suffix == ".xls":
        try:
            read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
            df = read_excel(path, engine="xlrd", header=None)
        except ImportError as exc:
            raise ValueError(
                "Unsupported .xls input unless 'xlrd' is installed. "
                "Either convert to .xlsx or add dependency: pip install xlrd"
            ) from exc
        return [_row(values) for values in df.itertuples(index=False, name=None)]

    raise ValueError(f"Unsupported file type: {suffix!r}. Use .xlsx, .csv, or .xls")


# ── Saving ───────────────────────────────────────────────────────


def _padded(rows: Sequence[Sequence[Any]]) -> list[list[Any]]:
    width = max((len(r) for r in rows), default=0)
    return [list(r) + [""] * (width - len(r)) for r in rows]


def _save_excel(tmp_path: Path, rows: Sequence[Sequence[Any]]) -> None:
    wb = Workbook()
    ws = wb.active
    if ws is None:  # pragma: no cover
        ws = wb.create_sheet()
    ws.title = SHEET_NAME
    for r_idx, row in enumerate(_padded(rows), 1):
        for c_idx, value in enumerate(row, 1):
            cell = ws.cell(row=r_idx, column=c_idx, value=value)
            # Formulas are not evaluated here; keep leading "=" as text.
            if isinstance(value, str) and value.startswith("="):
                cell.data_type = "s"
    wb.save(tmp_path)


def _save_csv(tmp_path: Path, rows: Sequence[Sequence[Any]]) -> None:
    pd.DataFrame(_padded(rows)).to_csv(tmp_path, header=False, index=False, encoding="utf-8")


def save_grid(path: Path, rows: Sequence[Sequence[Any]]) -> Path:
    """Write *rows* to *path* (``.xlsx`` or ``.csv``) atomically and return the path.

    Short rows are padded with ``""`` to the widest row, so empty rows and
    columns survive a reload.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (*EXCEL_SUFFIXES, ".csv"):
        raise ValueError(f"Unsupported file type for saving: {suffix!r}. Use .xlsx or .csv")
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_name(f"{path.stem}.tmp{path.suffix}")
    if suffix == ".csv":
        _save_csv(tmp_path, rows)
    else:
        _save_excel(tmp_path, rows)
    tmp_path.replace(path)
    return path


# ── JSON ─────────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
