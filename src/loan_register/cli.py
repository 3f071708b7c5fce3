"""CLI entry point for loan-register."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from loan_register import __version__
from loan_register.audit import check_register, utcnow_iso, write_check_report, write_manifest
from loan_register.document import Document
from loan_register.grid import (
    DEFAULT_MIN_COLS,
    DEFAULT_MIN_ROWS,
    GridStore,
    cell_reference,
    column_index,
    column_label,
    parse_cell_reference,
)
from loan_register.io import load_grid
from loan_register.numerals import amount_in_words
from loan_register.records import LoanForm

app = typer.Typer(
    name="lregister",
    help="loan-register — Keep a loan-agreement register in a spreadsheet grid.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


@contextmanager
def _handled() -> Iterator[None]:
    """Map known failures to exit 2 and anything else to exit 1."""
    try:
        yield
    except typer.Exit:
        raise
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"loan-register v{__version__}")
        raise typer.Exit()


def _normalize_field_name(name: object) -> str:
    return re.sub(r"[\s\-]+", "_", str(name).strip().lower())


def _parse_assignments(raw: list[str] | None, *, option: str = "--set") -> dict[str, str]:
    """Parse ``field=value`` pairs; later entries win."""
    if not raw:
        return {}
    values: dict[str, str] = {}
    for item in raw:
        if "=" not in item:
            raise ValueError(f"Invalid {option} value: {item!r}  (expected field=value)")
        name, value = item.split("=", 1)
        name_norm = _normalize_field_name(name)
        if not name_norm:
            raise ValueError(f"{option} entries must have a non-empty field name (field=value)")
        values[name_norm] = value.strip()
    return values


def _load_profile(profile: Path | None) -> list[str]:
    """Return ``field=value`` lines from a profile file."""
    if not profile:
        return []
    if not profile.exists():
        raise ValueError(
            f"Profile not found: {profile} (expected lines like society_name_address=...)"
        )
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines


def _save(doc: Document, output: Path | None, echo: Callable[..., None]) -> Path:
    path = doc.save(output)
    echo(f"  Saved -> {path}")
    return path


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """loan-register CLI."""


# ── new / show ───────────────────────────────────────────────────


@app.command()
def new(
    output: Path = typer.Option(
        ..., "--output", "-o",
        help="Path of the register to create (.xlsx or .csv).",
    ),
    force: bool = typer.Option(
        False, "--force",
        help="Overwrite an existing file.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Create a new register containing only the header row."""
    echo = _printer(quiet)
    with _handled():
        if output.exists() and not force:
            raise ValueError(f"File already exists: {output} (use --force to overwrite)")
        doc = Document.new(output)
        _save(doc, None, echo)
        echo(f"  {doc.store.longest_row} columns in header row")


@app.command()
def show(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Register file to display.",
        exists=True, readable=True,
    ),
    min_rows: int = typer.Option(DEFAULT_MIN_ROWS, "--min-rows", min=0, help="Minimum rows shown."),
    min_cols: int = typer.Option(DEFAULT_MIN_COLS, "--min-cols", min=0, help="Minimum columns shown."),
) -> None:
    """Print the grid with column letters and row numbers."""
    with _handled():
        store = GridStore.from_rows(load_grid(input_file), min_rows=min_rows, min_cols=min_cols)
        n_rows, n_cols = store.dimensions()

        tbl = RichTable(title=input_file.name, show_lines=False)
        tbl.add_column("", style="dim", justify="right")
        for col in range(n_cols):
            tbl.add_column(column_label(col))
        for row in range(n_rows):
            tbl.add_row(
                str(row + 1),
                *(escape(store.get(row, col).as_text()) for col in range(n_cols)),
            )
        console.print(tbl)
        console.print(
            f"  {n_rows} rows x {n_cols} columns "
            f"(stored: {store.row_count} rows, longest row {store.longest_row})"
        )


# ── add (structured record) ──────────────────────────────────────


@app.command()
def add(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Register file to append to.",
        exists=True, readable=True,
    ),
    values: list[str] | None = typer.Option(
        None, "--set", "-s",
        help=(
            "Record field: field=value. "
            "E.g. --set membership_no=M1 --set loan_amount_figures=50000"
        ),
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with form defaults (field=value lines).",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Save to this path instead of overwriting the input.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Append one loan agreement to the register.

    Words fields are filled from their figures fields.
    Exit 0 = appended, exit 2 = invalid or duplicate record.
    """
    echo = _printer(quiet)
    with _handled():
        defaults = _parse_assignments(_load_profile(profile), option="--profile")
        fields = _parse_assignments(values)
        form = LoanForm(defaults)
        form.update(fields)

        if not quiet:
            console.print(Panel(
                f"[bold]loan-register[/bold] v{__version__}\nRegister: {input_file}",
                title="Add Record", border_style="blue",
            ))
            if profile:
                console.print(f"  Using profile: {profile}")

        echo("[blue]>[/blue] Loading register …")
        doc = Document.open(input_file)
        echo(f"  {doc.store.row_count} rows")

        echo("[blue]>[/blue] Validating record …")
        outcome = form.submit(doc.appender)
        if outcome.field_errors:
            for name, message in outcome.field_errors.items():
                _err(f"{name}: {message}")
            raise typer.Exit(code=2)
        if outcome.duplicate_error:
            _err(outcome.duplicate_error)
            raise typer.Exit(code=2)

        _save(doc, output, echo)
        if not quiet:
            console.print(Panel(
                f"[green]Done[/green] — record appended as row {outcome.row_index + 1}",
                title="Record Added", border_style="green",
            ))


# ── cell / row / column editing ──────────────────────────────────


@app.command()
def edit(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Register file to edit.",
        exists=True, readable=True,
    ),
    cell: str = typer.Option(..., "--cell", "-c", help="Cell reference, e.g. B3."),
    value: str = typer.Option(..., "--value", "-v", help="New text for the cell."),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Save to this path instead of overwriting the input.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Set the text of a single cell."""
    echo = _printer(quiet)
    with _handled():
        row, col = parse_cell_reference(cell)
        doc = Document.open(input_file)
        before = doc.store.get(row, col).as_text()
        doc.editor.click(row, col)
        doc.editor.double_click(row, col)
        doc.editor.type_into(value)
        doc.editor.commit()
        echo(f"[blue]>[/blue] {cell_reference(row, col)}: {before!r} -> {value!r}")
        _save(doc, output, echo)


@app.command("add-row")
def add_row(
    input_file: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    output: Path | None = typer.Option(None, "--output", "-o"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Append an empty row."""
    echo = _printer(quiet)
    with _handled():
        doc = Document.open(input_file)
        index = doc.mutator.add_row()
        echo(f"[blue]>[/blue] Added row {index + 1}")
        _save(doc, output, echo)


@app.command("add-column")
def add_column(
    input_file: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    output: Path | None = typer.Option(None, "--output", "-o"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Append an empty column after the longest row."""
    echo = _printer(quiet)
    with _handled():
        doc = Document.open(input_file)
        index = doc.mutator.add_column()
        echo(f"[blue]>[/blue] Added column {column_label(index)}")
        _save(doc, output, echo)


@app.command("delete-row")
def delete_row(
    input_file: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    row: int = typer.Option(..., "--row", "-r", min=1, help="Row number (1-based)."),
    output: Path | None = typer.Option(None, "--output", "-o"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Delete a row; later rows move up."""
    echo = _printer(quiet)
    with _handled():
        doc = Document.open(input_file)
        if not doc.mutator.delete_row(row - 1):
            echo(f"[yellow]![/yellow] Row {row} is beyond the stored rows; nothing deleted")
            return
        echo(f"[blue]>[/blue] Deleted row {row}")
        _save(doc, output, echo)


@app.command("delete-column")
def delete_column(
    input_file: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    column: str = typer.Option(..., "--column", "-c", help="Column letter(s), e.g. B."),
    output: Path | None = typer.Option(None, "--output", "-o"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Delete a column; later columns move left."""
    echo = _printer(quiet)
    with _handled():
        index = column_index(column)
        doc = Document.open(input_file)
        label = column_label(index)
        if not doc.mutator.delete_column(index):
            echo(f"[yellow]![/yellow] Column {label} is beyond every stored row; nothing deleted")
            return
        echo(f"[blue]>[/blue] Deleted column {label}")
        _save(doc, output, echo)


# ── words ────────────────────────────────────────────────────────


@app.command()
def words(
    amount: str = typer.Argument(..., help="Amount in figures, e.g. 125000."),
) -> None:
    """Print an amount in words (Indian numbering)."""
    text = amount_in_words(amount)
    if not text:
        _err(f"Not a non-negative amount: {amount!r}")
        raise typer.Exit(code=2)
    console.print(text)


# ── check command ────────────────────────────────────────────────


@app.command()
def check(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Register file to audit.",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the check report + manifest.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
) -> None:
    """Audit a register for repeated membership or employee numbers.

    Writes register_check.json + run_manifest.json.
    Exit 0 = no collisions, exit 2 = collisions or unreadable file.
    """
    created_at = utcnow_iso()
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        rows = load_grid(input_file)
    except (FileNotFoundError, ValueError, OSError) as exc:
        manifest_path = write_manifest(
            out_dir, input_file, created_at, 0,
            status="failed", error_code=2, error_message=str(exc),
        )
        _err(str(exc))
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)

    with _handled():
        report = check_register(rows)
        report_path = write_check_report(out_dir, report)
        status = "success" if report.passed else "failed"
        manifest_path = write_manifest(
            out_dir, input_file, created_at, report.rows_checked,
            status=status,
            error_code=None if report.passed else 2,
            error_message="" if report.passed else f"{len(report.collisions)} identity collisions",
        )

        if not quiet:
            tbl = RichTable(title="Register Check", show_lines=True)
            tbl.add_column("Check", style="bold")
            tbl.add_column("Result")
            tbl.add_row("Records", str(report.rows_checked))
            tbl.add_row("Collisions", str(len(report.collisions)))
            for w in report.warnings:
                tbl.add_row("Warning", f"[yellow]{escape(w)}[/yellow]")
            tbl.add_row("Status", "[green]PASS[/green]" if report.passed else "[red]FAIL[/red]")
            console.print(tbl)
        console.print(f"  Report   -> {report_path}")
        console.print(f"  Manifest -> {manifest_path}")

        if not report.passed:
            _err(f"{len(report.collisions)} identity collisions found")
            raise typer.Exit(code=2)
