from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from . import config
from .errors import PersistWarning
from .models import reset_engine
from .pipeline.ingest import load_rows
from .pipeline.kinds import ReportKind, kind_by_key
from .pipeline.metadata import build_metadata, parse_calendar_date
from .pipeline.render_preview import render_preview
from .pipeline.run import export_report, list_runs
from .storage import LocalStorageContext

app = typer.Typer(help="Inward/outward stock movement reports as PDF")


def _parse_date(value: str, option: str):
    parsed = parse_calendar_date(value)
    if parsed is None:
        raise typer.BadParameter(f"Not a date: {value!r}", param_hint=option)
    return parsed


def _echo_progress(percent: int, message: str) -> None:
    typer.echo(f"[{percent:3d}%] {message}")


@app.command()
def render(
    rows_file: Path = typer.Argument(..., help="CSV or JSON file with report rows"),
    kind: str = typer.Option("inward", "--kind", help="inward or outward"),
    customer: str = typer.Option("", "--customer", help="Customer name for title and file name"),
    from_date: str = typer.Option(..., "--from", help="Start date (YYYY-MM-DD or DD/MM/YYYY)"),
    to_date: str = typer.Option(..., "--to", help="End date (YYYY-MM-DD or DD/MM/YYYY)"),
    unit: str = typer.Option("", "--unit", help="Unit filter label"),
    category: str = typer.Option("", "--category", help="Item category filter label"),
    subcategory: str = typer.Option("", "--subcategory", help="Item subcategory filter label"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory for private reports and the ledger"),
    download_dir: Optional[Path] = typer.Option(None, "--download-dir", help="Public download directory"),
    deny_permission: bool = typer.Option(False, "--deny-permission", help="Treat storage access as denied"),
    preview: bool = typer.Option(False, "--preview", help="Write a PNG preview of page 1"),
    verbose: bool = typer.Option(False, "--verbose", help="Log pipeline details"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if out:
        config.set_out_dir(out)
        reset_engine()
    try:
        report_kind = kind_by_key(kind)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--kind")

    rows = load_rows(rows_file)
    metadata = build_metadata(
        report_kind,
        customer,
        _parse_date(from_date, "--from"),
        _parse_date(to_date, "--to"),
        unit=unit,
        item_category=category,
        item_subcategory=subcategory,
        generated_at=datetime.now(),
    )
    context = LocalStorageContext(
        public_dir=download_dir,
        permission_check=(lambda: False) if deny_permission else None,
    )

    def notify(path: Path, notified_kind: ReportKind) -> None:
        typer.echo(f"{notified_kind.title} saved: {path}")
        if preview:
            typer.echo(f"Preview: {render_preview(path)}")

    typer.echo(f"Rows: {len(rows)}")
    result = export_report(rows, report_kind, metadata, context, progress=_echo_progress, notifier=notify)
    if PersistWarning.PERMISSION_DENIED in result.warnings:
        typer.echo("Limited storage access: PDF saved to app storage only since storage permission was denied.")
    if not result.ok:
        typer.echo(f"Failed to save PDF file ({result.error_kind.value}): {result.detail}", err=True)
        typer.echo("Try again once the problem is fixed.", err=True)
        raise typer.Exit(code=1)


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory holding the ledger"),
    limit: int = typer.Option(20, "--limit", help="Number of exports to show"),
) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()
    runs = list_runs(limit=limit)
    if not runs:
        typer.echo("No exports recorded")
        return
    for run in runs:
        where = run.path or run.fail_detail or ""
        typer.echo(f"{run.id}\t{run.status.value}\t{run.kind}\t{run.page_count}p\t{run.file_name}\t{where}")


if __name__ == "__main__":
    app()
