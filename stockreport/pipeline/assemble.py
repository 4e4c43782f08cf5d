from __future__ import annotations

import io
import logging
import math
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from reportlab.pdfgen import canvas

from .. import config
from ..errors import LayoutInvariantViolation
from .budget import page_slices, plan_page_budget
from .kinds import ALIGNMENTS, ColumnSpec, ReportKind, prepare_rows
from .metadata import DocumentMetadata
from .render_table import AggregateRow, aggregate_quantity, render_page
from .sanitize import sanitize_metadata, sanitize_row


ProgressCallback = Callable[[int, str], None]

logger = logging.getLogger(__name__)


def _noop_progress(percent: int, message: str) -> None:
    pass


def validate_columns(
    columns: Sequence[ColumnSpec],
    quantity_key: Optional[str] = None,
    page_width: float = config.PAGE_WIDTH,
    margin: float = config.MARGIN,
) -> None:
    if not columns:
        raise LayoutInvariantViolation("Report needs at least one column")
    for col in columns:
        if not col.width > 0:
            raise LayoutInvariantViolation(f"Column {col.title!r} has non-positive width {col.width}")
        if col.align not in ALIGNMENTS:
            raise LayoutInvariantViolation(f"Column {col.title!r} has unknown alignment {col.align!r}")
    table_w = sum(col.width for col in columns)
    if table_w > page_width - 2 * margin:
        raise LayoutInvariantViolation(
            f"Table width {table_w} exceeds printable width {page_width - 2 * margin}"
        )
    if quantity_key is not None and not any(col.key == quantity_key for col in columns):
        raise LayoutInvariantViolation(f"Quantity column {quantity_key!r} is not in the column set")


def page_progress(page_index: int, total_pages: int) -> int:
    return 30 + math.floor((page_index + 1) / total_pages * 50)


def render_report(
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[ColumnSpec],
    metadata: DocumentMetadata,
    quantity_key: Optional[str] = None,
    progress: Optional[ProgressCallback] = None,
    aggregate_label: str = "Total Quantity",
) -> bytes:
    """
    Render the full report and return the PDF bytes.

    Every call works on its own canvas and page budget; nothing is kept
    between calls. Pages are drawn strictly in order and `progress` is
    called between them.
    """
    report = progress or _noop_progress
    columns = tuple(columns)
    validate_columns(columns, quantity_key)

    report(0, "Preparing...")
    report(20, "Preparing your report PDF...")
    clean_rows: List[dict] = [sanitize_row(row) for row in rows]
    meta = sanitize_metadata(metadata)

    budget = plan_page_budget(len(clean_rows), config.PAGE_WIDTH, config.PAGE_HEIGHT, config.MARGIN)
    aggregate = None
    if quantity_key is not None:
        aggregate = AggregateRow(
            key=quantity_key,
            label=aggregate_label,
            value=aggregate_quantity(clean_rows, quantity_key),
        )

    report(25, "Creating PDF document...")
    buffer = io.BytesIO()
    canv = canvas.Canvas(buffer, pagesize=(config.PAGE_WIDTH, config.PAGE_HEIGHT))
    canv.setTitle(meta.title)
    canv.setAuthor(meta.subtitle)
    style = config.load_style_preset()

    for page_index, (start, end) in enumerate(page_slices(len(clean_rows), budget)):
        is_last = page_index == budget.total_pages - 1
        render_page(
            canv,
            page_index,
            budget,
            columns,
            clean_rows[start:end],
            start + 1,
            meta,
            len(clean_rows),
            aggregate if is_last else None,
            style,
        )
        canv.showPage()
        report(
            page_progress(page_index, budget.total_pages),
            f"Creating page {page_index + 1} of {budget.total_pages}...",
        )

    report(80, "Finalizing PDF...")
    canv.save()
    data = buffer.getvalue()
    logger.info("Rendered %s: %d rows, %d pages, %d bytes", meta.title, len(clean_rows), budget.total_pages, len(data))
    return data


def render_kind_report(
    rows: Iterable[Mapping[str, Any]],
    kind: ReportKind,
    metadata: DocumentMetadata,
    progress: Optional[ProgressCallback] = None,
) -> bytes:
    return render_report(
        prepare_rows(rows, kind),
        kind.columns,
        metadata,
        quantity_key=kind.quantity_key,
        progress=progress,
        aggregate_label=kind.aggregate_label,
    )
