from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from .. import config
from .budget import PageBudget
from .kinds import ColumnSpec
from .measure import BOLD, REGULAR, TextMeasurer
from .metadata import DocumentMetadata
from .sanitize import sanitize
from .wrap import aligned_x, block_height, line_offsets, wrap_text


CELL_PADDING = 4.0

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


@dataclass(frozen=True)
class AggregateRow:
    key: str
    label: str
    value: int


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def _s(style: dict, key: str, default):
    return style.get(key, default)


def _quantity(value: Any) -> Decimal:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        text = repr(value)
    else:
        match = _LEADING_NUMBER.match(str(value or ""))
        if not match:
            return Decimal(0)
        text = match.group(1)
    try:
        qty = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    return qty if qty.is_finite() else Decimal(0)


def aggregate_quantity(rows: Iterable[Mapping[str, Any]], key: str) -> int:
    """Sum of the leading number in each row's quantity field, rounded half up."""
    total = sum((_quantity(row.get(key)) for row in rows), Decimal(0))
    return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _cell_text(row: Mapping[str, Any], column: ColumnSpec, row_number: int) -> str:
    if column.key == config.INDEX_KEY:
        return str(row_number)
    value = row.get(column.key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return config.EMPTY_CELL
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def draw_wrapped_text(
    canv: canvas.Canvas,
    text: str,
    x: float,
    anchor_y: float,
    width: float,
    font_size: float,
    measurer: TextMeasurer = REGULAR,
    align: str = "left",
) -> float:
    """Wrap text into the given width and draw it centered on anchor_y. Returns the block height."""
    lines = wrap_text(text, width, font_size, measurer)
    canv.setFont(measurer.font_name, font_size)
    for line, baseline in zip(lines, line_offsets(len(lines), anchor_y, font_size)):
        canv.drawString(aligned_x(line, x, width, font_size, measurer, align), baseline, line)
    return block_height(len(lines), font_size)


def _column_edges(columns: Sequence[ColumnSpec], x0: float) -> list[float]:
    edges = [x0]
    for col in columns:
        edges.append(edges[-1] + col.width)
    return edges


def _draw_title_block(
    canv: canvas.Canvas,
    metadata: DocumentMetadata,
    record_count: int,
    style: dict,
    top: float,
    margin: float,
) -> None:
    font = str(_s(style, "font_name", "Times-Roman"))
    bold = str(_s(style, "bold_font_name", "Times-Bold"))

    canv.setFillColor(_hex(_s(style, "text_color", "#000000")))
    canv.setFont(bold, float(_s(style, "title_size", 18)))
    canv.drawString(margin, top - 20, metadata.title)

    canv.setFillColor(_hex(_s(style, "subtitle_color", "#333333")))
    canv.setFont(font, float(_s(style, "subtitle_size", 12)))
    canv.drawString(margin, top - 45, metadata.subtitle)

    canv.setFillColor(_hex(_s(style, "filter_color", "#4D4D4D")))
    canv.setFont(font, float(_s(style, "filter_size", 8)))
    canv.drawString(margin, top - 63, metadata.filters_line)

    canv.setFillColor(_hex(_s(style, "subtitle_color", "#333333")))
    canv.setFont(font, float(_s(style, "meta_size", 10)))
    canv.drawString(margin, top - 79, metadata.date_range_line)
    canv.drawString(margin, top - 95, f"Records found: {record_count}")


def _draw_continued_header(canv: canvas.Canvas, metadata: DocumentMetadata, style: dict, top: float, margin: float) -> None:
    canv.setFillColor(_hex(_s(style, "text_color", "#000000")))
    canv.setFont(str(_s(style, "bold_font_name", "Times-Bold")), float(_s(style, "continued_title_size", 14)))
    canv.drawString(margin, top - 20, metadata.continued_title)


def _draw_footer(
    canv: canvas.Canvas,
    metadata: DocumentMetadata,
    page_index: int,
    total_pages: int,
    style: dict,
    page_w: float,
    margin: float,
) -> None:
    canv.setFont(str(_s(style, "font_name", "Times-Roman")), float(_s(style, "footer_size", 8)))
    canv.setFillColor(_hex(_s(style, "footer_color", "#808080")))
    canv.drawString(margin, margin + 10, sanitize(metadata.generated_line))
    canv.drawRightString(page_w - margin, margin + 10, f"Page {page_index + 1} of {total_pages}")


def _draw_aggregate_row(
    canv: canvas.Canvas,
    aggregate: AggregateRow,
    columns: Sequence[ColumnSpec],
    edges: Sequence[float],
    y_top: float,
    budget: PageBudget,
    style: dict,
) -> None:
    rh = budget.row_height
    table_w = edges[-1] - edges[0]
    canv.setFillColor(_hex(_s(style, "aggregate_fill", "#F2F2F2")))
    canv.setStrokeColor(_hex(_s(style, "border_color", "#B3B3B3")))
    canv.setLineWidth(1)
    canv.rect(edges[0], y_top - rh, table_w, rh, stroke=1, fill=1)

    qty_index = next(i for i, col in enumerate(columns) if col.key == aggregate.key)
    qty_col = columns[qty_index]
    anchor = y_top - rh / 2
    size = budget.header_font_size

    canv.setFillColor(_hex(_s(style, "text_color", "#000000")))
    label_w = edges[qty_index] - edges[0]
    if label_w > 2 * CELL_PADDING:
        draw_wrapped_text(
            canv, aggregate.label, edges[0] + CELL_PADDING, anchor, label_w - 2 * CELL_PADDING, size, BOLD, "right"
        )
    draw_wrapped_text(
        canv,
        str(aggregate.value),
        edges[qty_index] + CELL_PADDING,
        anchor,
        qty_col.width - 2 * CELL_PADDING,
        size,
        BOLD,
        qty_col.align,
    )


def render_page(
    canv: canvas.Canvas,
    page_index: int,
    budget: PageBudget,
    columns: Sequence[ColumnSpec],
    rows: Sequence[Mapping[str, Any]],
    first_row_number: int,
    metadata: DocumentMetadata,
    record_count: int,
    aggregate: Optional[AggregateRow],
    style: dict,
    page_size: Tuple[float, float] = (config.PAGE_WIDTH, config.PAGE_HEIGHT),
    margin: float = config.MARGIN,
) -> None:
    """
    Draw one page of the report onto the canvas' current page.

    `rows` is this page's slice; `first_row_number` is the 1-based number of
    its first row in the whole document. The aggregate row is drawn only when
    `aggregate` is given, which the assembler does for the last page.
    """
    pw, ph = page_size
    top = ph - margin
    rh = budget.row_height

    if page_index == 0:
        _draw_title_block(canv, metadata, record_count, style, top, margin)
        table_top = top - config.TITLE_BLOCK_HEIGHT
    else:
        _draw_continued_header(canv, metadata, style, top, margin)
        table_top = top - config.CONTINUATION_HEADER_HEIGHT

    edges = _column_edges(columns, margin)
    table_w = edges[-1] - edges[0]
    table_h = (len(rows) + 1) * rh
    border = _hex(_s(style, "border_color", "#B3B3B3"))

    # outer border
    canv.setStrokeColor(border)
    canv.setFillColor(colors.white)
    canv.setLineWidth(1)
    canv.rect(margin, table_top - table_h, table_w, table_h, stroke=1, fill=1)

    # header band
    canv.setFillColor(_hex(_s(style, "header_fill", "#EBEBEB")))
    canv.rect(margin, table_top - rh, table_w, rh, stroke=1, fill=1)

    # row banding
    even = _hex(_s(style, "band_even", "#FAFAFF"))
    odd = _hex(_s(style, "band_odd", "#FFFFFF"))
    for i in range(len(rows)):
        row_top = table_top - rh * (i + 1)
        canv.setFillColor(even if (first_row_number + i - 1) % 2 == 0 else odd)
        canv.rect(margin, row_top - rh, table_w, rh, stroke=0, fill=1)

    # column separators
    canv.setStrokeColor(border)
    canv.setLineWidth(0.5)
    for x in edges[1:-1]:
        canv.line(x, table_top, x, table_top - table_h)

    # header text
    text_color = _hex(_s(style, "text_color", "#000000"))
    canv.setFillColor(text_color)
    for col, x in zip(columns, edges):
        draw_wrapped_text(
            canv,
            col.title,
            x + CELL_PADDING,
            table_top - rh / 2,
            col.width - 2 * CELL_PADDING,
            budget.header_font_size,
            BOLD,
            col.align,
        )

    canv.setStrokeColor(_hex(_s(style, "header_rule_color", "#999999")))
    canv.setLineWidth(1.5)
    canv.line(margin, table_top - rh, margin + table_w, table_top - rh)

    # data rows
    rule = _hex(_s(style, "row_rule_color", "#CCCCCC"))
    for i, row in enumerate(rows):
        row_top = table_top - rh * (i + 1)
        canv.setStrokeColor(rule)
        canv.setLineWidth(0.5)
        canv.line(margin, row_top - rh, margin + table_w, row_top - rh)

        canv.setFillColor(text_color)
        for col, x in zip(columns, edges):
            draw_wrapped_text(
                canv,
                _cell_text(row, col, first_row_number + i),
                x + CELL_PADDING,
                row_top - rh / 2,
                col.width - 2 * CELL_PADDING,
                budget.font_size,
                REGULAR,
                col.align,
            )

    if aggregate is not None:
        _draw_aggregate_row(canv, aggregate, columns, edges, table_top - table_h, budget, style)

    _draw_footer(canv, metadata, page_index, budget.total_pages, style, pw, margin)
