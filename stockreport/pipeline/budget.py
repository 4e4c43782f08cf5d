from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Tuple

from .. import config
from ..errors import LayoutInvariantViolation


logger = logging.getLogger(__name__)

# (max rows, font size step below BASE_FONT_SIZE); larger reports get smaller text
FONT_TIERS: Tuple[Tuple[int, int], ...] = ((10, 0), (20, 1), (40, 2))
SMALLEST_TIER_STEP = 3


@dataclass(frozen=True)
class PageBudget:
    font_size: int
    header_font_size: int
    header_height: float
    continuation_header_height: float
    footer_height: float
    row_height: float
    line_height: float
    rows_on_first_page: int
    rows_on_continuation_page: int
    total_pages: int

    def rows_on_page(self, page_index: int) -> int:
        return self.rows_on_first_page if page_index == 0 else self.rows_on_continuation_page

    def capacity(self, pages: int) -> int:
        if pages <= 0:
            return 0
        return self.rows_on_first_page + self.rows_on_continuation_page * (pages - 1)


def font_size_for(row_count: int, base: int = config.BASE_FONT_SIZE) -> int:
    for max_rows, step in FONT_TIERS:
        if row_count <= max_rows:
            return base - step
    return base - SMALLEST_TIER_STEP


def plan_page_budget(
    row_count: int,
    page_width: float = config.PAGE_WIDTH,
    page_height: float = config.PAGE_HEIGHT,
    margin: float = config.MARGIN,
) -> PageBudget:
    """
    Decide text size and how many rows go on each page.

    The first page carries the title block, later pages a single
    "(Continued)" line; both also hold the column header row. Every page
    reserves the footer band plus one row slot so the aggregate row fits
    under the last data row wherever it lands.
    """
    if row_count < 0:
        raise LayoutInvariantViolation(f"Row count must not be negative: {row_count}")
    if page_width <= 2 * margin:
        raise LayoutInvariantViolation(f"Page width {page_width} leaves no room inside margin {margin}")

    font_size = font_size_for(row_count)
    row_height = float(font_size * config.ROW_HEIGHT_FACTOR)
    header_height = config.TITLE_BLOCK_HEIGHT + row_height
    continuation_header_height = config.CONTINUATION_HEADER_HEIGHT + row_height
    footer_height = config.FOOTER_BAND_HEIGHT + row_height

    usable = page_height - 2 * margin - footer_height
    rows_first = math.floor((usable - header_height) / row_height)
    rows_continued = math.floor((usable - continuation_header_height) / row_height)
    if rows_first <= 0 or rows_continued <= 0:
        raise LayoutInvariantViolation(
            f"Page height {page_height} fits no rows at font size {font_size} "
            f"(first={rows_first}, continued={rows_continued})"
        )

    remaining = max(0, row_count - rows_first)
    total_pages = 1 + math.ceil(remaining / rows_continued)

    budget = PageBudget(
        font_size=font_size,
        header_font_size=font_size + 2,
        header_height=header_height,
        continuation_header_height=continuation_header_height,
        footer_height=footer_height,
        row_height=row_height,
        line_height=font_size * config.LINE_HEIGHT_FACTOR,
        rows_on_first_page=rows_first,
        rows_on_continuation_page=rows_continued,
        total_pages=total_pages,
    )
    logger.info(
        "Planned %d rows at %dpt: %d on first page, %d per continuation page, %d pages",
        row_count,
        font_size,
        rows_first,
        rows_continued,
        total_pages,
    )
    return budget


def page_slices(row_count: int, budget: PageBudget) -> Iterator[Tuple[int, int]]:
    start = 0
    for page_index in range(budget.total_pages):
        end = min(start + budget.rows_on_page(page_index), row_count)
        yield start, end
        start = end
