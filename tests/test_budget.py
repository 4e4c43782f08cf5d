from __future__ import annotations

import math

import pytest

from stockreport.errors import LayoutInvariantViolation
from stockreport.pipeline.budget import font_size_for, page_slices, plan_page_budget


@pytest.mark.parametrize(
    "rows, size",
    [(0, 9), (10, 9), (11, 8), (20, 8), (21, 7), (40, 7), (41, 6), (5000, 6)],
)
def test_font_size_steps_down_with_row_count(rows: int, size: int) -> None:
    assert font_size_for(rows) == size


def test_derived_sizes() -> None:
    budget = plan_page_budget(5)
    assert budget.font_size == 9
    assert budget.header_font_size == 11
    assert budget.row_height == 45
    assert budget.line_height == pytest.approx(10.8)
    assert budget.rows_on_continuation_page > budget.rows_on_first_page > 0
    assert budget.total_pages == 1


def test_rows_per_page_follow_reserved_heights() -> None:
    budget = plan_page_budget(100, page_width=842, page_height=595, margin=20)
    usable = 595 - 2 * 20 - budget.footer_height
    assert budget.rows_on_first_page == math.floor((usable - budget.header_height) / budget.row_height)
    assert budget.rows_on_continuation_page == math.floor(
        (usable - budget.continuation_header_height) / budget.row_height
    )
    assert budget.header_height > budget.continuation_header_height


def test_pagination_covers_rows_tightly() -> None:
    for rows in range(0, 400):
        budget = plan_page_budget(rows)
        assert budget.capacity(budget.total_pages) >= rows
        assert budget.total_pages >= 1
        if budget.total_pages > 1:
            assert budget.capacity(budget.total_pages - 1) < rows


def test_large_report_page_count() -> None:
    budget = plan_page_budget(120)
    expected = 1 + math.ceil((120 - budget.rows_on_first_page) / budget.rows_on_continuation_page)
    assert budget.total_pages == expected


def test_page_slices_partition_rows() -> None:
    for rows in (0, 1, 7, 8, 60, 121):
        budget = plan_page_budget(rows)
        slices = list(page_slices(rows, budget))
        assert len(slices) == budget.total_pages
        assert slices[0][0] == 0
        assert slices[-1][1] == rows
        for (_, end), (start, _) in zip(slices, slices[1:]):
            assert end == start
        for index, (start, end) in enumerate(slices):
            assert end - start <= budget.rows_on_page(index)


def test_negative_row_count_is_rejected() -> None:
    with pytest.raises(LayoutInvariantViolation):
        plan_page_budget(-1)


def test_page_too_short_for_any_row() -> None:
    with pytest.raises(LayoutInvariantViolation):
        plan_page_budget(5, page_width=842, page_height=200, margin=20)


def test_page_too_narrow() -> None:
    with pytest.raises(LayoutInvariantViolation):
        plan_page_budget(5, page_width=30, page_height=595, margin=20)
