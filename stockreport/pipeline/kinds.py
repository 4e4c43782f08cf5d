from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .. import config
from .metadata import format_display_date, parse_calendar_date


ALIGNMENTS = ("left", "center", "right")


@dataclass(frozen=True)
class ColumnSpec:
    title: str
    key: str
    width: float
    align: str = "left"


@dataclass(frozen=True)
class ReportKind:
    key: str
    label: str                            # "Inward" / "Outward": titles and filenames
    columns: Tuple[ColumnSpec, ...]
    date_key: str                         # rendered as a dd/mm/yyyy calendar date
    quantity_key: str                     # summed into the aggregate row
    aggregate_label: str = "Total Quantity"
    aliases: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return f"{self.label} Report"

    @property
    def table_width(self) -> float:
        return sum(col.width for col in self.columns)


def _columns(date_title: str, date_key: str, number_title: str, number_key: str, qty_key: str) -> Tuple[ColumnSpec, ...]:
    return (
        ColumnSpec("#", config.INDEX_KEY, 25, "center"),
        ColumnSpec("Unit", "UNIT_NAME", 40),
        ColumnSpec(date_title, date_key, 70),
        ColumnSpec(number_title, number_key, 60),
        ColumnSpec("Customer", "CUSTOMER_NAME", 80),
        ColumnSpec("Vehicle", "VEHICLE_NO", 60),
        ColumnSpec("Lot No", "LOT_NO", 45),
        ColumnSpec("Item Name", "ITEM_NAME", 90),
        ColumnSpec("Remark", "REMARK", 50),
        ColumnSpec("Item", "ITEM_MARKS", 50),
        ColumnSpec("Vakkal", "VAKAL_NO", 40),
        ColumnSpec("Qty", qty_key, 35, "center"),
        ColumnSpec("Delivered", "DELIVERED_TO", 55),
    )


INWARD = ReportKind(
    key="inward",
    label="Inward",
    columns=_columns("Inward Date", "GRN_DATE", "Inward No", "GRN_NO", "QUANTITY"),
    date_key="GRN_DATE",
    quantity_key="QUANTITY",
    aliases={"REMARK": ("REMARKS",)},
)

OUTWARD = ReportKind(
    key="outward",
    label="Outward",
    columns=_columns("Outward Date", "OUTWARD_DATE", "Outward No", "OUTWARD_NO", "DC_QTY"),
    date_key="OUTWARD_DATE",
    quantity_key="DC_QTY",
    aliases={"REMARK": ("REMARKS",)},
)

REPORT_KINDS: Dict[str, ReportKind] = {
    INWARD.key: INWARD,
    OUTWARD.key: OUTWARD,
}


def resolve_kind(is_inward: bool) -> ReportKind:
    return INWARD if is_inward else OUTWARD


def kind_by_key(key: str) -> ReportKind:
    k = (key or "").strip().lower()
    if k not in REPORT_KINDS:
        raise ValueError(f"Unknown report kind: {key!r} (expected one of {', '.join(REPORT_KINDS)})")
    return REPORT_KINDS[k]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def prepare_rows(rows: Iterable[Mapping[str, Any]], kind: ReportKind) -> List[Dict[str, Any]]:
    """
    Copy rows into the shape the table expects: alias keys filled in and
    the movement date shown as a plain calendar date.
    """
    out: List[Dict[str, Any]] = []
    for row in rows:
        item = dict(row)
        for key, fallbacks in kind.aliases.items():
            if not _is_blank(item.get(key)):
                continue
            for fallback in fallbacks:
                if not _is_blank(item.get(fallback)):
                    item[key] = item[fallback]
                    break
        raw_date = item.get(kind.date_key)
        if not _is_blank(raw_date):
            parsed = parse_calendar_date(raw_date)
            if parsed is not None:
                item[kind.date_key] = format_display_date(parsed)
        out.append(item)
    return out
