from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from .. import config


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")
_DAY_FIRST_FORMATS = ("%d/%m/%Y", "%d-%m-%Y")


@dataclass(frozen=True)
class DocumentMetadata:
    title: str
    subtitle: str
    kind_label: str
    from_date: date
    to_date: date
    customer_name: str = ""
    unit: str = ""
    item_category: str = ""
    item_subcategory: str = ""
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def continued_title(self) -> str:
        return f"{self.kind_label} Report (Continued)"

    @property
    def filters_line(self) -> str:
        text = f"Customer: {self.customer_name}"
        if self.unit:
            text += f", Unit: {self.unit}"
        if self.item_category:
            text += f", Category: {self.item_category}"
        if self.item_subcategory:
            text += f", Subcategory: {self.item_subcategory}"
        return text

    @property
    def date_range_line(self) -> str:
        return f"From: {format_display_date(self.from_date)} To: {format_display_date(self.to_date)}"

    @property
    def generated_line(self) -> str:
        return f"Generated: {self.generated_at.strftime('%d/%m/%Y, %H:%M:%S')}"


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Read a date as the calendar day it names. ISO timestamps keep their
    date part as written; no time-zone conversion is applied, so the
    day never shifts.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_display_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_filename_date(value: date) -> str:
    return value.strftime("%d-%m-%Y")


def build_metadata(
    kind,
    customer_name: str,
    from_date: date,
    to_date: date,
    unit: str = "",
    item_category: str = "",
    item_subcategory: str = "",
    generated_at: Optional[datetime] = None,
) -> DocumentMetadata:
    return DocumentMetadata(
        title=kind.title,
        subtitle=config.COMPANY_NAME,
        kind_label=kind.label,
        from_date=from_date,
        to_date=to_date,
        customer_name=customer_name or "",
        unit=unit or "",
        item_category=item_category or "",
        item_subcategory=item_subcategory or "",
        generated_at=generated_at or datetime.now(),
    )


def ensure_pdf_suffix(file_name: str) -> str:
    return file_name if file_name.lower().endswith(".pdf") else f"{file_name}.pdf"


def build_report_filename(
    kind_label: str,
    customer_name: str,
    from_date: date,
    to_date: date,
    unit: str = "",
) -> str:
    customer = (customer_name or "").strip().replace(" ", "_")
    name = f"{kind_label}_Report_{customer}_{format_filename_date(from_date)}_to_{format_filename_date(to_date)}"
    if unit:
        name += f"-{unit}"
    return ensure_pdf_suffix(_UNSAFE_FILENAME_CHARS.sub("_", name))
