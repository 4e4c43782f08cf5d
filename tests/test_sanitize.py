from __future__ import annotations

from datetime import date, datetime

from stockreport.pipeline.metadata import DocumentMetadata
from stockreport.pipeline.sanitize import sanitize, sanitize_metadata, sanitize_row


SAMPLES = [
    "",
    "plain ascii 123",
    "10\N{EN DASH}20 \N{EM DASH} 30\N{MINUS SIGN}1",
    "\N{LEFT DOUBLE QUOTATION MARK}Box\N{RIGHT DOUBLE QUOTATION MARK} \N{LEFT SINGLE QUOTATION MARK}x\N{RIGHT SINGLE QUOTATION MARK}",
    "\N{BULLET} first",
    "a\N{NO-BREAK SPACE}b\N{NARROW NO-BREAK SPACE}c\N{ZERO WIDTH SPACE}d\N{ZERO WIDTH NO-BREAK SPACE}e",
    "Caf\N{LATIN SMALL LETTER E WITH ACUTE} Cr\N{LATIN SMALL LETTER E WITH GRAVE}me",
    "Rice \N{GRINNING FACE} 10KG",
    "\N{CJK UNIFIED IDEOGRAPH-6570}",
    "line one\nline two\ttab\r",
    "\N{LATIN SMALL LIGATURE FI}le \N{VULGAR FRACTION ONE HALF}",
]


def test_typographic_characters_are_mapped() -> None:
    assert sanitize("10\N{EN DASH}20") == "10-20"
    assert sanitize("A\N{HORIZONTAL BAR}B\N{MINUS SIGN}C") == "A-B-C"
    assert sanitize("\N{LEFT DOUBLE QUOTATION MARK}Box\N{RIGHT SINGLE QUOTATION MARK}") == '"Box"'
    assert sanitize("\N{BULLET} item") == "* item"
    assert sanitize("a\N{NO-BREAK SPACE}b\N{ZERO WIDTH SPACE}c\N{WORD JOINER}d") == "a b c d"


def test_other_non_ascii_is_decomposed_or_dropped() -> None:
    assert sanitize("Caf\N{LATIN SMALL LETTER E WITH ACUTE}") == "Cafe"
    assert sanitize("\N{LATIN SMALL LIGATURE FI}le") == "file"
    assert sanitize("Rice \N{GRINNING FACE} 10KG") == "Rice  10KG"
    assert sanitize("\N{CJK UNIFIED IDEOGRAPH-6570}") == ""


def test_non_string_values_are_stringified() -> None:
    assert sanitize(12.5) == "12.5"
    assert sanitize(7) == "7"


def test_output_is_printable_ascii() -> None:
    for sample in SAMPLES:
        assert all(0x20 <= ord(ch) <= 0x7E for ch in sanitize(sample)), sample


def test_sanitize_is_idempotent() -> None:
    for sample in SAMPLES:
        once = sanitize(sample)
        assert sanitize(once) == once


def test_sanitize_row_copies_and_keeps_non_strings() -> None:
    row = {"ITEM_NAME": "Dal\N{EM DASH}Chana", "QUANTITY": 4, "REMARK": None}
    clean = sanitize_row(row)
    assert clean == {"ITEM_NAME": "Dal-Chana", "QUANTITY": 4, "REMARK": None}
    assert row["ITEM_NAME"] == "Dal\N{EM DASH}Chana"


def test_sanitize_metadata_cleans_string_fields_only() -> None:
    meta = DocumentMetadata(
        title="Inward Report",
        subtitle="Savla Foods \N{EN DASH} Cold Storage",
        kind_label="Inward",
        from_date=date(2024, 1, 1),
        to_date=date(2024, 1, 31),
        customer_name="Jos\N{LATIN SMALL LETTER E WITH ACUTE} Traders",
        generated_at=datetime(2024, 2, 1, 10, 30),
    )
    clean = sanitize_metadata(meta)
    assert clean.subtitle == "Savla Foods - Cold Storage"
    assert clean.customer_name == "Jose Traders"
    assert clean.from_date == date(2024, 1, 1)
    assert meta.customer_name.startswith("Jos\N{LATIN SMALL LETTER E WITH ACUTE}")
