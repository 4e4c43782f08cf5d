from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

from ..errors import EncodingError


FONT_REGULAR = "Times-Roman"
FONT_BOLD = "Times-Bold"

# Standard Type-1 fonts are written with WinAnsiEncoding, which cp1252 mirrors.
FONT_ENCODING = "cp1252"


class TextMeasurer:
    """Width of text drawn in one of the standard embedded fonts."""

    def __init__(self, font_name: str = FONT_REGULAR) -> None:
        self.font_name = font_name

    def width_of(self, text: str, font_size: float) -> float:
        try:
            text.encode(FONT_ENCODING)
        except UnicodeEncodeError as exc:
            raise EncodingError(text, self.font_name) from exc
        return stringWidth(text, self.font_name, font_size)

    def __repr__(self) -> str:
        return f"TextMeasurer({self.font_name!r})"


REGULAR = TextMeasurer(FONT_REGULAR)
BOLD = TextMeasurer(FONT_BOLD)
