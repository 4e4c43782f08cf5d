from __future__ import annotations

from enum import Enum


class ReportError(Exception):
    """Base class for report rendering errors."""


class EncodingError(ReportError, ValueError):
    """Text contains characters the font cannot encode."""

    def __init__(self, text: str, font_name: str) -> None:
        super().__init__(f"Cannot encode {text!r} with {font_name}")
        self.text = text
        self.font_name = font_name


class LayoutInvariantViolation(ReportError, ValueError):
    """The column schema or page geometry cannot produce a document."""


class PersistErrorKind(str, Enum):
    WRITE_FAILED = "WRITE_FAILED"
    DIRECTORY_CREATE_FAILED = "DIRECTORY_CREATE_FAILED"


class PersistWarning(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
