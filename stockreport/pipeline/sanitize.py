from __future__ import annotations

import dataclasses
import re
import unicodedata
from typing import Any, Dict, Mapping


_SPACES = re.compile("[\u202f\u00a0\u2007\u2060\ufeff\u200b\u200c\u200d\t\n\r]")
_DASHES = re.compile("[\u2013\u2014\u2015\u2212]")
_QUOTES = re.compile("[\u201c\u201d\u2018\u2019]")
_BULLETS = re.compile("[\u2022]")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7e]")


def _ascii_residue(match: re.Match) -> str:
    decomposed = unicodedata.normalize("NFKD", match.group(0))
    return _NON_ASCII.sub("", decomposed)


def sanitize(value: Any) -> str:
    """
    Reduce any value to printable ASCII so the standard PDF fonts can
    measure and draw it. Known typographic characters are mapped to their
    plain equivalents, everything else non-ASCII is decomposed and the
    residue dropped.
    """
    text = value if isinstance(value, str) else str(value)
    text = _SPACES.sub(" ", text)
    text = _DASHES.sub("-", text)
    text = _QUOTES.sub('"', text)
    text = _BULLETS.sub("*", text)
    text = _NON_ASCII.sub(_ascii_residue, text)
    return _NON_PRINTABLE.sub("", text)


def sanitize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: sanitize(value) if isinstance(value, str) else value for key, value in row.items()}


def sanitize_metadata(metadata):
    changes = {}
    for field in dataclasses.fields(metadata):
        value = getattr(metadata, field.name)
        if isinstance(value, str):
            changes[field.name] = sanitize(value)
    return dataclasses.replace(metadata, **changes)
