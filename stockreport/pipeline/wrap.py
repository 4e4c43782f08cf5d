from __future__ import annotations

import logging
import re
from typing import List

from .. import config
from ..errors import EncodingError
from .measure import TextMeasurer


logger = logging.getLogger(__name__)

UNIT_WORDS = ("KG", "BOX", "BAG")

_UNIT = "|".join(UNIT_WORDS)
_LETTERS_BEFORE_QTY = re.compile(rf"([A-Za-z]+)(\d+\s*(?:{_UNIT})(?![A-Za-z]))", re.IGNORECASE)
_QTY_UNIT = re.compile(rf"(\d+)\s*({_UNIT})(?![A-Za-z])", re.IGNORECASE)


def split_units(text: str) -> str:
    """
    Item descriptions like "RICE10KG" or "10KG BOX" are single tokens to a
    whitespace splitter. Break the quantity and unit apart so narrow
    columns can wrap them.
    """
    text = _LETTERS_BEFORE_QTY.sub(r"\1 \2", text)
    return _QTY_UNIT.sub(r"\1 \2 ", text)


def wrap_text(text: str, width_budget: float, font_size: float, measurer: TextMeasurer) -> List[str]:
    """
    Greedy word wrap. Lines are filled word by word until the next word
    would overflow the budget. A word that cannot be measured is dropped,
    a word that is wider than the budget on its own gets its own line.
    """
    words = split_units(text or "").split()
    lines: List[str] = []
    cur = ""

    for word in words:
        test = f"{cur} {word}" if cur else word
        try:
            width = measurer.width_of(test, font_size)
        except EncodingError:
            logger.warning("Skipping unmeasurable word %r", word)
            continue

        if width <= width_budget:
            cur = test
            continue

        if cur:
            lines.append(cur)
            cur = word
            continue

        try:
            measurer.width_of(word, font_size)
        except EncodingError:
            logger.warning("Skipping unmeasurable word %r", word)
        else:
            lines.append(word)
        cur = ""

    if cur:
        lines.append(cur)
    return lines


def line_height_for(font_size: float) -> float:
    return font_size * config.LINE_HEIGHT_FACTOR


def block_height(line_count: int, font_size: float) -> float:
    return line_count * line_height_for(font_size)


def line_offsets(line_count: int, anchor_y: float, font_size: float) -> List[float]:
    """Baselines for a block of lines vertically centered on anchor_y."""
    lh = line_height_for(font_size)
    total = block_height(line_count, font_size)
    return [anchor_y - i * lh + total / 2 - font_size / 2 for i in range(line_count)]


def aligned_x(line: str, x: float, width: float, font_size: float, measurer: TextMeasurer, align: str) -> float:
    if align == "left":
        return x
    line_w = measurer.width_of(line, font_size)
    if align == "center":
        return x + (width - line_w) / 2
    return x + width - line_w
