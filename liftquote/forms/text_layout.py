"""
Text layout primitives for the quotation overlay.

    wrap_two_lines()  — greedy word wrap, capped at two lines
    format_inr()      — Indian digit grouping (12,34,567), no decimals
    format_date()     — "05 Mar 2025"
"""

import logging
import math
from datetime import date, datetime

from dateutil import parser as date_parser
from reportlab.pdfbase.pdfmetrics import stringWidth

log = logging.getLogger("liftquote.layout")


def wrap_two_lines(text, max_width: float, font_name: str = "Helvetica",
                   font_size: float = 9, measure=None) -> list:
    """Pack words onto a first line until max_width is used up; everything
    left over goes on a second line as-is.

    This is a hard two-line cap, not general text flow. A very long value
    overflows the second line instead of producing a third.

    measure(text, font_name, font_size) -> width; defaults to reportlab's
    stringWidth so widths match what the canvas will draw.
    """
    if measure is None:
        measure = stringWidth
    words = str(text or "").split()
    if not words:
        return [""]

    first = words[0]
    idx = 1
    while idx < len(words):
        candidate = f"{first} {words[idx]}"
        if measure(candidate, font_name, font_size) > max_width:
            break
        first = candidate
        idx += 1

    if idx >= len(words):
        return [first]
    return [first, " ".join(words[idx:])]


def _group_indian(digits: str) -> str:
    """1234567 -> 12,34,567 (last three, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_inr(amount) -> str:
    """Comma-grouped rupee amount with no decimals. Zero/blank renders "0"."""
    if not amount:
        return "0"
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return "0"
    if math.isnan(value) or math.isinf(value):
        return "0"
    whole = int(math.floor(abs(value) + 0.5))
    sign = "-" if value < 0 and whole else ""
    return sign + _group_indian(str(whole))


def format_date(value) -> str:
    """DD Mon YYYY. Missing or unparseable dates render as an empty string."""
    if not value:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d %b %Y")
    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError) as e:
        log.debug("Unparseable date %r: %s", value, e)
        return ""
    return parsed.strftime("%d %b %Y")
