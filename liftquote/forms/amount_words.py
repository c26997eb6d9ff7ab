"""
Amount in words, Indian numbering system.

    to_words(12345678) -> "Rupees One Crore Twenty Three Lakh Forty Five
                           Thousand Six Hundred Seventy Eight Only"

Paise are dropped (floored), never rounded.
"""

import math

ONES = (
    "Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight",
    "Nine", "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen",
    "Sixteen", "Seventeen", "Eighteen", "Nineteen",
)
TENS = (
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy",
    "Eighty", "Ninety",
)

# (divisor, name) — largest first
SCALES = (
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
    (100, "Hundred"),
)


def number_to_words(n: int) -> str:
    """Words for a non-negative integer, without the currency wrapper."""
    if n < 0:
        raise ValueError(f"Negative amounts are not supported: {n}")
    if n < 20:
        return ONES[n]
    if n < 100:
        tens, unit = divmod(n, 10)
        return TENS[tens] + (f" {ONES[unit]}" if unit else "")

    for divisor, name in SCALES:
        if n >= divisor:
            head, rest = divmod(n, divisor)
            words = f"{number_to_words(head)} {name}"
            if rest:
                words += f" {number_to_words(rest)}"
            return words
    raise AssertionError("unreachable")


def to_words(amount) -> str:
    """'Rupees <words> Only' for the legal total line."""
    value = math.floor(float(amount or 0))
    if value == 0:
        return "Rupees Zero Only"
    return f"Rupees {number_to_words(int(value))} Only"
