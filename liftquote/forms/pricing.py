"""
Pricing reconciliation for the quotation pricing page.

The pricing table always shows the same 11 rows in the same order. Callers
send a free-form list of priced items (sometimes only a few of them, from
older records); reconcile() maps that list onto the canonical schedule and
fills the gaps with zero-value rows whose NA / complimentary flags are
inferred from the row label.

Two price tiers run side by side:
    standard — list price
    launch   — promotional price; complimentary rows are waived here

Nothing in this module raises on bad input. A missing or malformed price
becomes 0 so the document still renders.
"""

import logging
import math

log = logging.getLogger("liftquote.pricing")

DEFAULT_GST_RATE = 18.0

CANONICAL_LABELS = (
    "Basic Cost",
    "Installation",
    "Additional Door Cost",
    "RAL Colour Option",
    "Cabin Upgrade",
    "Ceiling Upgrade",
    "Door Finish Upgrade",
    "Cabin Size Customisation",
    "Transportation",
    "Civil Work",
    "LOP - COP",
)

NA_MARKERS = ("Door Cost", "RAL Colour")
COMPLIMENTARY_MARKERS = ("Cabin", "Ceiling", "Door", "Size", "Transportation", "LOP")

_NAME_KEYS = ("label", "description", "item_name", "itemName")


def _to_number(value) -> float:
    """Coerce a price to float; anything unparseable is 0."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def _normalize(text) -> str:
    return str(text or "").strip().lower()


def match(item: dict, labels=CANONICAL_LABELS):
    """Canonical label this free-form item corresponds to, or None.

    Case-insensitive, whitespace-trimmed exact match on any of the item's
    label / description / item_name fields.
    """
    if not isinstance(item, dict):
        return None
    names = {_normalize(item.get(k)) for k in _NAME_KEYS if item.get(k)}
    for label in labels:
        if label.lower() in names:
            return label
    return None


def infer_flags(label: str) -> tuple:
    """(is_na, is_complimentary) for a row the caller did not supply."""
    is_na = any(m in label for m in NA_MARKERS)
    is_complimentary = any(m in label for m in COMPLIMENTARY_MARKERS)
    return is_na, is_complimentary


def reconcile(items) -> list:
    """Exactly len(CANONICAL_LABELS) rows, in canonical order.

    Supplied rows keep their prices and are never NA or complimentary.
    First match wins when the caller sends the same label twice.
    """
    supplied = {}
    for item in items or []:
        label = match(item)
        if label is None:
            if isinstance(item, dict):
                log.debug("Unmatched pricing item ignored: %r",
                          next((item.get(k) for k in _NAME_KEYS if item.get(k)), ""))
            continue
        supplied.setdefault(label, item)

    rows = []
    for label in CANONICAL_LABELS:
        src = supplied.get(label)
        if src is not None:
            rows.append({
                "description": label,
                "standard": _to_number(src.get("standard")),
                "launch": _to_number(src.get("launch")),
                "is_na": False,
                "is_complimentary": False,
            })
        else:
            is_na, is_comp = infer_flags(label)
            rows.append({
                "description": label,
                "standard": 0.0,
                "launch": 0.0,
                "is_na": is_na,
                "is_complimentary": is_comp,
            })
    return rows


def _gst_rate(value) -> float:
    """GST percentage; blank, unparseable or negative falls back to 18. 0 is kept."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_GST_RATE
    try:
        rate = float(str(value).replace("%", "").strip())
    except (TypeError, ValueError):
        log.warning("Unparseable GST rate %r, using %s", value, DEFAULT_GST_RATE)
        return DEFAULT_GST_RATE
    if math.isnan(rate) or math.isinf(rate) or rate < 0:
        log.warning("Invalid GST rate %r, using %s", value, DEFAULT_GST_RATE)
        return DEFAULT_GST_RATE
    return rate


def compute_totals(reconciled: list, gst_rate=DEFAULT_GST_RATE) -> dict:
    """Subtotals, GST and grand totals for both tiers. No rounding."""
    rate = _gst_rate(gst_rate)

    standard_subtotal = sum(r["standard"] for r in reconciled if not r["is_na"])
    launch_subtotal = sum(
        r["launch"] for r in reconciled
        if not r["is_na"] and not r["is_complimentary"]
    )
    standard_tax = standard_subtotal * rate / 100
    launch_tax = launch_subtotal * rate / 100

    return {
        "gst_rate": rate,
        "standard_subtotal": standard_subtotal,
        "launch_subtotal": launch_subtotal,
        "standard_tax": standard_tax,
        "launch_tax": launch_tax,
        "standard_grand_total": standard_subtotal + standard_tax,
        "launch_grand_total": launch_subtotal + launch_tax,
    }


def price_record(record: dict) -> tuple:
    """(reconciled rows, totals) for a quotation record."""
    items = record.get("pricing_items")
    if items is None:
        items = record.get("items")
    reconciled = reconcile(items)
    totals = compute_totals(reconciled, record.get("gst_rate", DEFAULT_GST_RATE))
    return reconciled, totals
