"""
Capricorn Elevators quotation overlay — page renderers.

The 9-page template carries the static artwork (cover heading, company
profile, product pages, terms). Three pages get computed content drawn on
top of them:

    page 1  cover      bottom band cleared, "prepared for" + quote reference
    page 4  specs      fully whited out, header/footer, 17-row spec table,
                       safety feature bullets
    page 9  pricing    fully whited out, header/footer, 11-row pricing table,
                       totals, amount in words, payment terms, bank details

Each draw_* function paints onto a reportlab canvas sized to the template
page. Coordinates are top-origin and converted with the page height, so
the same code serves any page height the template ships with.
"""

import io

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader

from liftquote.forms.layout import (
    SPEC_TABLE, SPEC_WRAP_WIDTH, PRICING_TABLE, PAYMENT_TABLE, BANK_BLOCK,
    draw_row, draw_rules, fill_row,
)
from liftquote.forms.text_layout import wrap_two_lines, format_inr, format_date


# ═══════════════════════════════════════════════════════════════════════════════
# BRAND
# ═══════════════════════════════════════════════════════════════════════════════
GOLD      = HexColor("#d4b347")
GOLD_TINT = HexColor("#f7f0d8")
DARK      = HexColor("#111827")
BODY      = HexColor("#374151")
MUTED     = HexColor("#6b7280")
WHITE     = HexColor("#FFFFFF")

COMPANY = {
    "name":    "Capricorn Elevators",
    "line1":   "11th floor, Jomer Symphony, Unit 03, Ponnurunni East, Vyttila",
    "line2":   "Ernakulam, Kerala 682019",
    "phone":   "075930 00222",
    "website": "capricornelevators.com",
}

MARGIN = 40
COVER_BAND_HEIGHT = 180
ADDRESS_WRAP_WIDTH = 250

# ═══════════════════════════════════════════════════════════════════════════════
# FIXED CONTENT
# ═══════════════════════════════════════════════════════════════════════════════

SPEC_ROWS = (
    ("Model",            "model"),
    ("Elevator Type",    "elevator_type"),
    ("No. of Stops",     "stops"),
    ("Rated Load",       "rated_load"),
    ("Speed",            "speed"),
    ("Travel Height",    "travel_height"),
    ("Drive System",     "drive_system"),
    ("Control System",   "control_system"),
    ("Power Supply",     "power_supply"),
    ("Cabin Walls",      "cabin_walls"),
    ("Cabin Ceiling",    "cabin_ceiling"),
    ("Cabin Flooring",   "cabin_flooring"),
    ("Cabin Size",       "cabin_size"),
    ("Door Type",        "door_type"),
    ("Door Size",        "door_size"),
    ("Door Finish",      "door_finish"),
    ("LOP / COP",        "lop_cop"),
)

# Older records keep the technical fields at the top level under these names
_LEGACY_SPEC_KEYS = {
    "elevator_type":  "elevationType",
    "stops":          "numberOfFloors",
    "rated_load":     "capacity",
    "drive_system":   "driveType",
    "control_system": "controlSystem",
    "door_type":      "doorConfiguration",
}

SAFETY_FEATURES = (
    "Automatic Rescue Device brings the car to the nearest floor on power failure",
    "Overspeed governor with progressive safety gear",
    "Full-height infrared light curtain on the car door",
    "Emergency alarm and intercom between car, machine area and lobby",
    "Battery-backed emergency lighting inside the cabin",
    "Overload sensing with audible and visual warning",
    "Final limit switches at the top and bottom terminal floors",
    "Phase failure and phase reversal protection",
    "Fire operation mode returns the car to the designated floor",
)

DEFAULT_PAYMENT_TERMS = (
    {"sequence": 1, "description": "Advance along with the purchase order", "rate": "30%"},
    {"sequence": 2, "description": "On approval of drawings", "rate": "20%"},
    {"sequence": 3, "description": "Before dispatch of materials", "rate": "40%"},
    {"sequence": 4, "description": "After testing and commissioning", "rate": "10%"},
)

DEFAULT_BANK_DETAILS = {
    "account_number": "",
    "account_name":   "Capricorn Elevators",
    "ifsc":           "",
    "account_type":   "Current",
    "bank_name":      "",
    "branch":         "",
    "gstin":          "",
    "pan":            "",
}

# snake_case bank key → camelCase aliases from older records
_LEGACY_BANK_KEYS = {
    "account_number": ("accountNumber",),
    "account_name":   ("accountName",),
    "ifsc":           ("ifscCode", "IFSC"),
    "account_type":   ("accountType",),
    "bank_name":      ("bankName",),
    "branch":         ("branchName",),
    "gstin":          ("gstNumber", "GSTIN"),
    "pan":            ("panNumber", "PAN"),
}

BANK_ROWS = (
    (("Account No.", "account_number"), ("Account Name", "account_name")),
    (("IFSC",        "ifsc"),           ("Account Type", "account_type")),
    (("Bank",        "bank_name"),      ("Branch",       "branch")),
    (("GSTIN",       "gstin"),          ("PAN",          "pan")),
)

# template page index (0-based) → role
PAGE_RENDERERS = {0: "cover", 3: "specs", 8: "pricing"}


# ═══════════════════════════════════════════════════════════════════════════════
# RECORD ACCESS
# ═══════════════════════════════════════════════════════════════════════════════

def customer_info(record: dict) -> dict:
    """Customer block, accepting the nested form or legacy top-level keys."""
    cust = record.get("customer") or {}
    return {
        "name":    cust.get("name") or record.get("customer_name") or record.get("customerName") or "",
        "company": cust.get("company") or record.get("company_name") or record.get("companyName") or "",
        "email":   cust.get("email") or record.get("customer_email") or record.get("customerEmail") or "",
        "phone":   cust.get("phone") or record.get("customer_phone") or record.get("customerPhone") or "",
        "address": cust.get("address") or record.get("address") or "",
    }


def spec_value(record: dict, key: str) -> str:
    specs = record.get("specs") or {}
    value = specs.get(key)
    if value in (None, ""):
        value = record.get(key)
    if value in (None, "") and key in _LEGACY_SPEC_KEYS:
        value = record.get(_LEGACY_SPEC_KEYS[key])
    if value in (None, ""):
        return "-"
    return str(value)


def bank_info(record: dict) -> dict:
    """Bank block with company defaults, accepting snake_case or camelCase keys."""
    supplied = record.get("bank_details") or record.get("bankDetails") or {}
    bank = dict(DEFAULT_BANK_DETAILS)
    for key in DEFAULT_BANK_DETAILS:
        for name in (key,) + _LEGACY_BANK_KEYS.get(key, ()):
            if supplied.get(name):
                bank[key] = str(supplied[name])
                break
    return bank


def quote_number(record: dict) -> str:
    return str(record.get("quote_number") or record.get("quoteNumber") or "")


def _quote_date(record: dict) -> str:
    return format_date(record.get("quote_date") or record.get("created_at"))


def _valid_until(record: dict) -> str:
    return format_date(record.get("valid_until") or record.get("validUntil"))


# ═══════════════════════════════════════════════════════════════════════════════
# SHARED CHROME
# ═══════════════════════════════════════════════════════════════════════════════

def white_out(c, x, y, w, h):
    c.setFillColor(WHITE)
    c.rect(x, y, w, h, fill=1, stroke=0)


def draw_logo(c, logo_bytes: bytes, right_x: float, top_rl_y: float,
              max_w: float = 110, max_h: float = 40):
    """Logo scaled into max_w × max_h, anchored at its top-right corner."""
    img = ImageReader(io.BytesIO(logo_bytes))
    iw, ih = img.getSize()
    scale = min(max_w / iw, max_h / ih)
    dw, dh = iw * scale, ih * scale
    c.drawImage(img, right_x - dw, top_rl_y - dh, width=dw, height=dh, mask="auto")


def draw_header(c, page_w: float, page_h: float, title: str, subtitle: str,
                logo_bytes: bytes = None):
    """Title top-left, logo top-right, gold accent rule underneath."""
    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(MARGIN, page_h - 50, title)
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 9)
    c.drawString(MARGIN, page_h - 66, subtitle)

    if logo_bytes:
        draw_logo(c, logo_bytes, page_w - MARGIN, page_h - 28)

    c.setStrokeColor(GOLD)
    c.setLineWidth(2)
    c.line(MARGIN, page_h - 80, page_w - MARGIN, page_h - 80)


def draw_footer(c, page_w: float, page_number: int, company: str = COMPANY["name"]):
    c.setStrokeColor(GOLD)
    c.setLineWidth(0.75)
    c.line(MARGIN, 48, page_w - MARGIN, 48)
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 8)
    c.drawString(MARGIN, 32, f"Page {page_number}")
    c.drawCentredString(page_w / 2, 32, "Confidential")
    c.drawRightString(page_w - MARGIN, 32, company)


def _section_title(c, page_h, top_y, text):
    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(MARGIN, page_h - top_y, text)


# ═══════════════════════════════════════════════════════════════════════════════
# PAGE 1 — COVER
# ═══════════════════════════════════════════════════════════════════════════════

def draw_cover(c, page_w: float, page_h: float, record: dict):
    """Clear the bottom band only; the upper artwork keeps the proposal heading."""
    white_out(c, 0, 0, page_w, COVER_BAND_HEIGHT)
    cust = customer_info(record)

    c.setStrokeColor(GOLD)
    c.setLineWidth(1.5)
    c.line(MARGIN, COVER_BAND_HEIGHT - 14, page_w - MARGIN, COVER_BAND_HEIGHT - 14)

    # ── Prepared for (left) ───────────────────────────────────────────────────
    y = COVER_BAND_HEIGHT - 34
    c.setFillColor(GOLD)
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN, y, "PREPARED FOR")

    y -= 17
    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 13)
    c.drawString(MARGIN, y, cust["name"].upper())

    c.setFillColor(BODY)
    c.setFont("Helvetica", 9)
    for line in (cust["company"], cust["email"], cust["phone"]):
        if not line:
            continue
        y -= 13
        c.drawString(MARGIN, y, line)

    if cust["address"]:
        for line in wrap_two_lines(cust["address"], ADDRESS_WRAP_WIDTH, "Helvetica", 9):
            y -= 12
            c.drawString(MARGIN, y, line)

    # ── Quote reference (right) ───────────────────────────────────────────────
    label_x = page_w - 230
    value_x = page_w - MARGIN
    rows = (
        ("Quote No.",   quote_number(record)),
        ("Date",        _quote_date(record)),
        ("Valid Until", _valid_until(record)),
    )
    ry = COVER_BAND_HEIGHT - 34
    for label, value in rows:
        c.setFillColor(MUTED)
        c.setFont("Helvetica", 9)
        c.drawString(label_x, ry, label)
        c.setFillColor(DARK)
        c.setFont("Helvetica-Bold", 10)
        c.drawRightString(value_x, ry, value)
        ry -= 18


# ═══════════════════════════════════════════════════════════════════════════════
# PAGE 4 — TECHNICAL SPECIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════════

def draw_specs(c, page_w: float, page_h: float, record: dict, logo_bytes: bytes = None,
               page_number: int = 4):
    white_out(c, 0, 0, page_w, page_h)
    model = spec_value(record, "model")
    subtitle = f"Quote {quote_number(record)}"
    if model != "-":
        subtitle = f"{model}  |  {subtitle}"
    draw_header(c, page_w, page_h, "Technical Specifications", subtitle, logo_bytes)

    top = 100
    value_col = SPEC_TABLE.columns[1]
    y = top
    for label, key in SPEC_ROWS:
        value = spec_value(record, key)
        lines = wrap_two_lines(value, SPEC_WRAP_WIDTH, value_col.font, value_col.size)
        y = draw_row(c, SPEC_TABLE, y, (label, lines), page_h)
    draw_rules(c, SPEC_TABLE, top, len(SPEC_ROWS), page_h)

    # ── Safety features ───────────────────────────────────────────────────────
    y += 28
    _section_title(c, page_h, y, "Safety & Emergency Features")
    y += 8
    c.setFillColor(BODY)
    bullet_width = page_w - 2 * MARGIN - 14
    for feature in SAFETY_FEATURES:
        y += 15
        c.setFillColor(GOLD)
        c.circle(MARGIN + 4, page_h - y + 3, 1.8, fill=1, stroke=0)
        c.setFillColor(BODY)
        c.setFont("Helvetica", 9)
        for i, line in enumerate(wrap_two_lines(feature, bullet_width, "Helvetica", 9)):
            if i:
                y += 11
            c.drawString(MARGIN + 14, page_h - y, line)

    draw_footer(c, page_w, page_number)


# ═══════════════════════════════════════════════════════════════════════════════
# PAGE 9 — PRICING
# ═══════════════════════════════════════════════════════════════════════════════

def _pricing_cells(row: dict) -> tuple:
    if row["is_na"]:
        return "NA", "NA"
    if row["is_complimentary"]:
        return format_inr(row["standard"]), "Complimentary"
    return format_inr(row["standard"]), format_inr(row["launch"])


def _rate_label(rate) -> str:
    rate = float(rate)
    return f"{int(rate)}" if rate == int(rate) else f"{rate:g}"


def draw_pricing(c, page_w: float, page_h: float, record: dict, reconciled: list,
                 totals: dict, words: str, logo_bytes: bytes = None, page_number: int = 9):
    white_out(c, 0, 0, page_w, page_h)
    valid_until = _valid_until(record)
    subtitle = f"Quote {quote_number(record)}"
    if valid_until:
        subtitle += f"  |  Valid until {valid_until}"
    draw_header(c, page_w, page_h, "Commercial Offer", subtitle, logo_bytes)

    # ── Pricing table ─────────────────────────────────────────────────────────
    top = 100
    fill_row(c, PRICING_TABLE, top, page_h, GOLD_TINT)
    y = draw_row(c, PRICING_TABLE, top,
                 ("No.", "Description", "Standard (Rs.)", "Launch Offer (Rs.)"),
                 page_h, bold=True, color=DARK)
    for idx, row in enumerate(reconciled, start=1):
        standard, launch = _pricing_cells(row)
        y = draw_row(c, PRICING_TABLE, y, (str(idx), row["description"], standard, launch), page_h)

    rate = _rate_label(totals["gst_rate"])
    y = draw_row(c, PRICING_TABLE, y,
                 ("", "Total", format_inr(totals["standard_subtotal"]),
                  format_inr(totals["launch_subtotal"])),
                 page_h, bold=True)
    y = draw_row(c, PRICING_TABLE, y,
                 ("", f"GST @ {rate}%", format_inr(totals["standard_tax"]),
                  format_inr(totals["launch_tax"])),
                 page_h)
    fill_row(c, PRICING_TABLE, y, page_h, GOLD_TINT)
    draw_row(c, PRICING_TABLE, y,
             ("", "Grand Total", format_inr(totals["standard_grand_total"]), None),
             page_h, bold=True, color=DARK)
    draw_row(c, PRICING_TABLE, y,
             (None, None, None, format_inr(totals["launch_grand_total"])),
             page_h, fonts=(None, None, None, ("Helvetica-Bold", 11)), color=DARK)
    y += PRICING_TABLE.height
    rows_drawn = 1 + len(reconciled) + 3
    draw_rules(c, PRICING_TABLE, top, rows_drawn, page_h)

    # ── Amount in words + validity ────────────────────────────────────────────
    y += 16
    c.setFillColor(DARK)
    for i, line in enumerate(wrap_two_lines(f"Amount in words (Launch Offer): {words}",
                                            page_w - 2 * MARGIN, "Helvetica-Bold", 9)):
        if i:
            y += 11
        c.setFont("Helvetica-Bold", 9)
        c.drawString(MARGIN, page_h - y, line)

    y += 15
    c.setFillColor(BODY)
    c.setFont("Helvetica-Oblique", 8.5)
    if valid_until:
        validity = f"This offer is valid until {valid_until}. Prices are subject to change thereafter."
    else:
        validity = "This offer is valid for 30 days from the date of quotation."
    c.drawString(MARGIN, page_h - y, validity)

    # ── Payment terms ─────────────────────────────────────────────────────────
    y += 24
    _section_title(c, page_h, y, "Payment Terms")
    y += 6
    terms = record.get("payment_terms") or DEFAULT_PAYMENT_TERMS
    pt_top = y
    fill_row(c, PAYMENT_TABLE, y, page_h, GOLD_TINT)
    y = draw_row(c, PAYMENT_TABLE, y, ("No.", "Milestone", "Rate"), page_h, bold=True, color=DARK)
    for idx, term in enumerate(terms, start=1):
        y = draw_row(c, PAYMENT_TABLE, y,
                     (str(term.get("sequence") or term.get("sequenceNumber") or idx),
                      str(term.get("description", "")),
                      str(term.get("rate") or term.get("ratePercentText") or "")),
                     page_h)
    draw_rules(c, PAYMENT_TABLE, pt_top, len(terms) + 1, page_h)

    # ── Bank details ──────────────────────────────────────────────────────────
    y += 24
    _section_title(c, page_h, y, "Bank Details")
    y += 6
    bank = bank_info(record)
    for (l_label, l_key), (r_label, r_key) in BANK_ROWS:
        y = draw_row(c, BANK_BLOCK, y,
                     (l_label, bank.get(l_key) or "-", r_label, bank.get(r_key) or "-"),
                     page_h)

    draw_footer(c, page_w, page_number)
