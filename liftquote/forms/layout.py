"""
Declarative table layouts for the quotation overlay.

Every table on the overlay pages is a fixed-capacity grid: a RowLayout lists
its columns (x, width, alignment, font) and a constant row height, and
draw_row() / draw_rules() do the drawing. Page code only supplies values.

All y values here are top-origin (distance from the top edge of the page);
draw_* convert to reportlab's bottom-origin coordinates with page_height.
Rows are never resized for their content, so a table with more rows than
its layout was built for runs off its block without warning.
"""

from collections import namedtuple

from reportlab.lib.colors import HexColor

Column = namedtuple("Column", "x width align font size",
                    defaults=("left", "Helvetica", 9))

RowLayout = namedtuple("RowLayout", "columns height")

RULE = HexColor("#d1d5db")
TEXT = HexColor("#1f2937")

CELL_PAD = 4
SPEC_ROW_HEIGHT = 16.5
PRICING_ROW_HEIGHT = 16

# ── Technical specification page ─────────────────────────────────────────────
SPEC_TABLE = RowLayout(
    columns=(
        Column(40, 190, "left", "Helvetica-Bold", 9),
        Column(230, 325, "left", "Helvetica", 9),
    ),
    height=SPEC_ROW_HEIGHT,
)
SPEC_WRAP_WIDTH = 300

# ── Pricing page ─────────────────────────────────────────────────────────────
PRICING_TABLE = RowLayout(
    columns=(
        Column(40, 30, "center"),
        Column(70, 245, "left"),
        Column(315, 120, "right"),
        Column(435, 120, "right"),
    ),
    height=PRICING_ROW_HEIGHT,
)

PAYMENT_TABLE = RowLayout(
    columns=(
        Column(40, 40, "center"),
        Column(80, 375, "left"),
        Column(455, 100, "right"),
    ),
    height=PRICING_ROW_HEIGHT,
)

BANK_BLOCK = RowLayout(
    columns=(
        Column(40, 80, "left", "Helvetica-Bold", 8.5),
        Column(120, 170, "left", "Helvetica", 8.5),
        Column(300, 80, "left", "Helvetica-Bold", 8.5),
        Column(380, 175, "left", "Helvetica", 8.5),
    ),
    height=PRICING_ROW_HEIGHT,
)


def _draw_cell(c, col, rl_y, text, font, size):
    c.setFont(font, size)
    if col.align == "right":
        c.drawRightString(col.x + col.width - CELL_PAD, rl_y, text)
    elif col.align == "center":
        c.drawCentredString(col.x + col.width / 2, rl_y, text)
    else:
        c.drawString(col.x + CELL_PAD, rl_y, text)


def draw_row(c, layout: RowLayout, top_y: float, values, page_height: float,
             bold: bool = False, fonts=None, color=TEXT) -> float:
    """Draw one row of values at top-origin top_y. Returns the next row's top.

    A value may be a list of up to two lines (from wrap_two_lines); the pair
    is squeezed into the same fixed row height at a slightly smaller size.
    fonts optionally overrides (font, size) per column, None entries keep
    the layout's font.
    """
    c.setFillColor(color)
    for idx, (col, value) in enumerate(zip(layout.columns, values)):
        if value is None:
            continue
        font, size = col.font, col.size
        if bold and not font.endswith("-Bold"):
            font = "Helvetica-Bold"
        if fonts and idx < len(fonts) and fonts[idx]:
            font, size = fonts[idx]

        if isinstance(value, (list, tuple)) and len(value) > 1:
            small = size - 1.5
            first_y = page_height - (top_y + small + 0.5)
            _draw_cell(c, col, first_y, str(value[0]), font, small)
            _draw_cell(c, col, first_y - (small + 0.5), str(value[1]), font, small)
            continue
        if isinstance(value, (list, tuple)):
            value = value[0] if value else ""
        rl_y = page_height - (top_y + layout.height - 5)
        _draw_cell(c, col, rl_y, str(value), font, size)
    return top_y + layout.height


def draw_rules(c, layout: RowLayout, top_y: float, rows: int, page_height: float,
               color=RULE, width: float = 0.5):
    """Horizontal and vertical grid lines for `rows` fixed-height rows."""
    left = layout.columns[0].x
    right = layout.columns[-1].x + layout.columns[-1].width
    bottom_y = top_y + rows * layout.height

    c.setStrokeColor(color)
    c.setLineWidth(width)
    for i in range(rows + 1):
        y = page_height - (top_y + i * layout.height)
        c.line(left, y, right, y)
    xs = [col.x for col in layout.columns] + [right]
    for x in xs:
        c.line(x, page_height - top_y, x, page_height - bottom_y)


def fill_row(c, layout: RowLayout, top_y: float, page_height: float, color):
    """Solid background behind one row (table headers, emphasised totals)."""
    left = layout.columns[0].x
    right = layout.columns[-1].x + layout.columns[-1].width
    c.setFillColor(color)
    c.rect(left, page_height - top_y - layout.height, right - left,
           layout.height, fill=1, stroke=0)
