#!/usr/bin/env python3
"""
scripts/make_sample_assets.py — Placeholder template + logo for local runs

The production proposal template and logo are not tracked in git. This
writes stand-ins of the right shape to assets/ so `python -m liftquote
render` works on a fresh checkout:

  - assets/quotation_template.pdf  9 A4 pages with a page heading each
  - assets/logo.png                gold block logo

Usage:
    python3 scripts/make_sample_assets.py
"""

import io
import os

from PIL import Image, ImageDraw
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ASSETS_DIR = os.path.join(PROJECT_ROOT, "assets")

PAGE_TITLES = (
    "Proposal for Elevator Installation",
    "About Capricorn Elevators",
    "Our Product Range",
    "Technical Specifications",
    "Cabin Finishes",
    "Door Options",
    "Scope of Work",
    "Terms & Conditions",
    "Commercial Offer",
)


def build_template() -> bytes:
    buf = io.BytesIO()
    w, h = A4
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    for i, title in enumerate(PAGE_TITLES, start=1):
        c.setFillColor(HexColor("#111827"))
        c.rect(0, h - 260, w, 260, fill=1, stroke=0)
        c.setFillColor(HexColor("#d4b347"))
        c.setFont("Helvetica-Bold", 24)
        c.drawString(40, h - 140, title)
        c.setFont("Helvetica", 9)
        c.setFillColor(HexColor("#6b7280"))
        c.drawRightString(w - 40, 30, f"Template page {i}")
        c.showPage()
    c.save()
    return buf.getvalue()


def build_logo() -> bytes:
    img = Image.new("RGBA", (330, 120), (255, 255, 255, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle((0, 0, 120, 120), fill=(212, 179, 71, 255))
    draw.rectangle((140, 40, 330, 80), fill=(17, 24, 39, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def main():
    os.makedirs(ASSETS_DIR, exist_ok=True)
    with open(os.path.join(ASSETS_DIR, "quotation_template.pdf"), "wb") as f:
        f.write(build_template())
    with open(os.path.join(ASSETS_DIR, "logo.png"), "wb") as f:
        f.write(build_logo())
    print(f"Wrote template and logo to {ASSETS_DIR}")


if __name__ == "__main__":
    main()
