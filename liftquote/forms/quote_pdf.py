"""
Capricorn Elevators Quotation PDF
=================================
Overlays a quotation record onto the fixed 9-page proposal template.

Pipeline (one call, no shared state):
  1. load template + logo bytes (or take them injected)
  2. copy every template page into a new document, untouched
  3. reconcile pricing, compute totals and amount in words once
  4. for the cover, spec and pricing pages, draw a reportlab overlay the
     size of that page and merge it over the template page
  5. serialize to bytes

A missing or unreadable template/logo is a deployment problem, not a bad
request, and raises QuoteTemplateError.
"""

import io
import logging
import os
import time
from datetime import date

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from liftquote.core import paths
from liftquote.forms.amount_words import to_words
from liftquote.forms.overlay import (
    COMPANY, PAGE_RENDERERS, draw_cover, draw_specs, draw_pricing, quote_number,
)
from liftquote.forms.pricing import price_record

log = logging.getLogger("liftquote.pdf")

TEMPLATE_PAGES = 9


class QuoteTemplateError(RuntimeError):
    """Template or logo missing/unreadable. Fatal configuration error."""


def _read_asset(path: str, what: str) -> bytes:
    if not path or not os.path.exists(path):
        log.error("Quotation %s not found: %s", what, path)
        raise QuoteTemplateError(f"{what} not found: {path}")
    with open(path, "rb") as f:
        return f.read()


def load_assets(template_path: str = None, logo_path: str = None) -> tuple:
    """(template_bytes, logo_bytes) from the configured asset paths."""
    template = _read_asset(template_path or paths.TEMPLATE_PATH, "template")
    logo = _read_asset(logo_path or paths.LOGO_PATH, "logo")
    return template, logo


def _open_template(template_bytes: bytes) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(template_bytes))
        page_count = len(reader.pages)
    except (PdfReadError, ValueError) as e:
        log.error("Quotation template unreadable: %s", e)
        raise QuoteTemplateError(f"template unreadable: {e}") from e
    if page_count != TEMPLATE_PAGES:
        raise QuoteTemplateError(
            f"template has {page_count} pages, expected {TEMPLATE_PAGES}")
    return reader


def _check_logo(logo_bytes: bytes):
    """Decode the logo once up front; an empty logo means no logo is drawn."""
    if not logo_bytes:
        return
    try:
        ImageReader(io.BytesIO(logo_bytes)).getSize()
    except (OSError, ValueError) as e:
        log.error("Quotation logo unreadable: %s", e)
        raise QuoteTemplateError(f"logo unreadable: {e}") from e


def _render_overlay(role: str, page_w: float, page_h: float, record: dict,
                    logo_bytes: bytes, priced: dict, page_number: int):
    """One-page overlay PDF for a template page, returned as a pypdf page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_w, page_h), invariant=1)

    if role == "cover":
        draw_cover(c, page_w, page_h, record)
    elif role == "specs":
        draw_specs(c, page_w, page_h, record, logo_bytes, page_number=page_number)
    elif role == "pricing":
        draw_pricing(c, page_w, page_h, record, priced["reconciled"], priced["totals"],
                     priced["words"], logo_bytes, page_number=page_number)
    else:
        raise ValueError(f"unknown page role: {role}")

    c.showPage()
    c.save()
    buf.seek(0)
    return PdfReader(buf).pages[0]


def generate_quote_pdf(record: dict, template_bytes: bytes = None,
                       logo_bytes: bytes = None) -> bytes:
    """Render a quotation record onto the template. Returns the PDF bytes.

    template_bytes / logo_bytes may be injected (tests, callers caching the
    assets); anything not supplied is read from the configured paths.
    The record is never modified.
    """
    started = time.monotonic()
    if template_bytes is None or logo_bytes is None:
        loaded_template, loaded_logo = load_assets()
        template_bytes = template_bytes if template_bytes is not None else loaded_template
        logo_bytes = logo_bytes if logo_bytes is not None else loaded_logo

    record = dict(record)
    record.setdefault("quote_date", date.today())
    qn = quote_number(record)

    reconciled, totals = price_record(record)
    launch_total = totals["launch_grand_total"]
    if launch_total < 0:
        log.warning("Quotation %s has a negative launch total (%.2f), words show zero",
                    qn, launch_total)
    priced = {
        "reconciled": reconciled,
        "totals": totals,
        "words": to_words(max(launch_total, 0)),
    }
    log.info("Generating quotation %s (launch total %.2f)", qn,
             totals["launch_grand_total"], extra={"quote_number": qn})

    reader = _open_template(template_bytes)
    _check_logo(logo_bytes)
    writer = PdfWriter()
    writer.append(reader)

    for index, role in sorted(PAGE_RENDERERS.items()):
        page = writer.pages[index]
        page_w = float(page.mediabox.width)
        page_h = float(page.mediabox.height)
        overlay = _render_overlay(role, page_w, page_h, record, logo_bytes,
                                  priced, page_number=index + 1)
        page.merge_page(overlay)

    writer.add_metadata({
        "/Title": f"Quotation {qn}",
        "/Author": COMPANY["name"],
    })

    out = io.BytesIO()
    writer.write(out)
    pdf_bytes = out.getvalue()

    log.info("Quotation %s generated: %d pages, %d bytes", qn, len(writer.pages),
             len(pdf_bytes), extra={
                 "quote_number": qn,
                 "pages": len(writer.pages),
                 "bytes": len(pdf_bytes),
                 "duration_ms": int((time.monotonic() - started) * 1000),
             })
    return pdf_bytes


def generate_quote_file(record: dict, output_path: str, **kwargs) -> dict:
    """Write the quotation PDF to output_path and return a summary dict."""
    pdf_bytes = generate_quote_pdf(record, **kwargs)
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(pdf_bytes)

    _, totals = price_record(record)
    return {
        "ok": True,
        "path": output_path,
        "quote_number": quote_number(record),
        "pages": TEMPLATE_PAGES,
        "standard_total": totals["standard_grand_total"],
        "launch_total": totals["launch_grand_total"],
        "bytes": len(pdf_bytes),
    }
