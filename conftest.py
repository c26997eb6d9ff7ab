"""
Shared pytest fixtures for the liftquote test suite.

Every test gets its own DATA_DIR (quotes log) and a clean SMTP environment.
Template and logo assets are generated in-memory so the suite never needs
the production proposal PDF.
"""
import io
import os
import sys

import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

TEMPLATE_MARKER = "TEMPLATE-PAGE"

_SMTP_ENV = ("SMTP_USER", "EMAIL_USER", "SMTP_PASS", "EMAIL_PASS",
             "SMTP_HOST", "SMTP_PORT", "MAIL_FROM_NAME")


# ── Temp data directory (per-test isolation) ──────────────────────────────────

@pytest.fixture(autouse=True)
def temp_data_dir(tmp_path, monkeypatch):
    """Redirect DATA_DIR to an isolated tmp directory and clear SMTP env."""
    from liftquote.core import paths

    data = str(tmp_path / "data")
    os.makedirs(data, exist_ok=True)
    monkeypatch.setattr(paths, "DATA_DIR", data)
    monkeypatch.setattr(paths, "QUOTES_LOG_PATH", os.path.join(data, "quotes_log.json"))
    monkeypatch.setattr(paths, "LOG_DIR", os.path.join(data, "logs"))
    for var in _SMTP_ENV:
        monkeypatch.delenv(var, raising=False)
    return data


# ── Assets ────────────────────────────────────────────────────────────────────

def build_template(pages: int = 9, pagesize=A4) -> bytes:
    """A plain template: one small marker line at the very bottom of each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize, invariant=1)
    for i in range(1, pages + 1):
        c.setFont("Helvetica", 6)
        c.drawString(10, 8, f"{TEMPLATE_MARKER} {i}")
        c.showPage()
    c.save()
    return buf.getvalue()


def build_logo() -> bytes:
    img = Image.new("RGB", (200, 80), (212, 179, 71))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def template_bytes():
    return build_template()


@pytest.fixture
def logo_bytes():
    return build_logo()


@pytest.fixture
def asset_files(tmp_path, monkeypatch, template_bytes, logo_bytes):
    """Write the assets to disk and point the configured paths at them."""
    from liftquote.core import paths

    template_path = tmp_path / "assets" / "quotation_template.pdf"
    logo_path = tmp_path / "assets" / "logo.png"
    template_path.parent.mkdir(parents=True, exist_ok=True)
    template_path.write_bytes(template_bytes)
    logo_path.write_bytes(logo_bytes)
    monkeypatch.setattr(paths, "TEMPLATE_PATH", str(template_path))
    monkeypatch.setattr(paths, "LOGO_PATH", str(logo_path))
    return {"template": str(template_path), "logo": str(logo_path)}


# ── Sample records ────────────────────────────────────────────────────────────

@pytest.fixture
def sample_record():
    """Acme quotation: 3 items on the canonical schedule, 2 that are not."""
    return {
        "quote_number": "QT-2025-007",
        "quote_date": "2025-03-05",
        "valid_until": "2025-04-04",
        "customer": {
            "name": "Rahul Menon",
            "company": "Acme Pvt Ltd",
            "email": "rahul.menon@acme.example.com",
            "phone": "+91 98470 12345",
            "address": "Plot 42, Infopark Phase II, Kakkanad, Ernakulam, Kerala 682042",
        },
        "pricing_items": [
            {"label": "Basic Cost", "standard": 1000000, "launch": 850000},
            {"label": "installation ", "standard": "150000", "launch": "100000"},
            {"description": "Cabin Upgrade", "standard": 60000, "launch": 45000},
            {"label": "Extended Warranty", "standard": 25000, "launch": 20000},
            {"label": "Site Survey", "standard": 5000, "launch": 0},
        ],
        "specs": {
            "model": "CE-Glide 630",
            "stops": "G+4",
            "elevator_type": "passenger",
            "rated_load": "630 kg / 8 persons",
            "speed": "1.0 m/s",
            "travel_height": "15 m",
            "drive_system": "gearless drive",
            "control_system": "microprocessor based",
            "cabin_walls": "Hairline stainless steel SS304 with mirror rear panel and "
                           "wooden handrail on the side walls, full height",
            "door_type": "Automatic centre opening",
        },
        "gst_rate": 18,
    }
