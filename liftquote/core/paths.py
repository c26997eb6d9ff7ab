"""
liftquote/core/paths.py — Centralized Path Configuration

Single source of truth for the template assets and the data directory.
Every module imports from here instead of computing its own paths.

The template PDF and logo are deployment configuration, not request payload.
Override with LIFTQUOTE_TEMPLATE_PATH / LIFTQUOTE_LOGO_PATH when the assets
live outside the repo (e.g. a mounted volume).
"""

import os
import logging

log = logging.getLogger("liftquote.paths")

# ── Project Root ──────────────────────────────────────────────────────────────
_THIS_FILE = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(_THIS_FILE)))

ASSETS_DIR = os.path.join(PROJECT_ROOT, "assets")


def _resolve_data_dir() -> str:
    """LIFTQUOTE_DATA_DIR env → repo data/."""
    env_dir = os.environ.get("LIFTQUOTE_DATA_DIR", "")
    if env_dir:
        log.debug("DATA_DIR from LIFTQUOTE_DATA_DIR: %s", env_dir)
        return env_dir
    return os.path.join(PROJECT_ROOT, "data")


DATA_DIR = _resolve_data_dir()

# ── Key File Paths ───────────────────────────────────────────────────────────
TEMPLATE_PATH = os.environ.get(
    "LIFTQUOTE_TEMPLATE_PATH", os.path.join(ASSETS_DIR, "quotation_template.pdf"))
LOGO_PATH = os.environ.get(
    "LIFTQUOTE_LOGO_PATH", os.path.join(ASSETS_DIR, "logo.png"))
QUOTES_LOG_PATH = os.path.join(DATA_DIR, "quotes_log.json")
LOG_DIR = os.path.join(DATA_DIR, "logs")


def validate_paths() -> dict:
    """Runtime validation — call at startup to catch missing assets early.

    Returns:
        {"ok": bool, "errors": [str], "warnings": [str], "resolved": {name: path}}
    """
    result = {"ok": True, "errors": [], "warnings": [], "resolved": {}}

    checks = {
        "PROJECT_ROOT": (PROJECT_ROOT, True),
        "TEMPLATE_PATH": (TEMPLATE_PATH, True),
        "LOGO_PATH": (LOGO_PATH, True),
        "DATA_DIR": (DATA_DIR, False),
    }

    for name, (path, required) in checks.items():
        result["resolved"][name] = path
        if not os.path.exists(path):
            if required:
                result["errors"].append(f"{name} not found: {path}")
                result["ok"] = False
            else:
                result["warnings"].append(f"{name} not found: {path}")

    # DATA_DIR only matters for the quotes log; create it lazily
    try:
        os.makedirs(DATA_DIR, exist_ok=True)
        test_file = os.path.join(DATA_DIR, ".write_test")
        with open(test_file, "w") as f:
            f.write("ok")
        os.remove(test_file)
    except OSError as e:
        result["errors"].append(f"DATA_DIR not writable: {e}")
        result["ok"] = False

    return result
