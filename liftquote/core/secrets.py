"""
secrets.py — Centralized credential management for liftquote

Single source of truth for the SMTP credentials used by the quotation mailer.

Env vars:
  SMTP_USER        — Sender account (falls back to EMAIL_USER)
  SMTP_PASS        — SMTP / app password (falls back to EMAIL_PASS)
  SMTP_HOST        — SMTP server, default smtp.gmail.com
  SMTP_PORT        — 587 (STARTTLS) or 465 (implicit TLS)
  MAIL_FROM_NAME   — Display name on outbound mail

Security:
  - Values are never logged in full (masked to first 8 chars)
  - Surrounding whitespace and quotes are stripped (copy-pasted .env values)
"""

import os
import logging

log = logging.getLogger("liftquote.secrets")

# ─── Secret Definitions ─────────────────────────────────────────────────────

_REGISTRY = {
    "smtp_user": {
        "env": "SMTP_USER",
        "fallback": "EMAIL_USER",
        "required": True,
        "desc": "SMTP sender account",
    },
    "smtp_pass": {
        "env": "SMTP_PASS",
        "fallback": "EMAIL_PASS",
        "required": True,
        "desc": "SMTP password / app password",
        "sensitive": True,
    },
    "smtp_host": {
        "env": "SMTP_HOST",
        "required": False,
        "desc": "SMTP server host",
        "default": "smtp.gmail.com",
    },
    "smtp_port": {
        "env": "SMTP_PORT",
        "required": False,
        "desc": "SMTP server port",
        "default": "587",
    },
    "mail_from_name": {
        "env": "MAIL_FROM_NAME",
        "required": False,
        "desc": "Display name for outbound quotation mail",
        "default": "Capricorn Elevators",
    },
}


def _sanitize(value: str) -> str:
    if not value:
        return ""
    return value.strip().strip("'\"")


# ─── Public API ──────────────────────────────────────────────────────────────

def get_key(name: str) -> str:
    """Get a secret value by registry name. Returns empty string if not set."""
    entry = _REGISTRY.get(name)
    if not entry:
        log.warning("Unknown secret requested: %s", name)
        return ""

    val = _sanitize(os.environ.get(entry["env"], ""))
    if not val and "fallback" in entry:
        val = _sanitize(os.environ.get(entry["fallback"], ""))
    if not val and "default" in entry:
        val = entry["default"]
    return val


def mask(value: str) -> str:
    """Mask a secret for safe logging. Shows first 8 chars."""
    if not value:
        return "(not set)"
    if len(value) <= 12:
        return value[:4] + "****"
    return value[:8] + "****" + f"({len(value)} chars)"


def smtp_config() -> dict:
    """SMTP settings for the quotation mailer."""
    port_raw = get_key("smtp_port")
    try:
        port = int(port_raw)
    except ValueError:
        log.warning("Invalid SMTP_PORT %r, using 587", port_raw)
        port = 587
    return {
        "host": get_key("smtp_host"),
        "port": port,
        "user": get_key("smtp_user"),
        "password": get_key("smtp_pass"),
        "from_name": get_key("mail_from_name"),
    }


def validate_all() -> dict:
    """Validate all secrets. Returns status report."""
    results = {}
    warnings = []
    for name, entry in _REGISTRY.items():
        val = get_key(name)
        is_set = bool(val)
        results[name] = {
            "set": is_set,
            "env": entry["env"],
            "desc": entry["desc"],
            "masked": mask(val) if not entry.get("sensitive") else ("set" if is_set else "not set"),
            "required": entry.get("required", False),
        }
        if entry.get("required") and not is_set:
            warnings.append(f"REQUIRED secret missing: {entry['env']} ({entry['desc']})")
        if "fallback" in entry:
            results[name]["fallback"] = entry["fallback"]
            results[name]["using_fallback"] = (
                not os.environ.get(entry["env"]) and bool(os.environ.get(entry["fallback"]))
            )

    return {
        "secrets": results,
        "total": len(results),
        "set": sum(1 for r in results.values() if r["set"]),
        "missing": sum(1 for r in results.values() if not r["set"]),
        "warnings": warnings,
    }


def startup_check():
    """Run on startup. Logs warnings for missing critical secrets."""
    report = validate_all()
    log.info("Secrets: %d/%d configured", report["set"], report["total"])
    for w in report["warnings"]:
        log.warning("SECRET: %s", w)
    return report
