"""
liftquote/core/startup_checks.py — Runtime self-test on process boot

Catches deployment misconfiguration before the first quotation request:

  1. Asset paths — template PDF and logo exist
  2. Template integrity — template parses and has the expected page count
  3. SMTP secrets — sender credentials configured
"""

import logging

log = logging.getLogger("liftquote.startup")


def run_startup_checks() -> dict:
    """Run all startup validation checks.

    Returns:
        {"passed": int, "failed": int, "warnings": int, "details": [...]}
    """
    results = {"passed": 0, "failed": 0, "warnings": 0, "details": []}

    def _pass(msg):
        results["passed"] += 1
        results["details"].append(("PASS", msg))
        log.info("%s", msg)

    def _fail(msg):
        results["failed"] += 1
        results["details"].append(("FAIL", msg))
        log.error("STARTUP CHECK FAILED: %s", msg)

    def _warn(msg):
        results["warnings"] += 1
        results["details"].append(("WARN", msg))
        log.warning("%s", msg)

    # ── 1. Path Validation ────────────────────────────────────────────────────
    from liftquote.core.paths import validate_paths
    path_result = validate_paths()
    if path_result["ok"]:
        _pass("All asset paths valid")
    else:
        for err in path_result["errors"]:
            _fail(err)
    for warn in path_result.get("warnings", []):
        _warn(warn)

    # ── 2. Template Integrity ─────────────────────────────────────────────────
    from liftquote.forms.quote_pdf import QuoteTemplateError, load_assets, _open_template
    try:
        template_bytes, _ = load_assets()
        _open_template(template_bytes)
        _pass("Quotation template readable")
    except QuoteTemplateError as e:
        _fail(f"Quotation template: {e}")

    # ── 3. SMTP Secrets ───────────────────────────────────────────────────────
    from liftquote.core.secrets import startup_check
    report = startup_check()
    if report["warnings"]:
        for w in report["warnings"]:
            _warn(w)
    else:
        _pass("SMTP credentials configured")

    return results
