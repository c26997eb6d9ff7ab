"""
Command line entry point.

Usage:
    python -m liftquote render record.json out.pdf
    python -m liftquote send record.json buyer@example.com
    python -m liftquote check

Exit codes:
    0 = ok
    1 = failure (message logged)
"""

import argparse
import json
import logging
import sys

from liftquote.logging_config import setup_logging

log = logging.getLogger("liftquote.cli")


def _load_record(path: str) -> dict:
    with open(path) as f:
        return json.load(f)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="liftquote", description="Capricorn Elevators quotation PDF")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p_render = sub.add_parser("render", help="Render a quotation record to PDF")
    p_render.add_argument("record")
    p_render.add_argument("output")

    p_send = sub.add_parser("send", help="Render and email a quotation")
    p_send.add_argument("record")
    p_send.add_argument("recipient")

    sub.add_parser("check", help="Run startup checks")

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    if args.command == "render":
        from liftquote.forms.quote_pdf import QuoteTemplateError, generate_quote_file
        try:
            result = generate_quote_file(_load_record(args.record), args.output)
        except QuoteTemplateError as e:
            log.error("Render failed: %s", e)
            return 1
        print(json.dumps(result, indent=2))
        return 0

    if args.command == "send":
        from liftquote.agents.quote_mailer import send_quotation
        from liftquote.forms.quote_pdf import QuoteTemplateError
        try:
            result = send_quotation(_load_record(args.record), args.recipient)
        except QuoteTemplateError as e:
            log.error("Send failed: %s", e)
            return 1
        print(json.dumps(result, indent=2))
        return 0 if result["ok"] else 1

    from liftquote.core.startup_checks import run_startup_checks
    report = run_startup_checks()
    for level, msg in report["details"]:
        print(f"[{level}] {msg}")
    return 0 if report["failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
