"""
Structured logging configuration for liftquote.
Import and call setup_logging() once at process startup (the CLI does).

Modules log through named children of "liftquote" (liftquote.pdf,
liftquote.mailer, liftquote.quotes, ...) and attach quotation context
with extra={"quote_number": ..., "recipient": ...}.
"""
import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone

from liftquote.core import paths

# extra= fields carried into structured output
CONTEXT_FIELDS = ("quote_number", "recipient", "pages", "bytes",
                  "duration_ms", "status", "error_type")

NOISY_LOGGERS = ("PIL", "reportlab", "pypdf", "pdfminer")

LOG_FILE = "liftquote.log"
LOG_MAX_BYTES = 5_000_000
LOG_BACKUPS = 5


def _context(record) -> dict:
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if hasattr(record, k)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for the file log and production consoles."""

    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc)
                          .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }
        entry.update(_context(record))
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Colored console lines; the quote number, when present, leads the message."""
    COLORS = {
        "DEBUG": "\033[36m", "INFO": "\033[32m",
        "WARNING": "\033[33m", "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = f"[{record.quote_number}] " if getattr(record, "quote_number", None) else ""
        line = f"{color}{ts} {record.levelname[0]} {record.name}: {tag}{record.getMessage()}{self.RESET}"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _file_handler(log_dir: str):
    """Rotating JSON file log, or None when log_dir is not writable."""
    try:
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE), maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS,
        )
    except OSError:
        return None
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(level=None, json_logs=None, log_dir=None):
    """
    Configure the root logger.

    Args:
        level: Log level name (default: LOG_LEVEL env, else INFO)
        json_logs: JSON console output (default: on when LIFTQUOTE_ENV=production)
        log_dir: Directory for the rotating file log (default: DATA_DIR/logs)
    """
    level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    if json_logs is None:
        json_logs = os.environ.get("LIFTQUOTE_ENV", "").lower() == "production"
    log_dir = log_dir or paths.LOG_DIR

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    file_handler = _file_handler(log_dir)
    if file_handler is not None:
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    log = logging.getLogger("liftquote")
    if file_handler is None:
        log.warning("File logging disabled: %s not writable", log_dir)
    log.info("Logging initialized (level=%s, json=%s)", level, json_logs)
