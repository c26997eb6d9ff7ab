"""
Quotes log — quote numbering and status tracking.

A JSON file under DATA_DIR, one entry per quotation:
    {quote_number, customer_name, customer_email, company_name, total,
     status, valid_until, created_at, created_by, status_history}

Quote numbers are QT-<year>-<seq:03d>, sequential per calendar year.

Status lifecycle:
    draft ──(mail sent)──► sent ──► approved | rejected

"sent" is only reachable through mark_sent(), which the mailer calls after
a successful send. approved / rejected are set through update_quote_status().

Numbering reads the highest existing number and adds one. There is no lock
or compare-and-swap, so two processes creating quotes at the same moment can
hand out the same number.
"""

import json
import logging
import os
from datetime import datetime, timedelta

from liftquote.core import paths

log = logging.getLogger("liftquote.quotes")

VALID_STATUSES = ("draft", "sent", "approved", "rejected")
DEFAULT_VALIDITY_DAYS = 30

# status → statuses it may move to through update_quote_status()
_TRANSITIONS = {
    "draft":    ("draft", "approved", "rejected"),
    "sent":     ("approved", "rejected"),
    "approved": ("approved", "rejected"),
    "rejected": ("rejected", "approved"),
}


# ═══════════════════════════════════════════════════════════════════════════════
# QUOTE NUMBERING — QT-{YYYY}-{seq:03d}
# ═══════════════════════════════════════════════════════════════════════════════

def next_quote_number(existing, year: int = None) -> str:
    """Next number after the greatest existing one for `year`.

    "Greatest" is lexicographic, matching a sort on the stored string.
    Unparseable suffixes are skipped.
    """
    if year is None:
        year = datetime.now().year
    prefix = f"QT-{year}-"

    latest = None
    for qn in sorted((q for q in existing or [] if str(q).startswith(prefix)), reverse=True):
        try:
            latest = int(str(qn)[len(prefix):])
            break
        except ValueError:
            continue

    seq = (latest or 0) + 1
    return f"{prefix}{seq:03d}"


# ═══════════════════════════════════════════════════════════════════════════════
# STORAGE
# ═══════════════════════════════════════════════════════════════════════════════

def _log_path() -> str:
    return paths.QUOTES_LOG_PATH


def get_all_quotes() -> list:
    try:
        with open(_log_path()) as f:
            quotes = json.load(f)
    except FileNotFoundError:
        return []
    except json.JSONDecodeError as e:
        log.warning("Quotes log unreadable, treating as empty: %s", e)
        return []
    return quotes if isinstance(quotes, list) else []


def _save_all_quotes(quotes: list):
    os.makedirs(os.path.dirname(_log_path()) or ".", exist_ok=True)
    with open(_log_path(), "w") as f:
        json.dump(quotes, f, indent=2, default=str)


def get_quote(quote_number: str):
    for qt in get_all_quotes():
        if qt.get("quote_number") == quote_number:
            return qt
    return None


def peek_next_quote_number() -> str:
    """Preview what the next number would be without consuming it."""
    return next_quote_number(q.get("quote_number", "") for q in get_all_quotes())


# ═══════════════════════════════════════════════════════════════════════════════
# CREATE / UPDATE
# ═══════════════════════════════════════════════════════════════════════════════

def create_quote(record: dict, created_by: str = "system",
                 validity_days: int = DEFAULT_VALIDITY_DAYS) -> dict:
    """Assign a quote number and log a new quotation.

    Returns a new record dict with quote_number, valid_until, status and
    created_at filled in. The input record is left untouched.
    """
    from liftquote.forms.pricing import price_record
    from liftquote.forms.overlay import customer_info

    quotes = get_all_quotes()
    now = datetime.now()
    quote_number = next_quote_number(q.get("quote_number", "") for q in quotes)

    created = dict(record)
    created["quote_number"] = quote_number
    created["valid_until"] = (now + timedelta(days=validity_days)).date().isoformat()
    created["quote_date"] = created.get("quote_date") or now.date().isoformat()
    created["status"] = record.get("status") or "draft"
    if created["status"] not in VALID_STATUSES:
        log.warning("Quote created with unknown status %r, using draft", created["status"])
        created["status"] = "draft"
    created["created_by"] = created_by
    created["created_at"] = now.isoformat()

    _, totals = price_record(created)
    cust = customer_info(created)
    quotes.append({
        "quote_number":   quote_number,
        "customer_name":  cust["name"],
        "customer_email": cust["email"],
        "company_name":   cust["company"],
        "total":          totals["launch_grand_total"],
        "status":         created["status"],
        "valid_until":    created["valid_until"],
        "created_at":     created["created_at"],
        "created_by":     created_by,
        "status_history": [
            {"status": created["status"], "timestamp": created["created_at"], "actor": created_by}
        ],
    })
    _save_all_quotes(quotes)
    log.info("Quote %s created by %s", quote_number, created_by,
             extra={"quote_number": quote_number})
    return created


def _set_status(quote_number: str, status: str, actor: str, allowed_from) -> bool:
    quotes = get_all_quotes()
    now = datetime.now().isoformat()
    for qt in quotes:
        if qt.get("quote_number") != quote_number:
            continue
        current = qt.get("status", "draft")
        if current not in allowed_from:
            log.warning("Quote %s: %s → %s not allowed", quote_number, current, status)
            return False
        qt["status"] = status
        qt["status_updated"] = now
        history = qt.get("status_history", [])
        history.append({"status": status, "timestamp": now, "actor": actor})
        qt["status_history"] = history
        _save_all_quotes(quotes)
        log.info("Quote %s marked as %s", quote_number, status.upper(),
                 extra={"quote_number": quote_number, "status": status})
        return True
    return False


def update_quote_status(quote_number: str, status: str, actor: str = "user") -> bool:
    """Explicit status change (approve / reject / back to draft).

    Returns False for unknown quotes, unknown statuses, "sent" (only the
    mailer may set it) and moves the lifecycle does not allow.
    """
    if status not in VALID_STATUSES or status == "sent":
        return False
    allowed_from = [s for s, targets in _TRANSITIONS.items() if status in targets]
    return _set_status(quote_number, status, actor, allowed_from)


def mark_sent(quote_number: str, actor: str = "mailer") -> bool:
    """draft/sent → sent after the quotation mail went out."""
    return _set_status(quote_number, "sent", actor, ("draft", "sent"))


# ═══════════════════════════════════════════════════════════════════════════════
# SEARCH / STATS
# ═══════════════════════════════════════════════════════════════════════════════

def search_quotes(query: str = "", status: str = "", created_by: str = "",
                  limit: int = 50) -> list:
    """Newest first. Free text matches customer name/email, quote number, company."""
    q = query.lower().strip()
    results = []
    for qt in reversed(get_all_quotes()):
        if status and qt.get("status", "draft") != status:
            continue
        if created_by and qt.get("created_by") != created_by:
            continue
        if q:
            searchable = " ".join(str(qt.get(k, "")) for k in (
                "customer_name", "customer_email", "quote_number", "company_name",
            )).lower()
            if q not in searchable:
                continue
        results.append(qt)
        if len(results) >= limit:
            break
    return results


def get_quote_stats() -> dict:
    """Count and total value per status, plus the overall total."""
    stats = {s: {"count": 0, "total_value": 0.0} for s in VALID_STATUSES}
    overall = 0.0
    for qt in get_all_quotes():
        s = qt.get("status", "draft")
        value = float(qt.get("total", 0) or 0)
        overall += value
        if s in stats:
            stats[s]["count"] += 1
            stats[s]["total_value"] += value
    stats["overall_total"] = overall
    return stats
