"""Tests for the quotes log: numbering, status lifecycle, search and stats."""
import json
import os
from datetime import date, datetime, timedelta

import pytest

from liftquote.core import paths
from liftquote.core.quotes_db import (
    next_quote_number, get_all_quotes, get_quote, peek_next_quote_number, create_quote,
    update_quote_status, mark_sent, search_quotes, get_quote_stats,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Numbering
# ═══════════════════════════════════════════════════════════════════════════════

class TestNextQuoteNumber:

    def test_follows_latest(self):
        assert next_quote_number(["QT-2025-001", "QT-2025-002"], 2025) == "QT-2025-003"

    def test_first_of_year(self):
        assert next_quote_number([], 2025) == "QT-2025-001"

    def test_other_years_ignored(self):
        assert next_quote_number(["QT-2024-099"], 2025) == "QT-2025-001"

    def test_unordered_input(self):
        assert next_quote_number(["QT-2025-010", "QT-2025-002", "QT-2025-009"], 2025) == "QT-2025-011"

    def test_unparseable_suffix_skipped(self):
        assert next_quote_number(["QT-2025-abc", "QT-2025-004"], 2025) == "QT-2025-005"

    def test_grows_past_three_digits(self):
        assert next_quote_number(["QT-2025-999"], 2025) == "QT-2025-1000"

    def test_default_year_is_current(self):
        assert next_quote_number([]) == f"QT-{datetime.now().year}-001"


# ═══════════════════════════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════════════════════════

class TestCreateQuote:

    def test_assigns_sequential_numbers(self, sample_record):
        year = datetime.now().year
        first = create_quote(sample_record)
        second = create_quote(sample_record)
        assert first["quote_number"] == f"QT-{year}-001"
        assert second["quote_number"] == f"QT-{year}-002"
        assert peek_next_quote_number() == f"QT-{year}-003"

    def test_defaults(self, sample_record):
        created = create_quote(sample_record, created_by="sales")
        assert created["status"] == "draft"
        assert created["created_by"] == "sales"
        expected = (date.today() + timedelta(days=30)).isoformat()
        assert created["valid_until"] == expected

    def test_custom_validity(self, sample_record):
        created = create_quote(sample_record, validity_days=7)
        assert created["valid_until"] == (date.today() + timedelta(days=7)).isoformat()

    def test_input_not_mutated(self, sample_record):
        original_number = sample_record["quote_number"]
        create_quote(sample_record)
        assert sample_record["quote_number"] == original_number
        assert "status" not in sample_record

    def test_unknown_status_falls_back_to_draft(self, sample_record):
        sample_record["status"] = "archived"
        assert create_quote(sample_record)["status"] == "draft"

    def test_log_entry(self, sample_record):
        created = create_quote(sample_record)
        entry = get_quote(created["quote_number"])
        assert entry["customer_name"] == "Rahul Menon"
        assert entry["company_name"] == "Acme Pvt Ltd"
        assert entry["total"] == pytest.approx(1174100)
        assert entry["status_history"][0]["status"] == "draft"

    def test_log_written_under_data_dir(self, sample_record, temp_data_dir):
        create_quote(sample_record)
        assert os.path.exists(os.path.join(temp_data_dir, "quotes_log.json"))


class TestStorage:

    def test_missing_log_is_empty(self):
        assert get_all_quotes() == []

    def test_corrupt_log_is_empty(self):
        with open(os.path.join(paths.DATA_DIR, "quotes_log.json"), "w") as f:
            f.write("{not json")
        assert get_all_quotes() == []

    def test_non_list_log_is_empty(self):
        with open(os.path.join(paths.DATA_DIR, "quotes_log.json"), "w") as f:
            json.dump({"quotes": []}, f)
        assert get_all_quotes() == []

    def test_log_follows_configured_path(self, sample_record, tmp_path, monkeypatch):
        log_path = tmp_path / "elsewhere" / "quotes.json"
        monkeypatch.setattr(paths, "QUOTES_LOG_PATH", str(log_path))
        created = create_quote(sample_record)
        assert log_path.exists()
        assert get_quote(created["quote_number"]) is not None

    def test_get_unknown_quote(self):
        assert get_quote("QT-1999-001") is None


# ═══════════════════════════════════════════════════════════════════════════════
# Status lifecycle
# ═══════════════════════════════════════════════════════════════════════════════

class TestStatus:

    def test_draft_to_sent_to_approved(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        assert mark_sent(qn) is True
        assert get_quote(qn)["status"] == "sent"
        assert update_quote_status(qn, "approved", actor="manager") is True
        entry = get_quote(qn)
        assert entry["status"] == "approved"
        assert [h["status"] for h in entry["status_history"]] == ["draft", "sent", "approved"]
        assert entry["status_history"][-1]["actor"] == "manager"

    def test_sent_only_through_mailer(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        assert update_quote_status(qn, "sent") is False
        assert get_quote(qn)["status"] == "draft"

    def test_cannot_return_to_draft_after_send(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        mark_sent(qn)
        assert update_quote_status(qn, "draft") is False

    def test_no_resend_after_approval(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        update_quote_status(qn, "approved")
        assert mark_sent(qn) is False

    def test_resend_keeps_sent(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        assert mark_sent(qn) is True
        assert mark_sent(qn) is True
        assert get_quote(qn)["status"] == "sent"

    def test_invalid_status(self, sample_record):
        qn = create_quote(sample_record)["quote_number"]
        assert update_quote_status(qn, "won") is False

    def test_unknown_quote(self):
        assert update_quote_status("QT-1999-001", "approved") is False
        assert mark_sent("QT-1999-001") is False


# ═══════════════════════════════════════════════════════════════════════════════
# Search + stats
# ═══════════════════════════════════════════════════════════════════════════════

class TestSearchAndStats:

    @pytest.fixture
    def populated(self, sample_record):
        other = dict(sample_record, customer={"name": "Priya Nair", "company": "Beta Builders",
                                              "email": "priya@beta.example.com"})
        a = create_quote(sample_record, created_by="anil")["quote_number"]
        b = create_quote(other, created_by="meera")["quote_number"]
        c = create_quote(sample_record, created_by="anil")["quote_number"]
        mark_sent(b)
        update_quote_status(c, "rejected")
        return a, b, c

    def test_newest_first(self, populated):
        a, b, c = populated
        assert [q["quote_number"] for q in search_quotes()] == [c, b, a]

    def test_free_text(self, populated):
        results = search_quotes("beta builders")
        assert [q["quote_number"] for q in results] == [populated[1]]

    def test_by_status(self, populated):
        assert [q["quote_number"] for q in search_quotes(status="rejected")] == [populated[2]]

    def test_by_creator(self, populated):
        assert len(search_quotes(created_by="anil")) == 2

    def test_limit(self, populated):
        assert len(search_quotes(limit=1)) == 1

    def test_stats(self, populated):
        stats = get_quote_stats()
        assert stats["draft"]["count"] == 1
        assert stats["sent"]["count"] == 1
        assert stats["rejected"]["count"] == 1
        assert stats["approved"]["count"] == 0
        assert stats["overall_total"] == pytest.approx(3 * 1174100)
