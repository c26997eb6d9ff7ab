"""Tests for quotation email dispatch. No real SMTP traffic."""
import email
import smtplib

import pytest

from liftquote.agents import quote_mailer
from liftquote.agents.quote_mailer import (
    SmtpTransport, attachment_name, build_email_html, build_subject, is_valid_email,
    send_quotation,
)
from liftquote.core.quotes_db import create_quote, get_quote

FAKE_PDF = b"%PDF-1.4\n% fake quotation\n"


class FakeTransport:
    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    def send_mail(self, message):
        self.calls.append(message)
        if self.fail_with:
            raise self.fail_with
        return {"message_id": "<fake-1@example.com>"}


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.sent.append(msg)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


# ═══════════════════════════════════════════════════════════════════════════════
# Recipient validation
# ═══════════════════════════════════════════════════════════════════════════════

class TestRecipientValidation:

    @pytest.mark.parametrize("address", [
        "buyer@example.com", "first.last+quotes@sub.example.co.in", " padded@example.com ",
    ])
    def test_valid(self, address):
        assert is_valid_email(address)

    @pytest.mark.parametrize("address", [
        "not-an-email", "", None, "a@b", "two@@example.com", "spaces in@example.com",
    ])
    def test_invalid(self, address):
        assert not is_valid_email(address)

    def test_invalid_recipient_never_reaches_transport(self, sample_record):
        transport = FakeTransport()
        # no pdf_bytes and no configured template: rendering would raise if attempted
        result = send_quotation(sample_record, "not-an-email", transport=transport)
        assert result["ok"] is False
        assert result["error_type"] == "validation"
        assert result["status_code"] == 400
        assert result["attempted"] is False
        assert transport.calls == []


# ═══════════════════════════════════════════════════════════════════════════════
# Content
# ═══════════════════════════════════════════════════════════════════════════════

class TestContent:

    def test_subject_and_filename(self, sample_record):
        assert build_subject(sample_record) == "Quotation QT-2025-007 from Capricorn Elevators"
        assert attachment_name(sample_record) == "Quotation_QT-2025-007.pdf"

    def test_html_body(self, sample_record):
        body = build_email_html(sample_record)
        assert "Dear Rahul Menon," in body
        assert "QT-2025-007" in body
        assert "Rs. 11,74,100" in body

    def test_html_escapes_name(self, sample_record):
        sample_record["customer"]["name"] = "<b>Mallory</b>"
        body = build_email_html(sample_record)
        assert "<b>Mallory</b>" not in body
        assert "&lt;b&gt;Mallory&lt;/b&gt;" in body

    def test_missing_name(self):
        assert "Dear Customer," in build_email_html({"quote_number": "QT-2025-001"})


# ═══════════════════════════════════════════════════════════════════════════════
# Dispatch
# ═══════════════════════════════════════════════════════════════════════════════

class TestSendQuotation:

    def test_success(self, sample_record):
        transport = FakeTransport()
        sent_for = []
        result = send_quotation(sample_record, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=transport, on_sent=lambda qn: sent_for.append(qn) or True)
        assert result["ok"] is True
        assert result["message_id"] == "<fake-1@example.com>"
        assert result["filename"] == "Quotation_QT-2025-007.pdf"
        assert result["status_updated"] is True
        assert sent_for == ["QT-2025-007"]

        message = transport.calls[0]
        assert message["to"] == "buyer@example.com"
        assert message["subject"] == "Quotation QT-2025-007 from Capricorn Elevators"
        att = message["attachments"][0]
        assert att["content"] == FAKE_PDF
        assert att["content_type"] == "application/pdf"

    def test_renders_pdf_when_not_supplied(self, sample_record, asset_files):
        transport = FakeTransport()
        result = send_quotation(sample_record, "buyer@example.com",
                                transport=transport, on_sent=lambda qn: True)
        assert result["ok"] is True
        assert transport.calls[0]["attachments"][0]["content"][:5] == b"%PDF-"

    def test_transport_failure(self, sample_record):
        transport = FakeTransport(fail_with=smtplib.SMTPAuthenticationError(535, b"auth failed"))
        sent_for = []
        result = send_quotation(sample_record, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=transport, on_sent=sent_for.append)
        assert result["ok"] is False
        assert result["error_type"] == "transport"
        assert result["status_code"] == 502
        assert result["attempted"] is True
        assert result["error"].startswith("Failed to send email:")
        assert sent_for == []

    def test_connection_refused(self, sample_record):
        transport = FakeTransport(fail_with=ConnectionRefusedError("refused"))
        result = send_quotation(sample_record, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=transport)
        assert result["error_type"] == "transport"

    def test_default_marks_quote_sent(self, sample_record):
        created = create_quote(sample_record)
        result = send_quotation(created, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=FakeTransport())
        assert result["status_updated"] is True
        assert get_quote(created["quote_number"])["status"] == "sent"

    def test_unlogged_quote_sends_without_status(self, sample_record):
        result = send_quotation(sample_record, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=FakeTransport())
        assert result["ok"] is True
        assert result["status_updated"] is False


# ═══════════════════════════════════════════════════════════════════════════════
# SMTP transport
# ═══════════════════════════════════════════════════════════════════════════════

class TestSmtpTransport:

    @pytest.fixture(autouse=True)
    def fake_smtp(self, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(quote_mailer.smtplib, "SMTP", FakeSMTP)
        monkeypatch.setattr(quote_mailer.smtplib, "SMTP_SSL", FakeSMTP)

    def test_config_from_env(self, monkeypatch):
        monkeypatch.setenv("SMTP_USER", "quotes@capricorn.example.com")
        monkeypatch.setenv("SMTP_PASS", "'app-password'")
        transport = SmtpTransport()
        assert transport.host == "smtp.gmail.com"
        assert transport.port == 587
        assert transport.password == "app-password"
        assert transport.from_address == "Capricorn Elevators <quotes@capricorn.example.com>"

    def test_starttls_login_send(self, sample_record):
        transport = SmtpTransport({"host": "smtp.example.com", "port": 587,
                                   "user": "quotes@capricorn.example.com", "password": "pw",
                                   "from_name": "Capricorn Elevators"})
        result = send_quotation(sample_record, "buyer@example.com", pdf_bytes=FAKE_PDF,
                                transport=transport, on_sent=lambda qn: True)
        assert result["ok"] is True
        server = FakeSMTP.instances[0]
        assert server.started_tls
        assert server.logged_in == ("quotes@capricorn.example.com", "pw")
        msg = email.message_from_bytes(server.sent[0].as_bytes())
        assert msg["Subject"] == "Quotation QT-2025-007 from Capricorn Elevators"
        assert msg["Message-ID"] == result["message_id"]
        attachments = [p for p in msg.walk() if p.get_filename()]
        assert attachments[0].get_filename() == "Quotation_QT-2025-007.pdf"
        assert attachments[0].get_payload(decode=True) == FAKE_PDF

    def test_implicit_tls_port(self):
        transport = SmtpTransport({"host": "smtp.example.com", "port": 465, "user": ""})
        transport.send_mail({"to": "buyer@example.com", "subject": "s", "html": "<p>x</p>"})
        server = FakeSMTP.instances[0]
        assert server.port == 465
        assert server.started_tls is False
        assert server.logged_in is None
