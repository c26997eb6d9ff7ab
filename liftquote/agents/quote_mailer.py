"""
quote_mailer.py — Quotation email dispatch

Last mile: rendered quotation → branded email with the PDF attached → SMTP.

    send_quotation(record, "buyer@example.com")
        1. reject a malformed recipient before any work is done
        2. render the PDF (unless bytes are passed in)
        3. hand {from, to, subject, html, attachments} to the transport
        4. on success mark the quote "sent" in the quotes log

Failures come back as {"ok": False, "error": ..., "error_type": ...}:
    validation  — bad recipient, nothing was attempted (status_code 400)
    transport   — SMTP refused or unreachable (status_code 502)

There is no retry. A timeout may surface after the server already accepted
the message, so re-sending can deliver twice.
"""

import html
import logging
import re
import smtplib
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

from liftquote.core.secrets import smtp_config, mask
from liftquote.forms.overlay import COMPANY, customer_info, quote_number
from liftquote.forms.pricing import price_record
from liftquote.forms.text_layout import format_inr

log = logging.getLogger("liftquote.mailer")

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")


def is_valid_email(address) -> bool:
    return bool(address) and bool(EMAIL_RE.match(str(address).strip()))


# ═══════════════════════════════════════════════════════════════════════════════
# SMTP TRANSPORT
# ═══════════════════════════════════════════════════════════════════════════════

class SmtpTransport:
    """Sends one message per call over smtplib.

    Port 465 uses implicit TLS; anything else connects in clear and upgrades
    with STARTTLS.
    """

    def __init__(self, config: dict = None, timeout: float = 30):
        cfg = config or smtp_config()
        self.host = cfg.get("host", "smtp.gmail.com")
        self.port = int(cfg.get("port", 587))
        self.user = cfg.get("user", "")
        self.password = cfg.get("password", "")
        self.from_name = cfg.get("from_name", COMPANY["name"])
        self.timeout = timeout

    @property
    def from_address(self) -> str:
        return formataddr((self.from_name, self.user))

    def _connect(self):
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls()
        return server

    def send_mail(self, message: dict) -> dict:
        """message: {from, to, subject, html, attachments: [{filename, content, content_type}]}"""
        msg = MIMEMultipart("mixed")
        msg["From"] = message.get("from") or self.from_address
        msg["To"] = message["to"]
        msg["Subject"] = message["subject"]
        message_id = make_msgid(domain=(self.user.split("@")[-1] if "@" in self.user else None))
        msg["Message-ID"] = message_id
        msg.attach(MIMEText(message.get("html", ""), "html"))

        for att in message.get("attachments", []):
            maintype, _, subtype = att.get("content_type", "application/octet-stream").partition("/")
            part = MIMEBase(maintype, subtype or "octet-stream")
            part.set_payload(att["content"])
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", "attachment", filename=att["filename"])
            msg.attach(part)

        with self._connect() as server:
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)

        log.info("SMTP accepted %s → %s (user %s)", message_id, message["to"], mask(self.user))
        return {"message_id": message_id}


# ═══════════════════════════════════════════════════════════════════════════════
# EMAIL CONTENT
# ═══════════════════════════════════════════════════════════════════════════════

def build_subject(record: dict) -> str:
    return f"Quotation {quote_number(record)} from {COMPANY['name']}"


def attachment_name(record: dict) -> str:
    return f"Quotation_{quote_number(record)}.pdf"


def build_email_html(record: dict, totals: dict = None) -> str:
    if totals is None:
        _, totals = price_record(record)
    name = html.escape(customer_info(record)["name"] or "Customer")
    qn = html.escape(quote_number(record))
    total = format_inr(totals["launch_grand_total"])
    return f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #d4b347;">{COMPANY['name']}</h2>
  <p>Dear {name},</p>
  <p>Please find attached the quotation <strong>{qn}</strong> as requested.</p>
  <p><strong>Total Amount: Rs. {total}</strong></p>
  <p>If you have any questions or need clarification, please don't hesitate to contact us.</p>
  <br>
  <p>Best regards,<br>
  <strong>{COMPANY['name']}</strong><br>
  Phone: {COMPANY['phone']}<br>
  Website: {COMPANY['website']}</p>
</div>"""


# ═══════════════════════════════════════════════════════════════════════════════
# DISPATCH
# ═══════════════════════════════════════════════════════════════════════════════

def _default_on_sent(qn: str) -> bool:
    from liftquote.core.quotes_db import mark_sent
    return mark_sent(qn)


def send_quotation(record: dict, recipient: str, pdf_bytes: bytes = None,
                   transport=None, on_sent=None) -> dict:
    """Email a rendered quotation. See module docstring for the result shape."""
    qn = quote_number(record)
    if not is_valid_email(recipient):
        log.warning("Quotation %s not sent: invalid recipient %r", qn, recipient,
                    extra={"quote_number": qn, "error_type": "validation"})
        return {
            "ok": False,
            "error": f"Invalid email address: {recipient}",
            "error_type": "validation",
            "status_code": 400,
            "attempted": False,
        }
    recipient = recipient.strip()

    if pdf_bytes is None:
        from liftquote.forms.quote_pdf import generate_quote_pdf
        pdf_bytes = generate_quote_pdf(record)

    _, totals = price_record(record)
    if transport is None:
        transport = SmtpTransport()
    message = {
        "from": getattr(transport, "from_address", None),
        "to": recipient,
        "subject": build_subject(record),
        "html": build_email_html(record, totals),
        "attachments": [{
            "filename": attachment_name(record),
            "content": pdf_bytes,
            "content_type": "application/pdf",
        }],
    }

    log.info("Sending quotation %s to %s (%d bytes)", qn, recipient, len(pdf_bytes),
             extra={"quote_number": qn, "recipient": recipient})
    try:
        receipt = transport.send_mail(message)
    except (smtplib.SMTPException, OSError) as e:
        log.error("SEND FAILED quotation %s → %s: %s", qn, recipient, e,
                  extra={"quote_number": qn, "recipient": recipient, "error_type": "transport"})
        return {
            "ok": False,
            "error": f"Failed to send email: {e}",
            "error_type": "transport",
            "status_code": 502,
            "attempted": True,
        }

    if on_sent is None:
        on_sent = _default_on_sent
    try:
        status_updated = bool(on_sent(qn))
    except OSError as e:
        log.warning("Quotation %s sent but status not updated: %s", qn, e)
        status_updated = False

    message_id = (receipt or {}).get("message_id", "")
    log.info("SENT quotation %s → %s (%s)", qn, recipient, message_id,
             extra={"quote_number": qn, "recipient": recipient, "status": "sent"})
    return {
        "ok": True,
        "message_id": message_id,
        "quote_number": qn,
        "recipient": recipient,
        "filename": message["attachments"][0]["filename"],
        "status_updated": status_updated,
    }
