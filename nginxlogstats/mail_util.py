"""Sending a markdown report as a plain text and HTML e-mail."""

from __future__ import annotations

import smtplib
from collections.abc import Sequence
from email.message import EmailMessage
from email.utils import formataddr, parseaddr

import markdown

SMTPS_PORT = 465

TABLE_CSS = """
<style>
.markdown-body table {
  border-collapse: collapse;
  border-spacing: 0;
  width: 100%;
  font-size: 14px;
}
.markdown-body th, .markdown-body td {
  border: 1px solid #dfe2e5;
  padding: 6px 13px;
}
.markdown-body tr {
  background-color: #fff;
  border-top: 1px solid #c6cbd1;
}
.markdown-body tr:nth-child(2n) {
  background-color: #f6f8fa;
}
.markdown-body th {
  background-color: #f6f8fa;
  font-weight: 600;
}
</style>
"""


class MailError(Exception):
    """Raised when a message cannot be built or sent."""


def _mailbox(text: str) -> str:
    name, address = parseaddr(text)
    local, at, domain = address.rpartition("@")
    if not at or not local or not domain or any(ch.isspace() for ch in address):
        raise MailError(f"invalid mailbox: {text!r}")
    return formataddr((name, address))


def render_html(body: str) -> str:
    """Render markdown to HTML wrapped in a styled ``markdown-body`` block."""
    html = markdown.markdown(body, extensions=["tables", "fenced_code", "footnotes"])
    return f'{TABLE_CSS}<div class="markdown-body">{html}</div>'


def build_message(sender: str, recipients: Sequence[str], subject: str, body: str) -> EmailMessage:
    """Build a multipart/alternative message from a markdown body."""
    message = EmailMessage()
    message["From"] = _mailbox(sender)
    message["To"] = ", ".join(_mailbox(recipient) for recipient in recipients)
    message["Subject"] = subject
    message.set_content(body)
    message.add_alternative(render_html(body), subtype="html")
    return message


def send_mail(
    smtp_host: str,
    sender: str,
    password: str,
    recipients: Sequence[str],
    subject: str,
    body: str,
) -> None:
    """Send ``body`` over SMTP with implicit TLS, logging in as ``sender``."""
    message = build_message(sender, recipients, subject, body)
    try:
        with smtplib.SMTP_SSL(smtp_host, SMTPS_PORT) as server:
            server.login(sender, password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        print(f"Could not send email: {exc!r}")
        raise MailError("Send failed") from exc
    print("Email sent successfully!")