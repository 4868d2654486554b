import smtplib
from unittest.mock import patch

import pytest

from nginxlogstats.mail_util import (
    SMTPS_PORT,
    MailError,
    build_message,
    render_html,
    send_mail,
)

BODY = "- 总请求数: 2\n\n| a | b |\n|:---|---:|\n| 1 | 2 |\n"
SENDER = "reports@example.com"
RECIPIENTS = ["ops@example.com", "Team <team@example.com>"]


def test_render_html_wraps_table():
    html = render_html(BODY)
    assert html.lstrip().startswith("<style>")
    assert '<div class="markdown-body">' in html
    assert "<table>" in html
    assert html.endswith("</div>")


def test_build_message_parts():
    message = build_message(SENDER, RECIPIENTS, "Report", BODY)
    assert message.get_content_type() == "multipart/alternative"
    assert message["Subject"] == "Report"
    assert "team@example.com" in message["To"]
    assert "ops@example.com" in message["To"]
    plain, html = list(message.iter_parts())
    assert plain.get_content_type() == "text/plain"
    assert plain.get_content() == BODY
    assert html.get_content_type() == "text/html"
    assert "<table>" in html.get_content()


def test_build_message_bad_sender():
    with pytest.raises(MailError):
        build_message("not-an-address", RECIPIENTS, "s", BODY)


def test_build_message_bad_recipient():
    with pytest.raises(MailError):
        build_message(SENDER, ["nobody"], "s", BODY)


@patch("smtplib.SMTP_SSL")
def test_send_mail_success(smtp_cls, capsys):
    password = "password"
    send_mail("smtp.example.com", SENDER, password, RECIPIENTS, "Report", BODY)
    smtp_cls.assert_called_once_with("smtp.example.com", SMTPS_PORT)
    server = smtp_cls.return_value.__enter__.return_value
    server.login.assert_called_once_with(SENDER, password)
    sent = server.send_message.call_args.args[0]
    assert sent["Subject"] == "Report"
    assert "Email sent successfully!" in capsys.readouterr().out


@patch("smtplib.SMTP_SSL")
def test_send_mail_failure(smtp_cls, capsys):
    server = smtp_cls.return_value.__enter__.return_value
    server.send_message.side_effect = smtplib.SMTPException("boom")
    password = "password"
    with pytest.raises(MailError, match="Send failed"):
        send_mail("smtp.example.com", SENDER, password, RECIPIENTS, "Report", BODY)
    assert "Could not send email" in capsys.readouterr().out


@patch("smtplib.SMTP_SSL", side_effect=OSError("unreachable"))
def test_send_mail_connection_error(smtp_cls):
    password = "password"
    with pytest.raises(MailError):
        send_mail("smtp.example.com", SENDER, password, RECIPIENTS, "Report", BODY)
    assert smtp_cls.call_count == 1