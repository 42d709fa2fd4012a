import base64
import json

import httpx
import pytest

from mayspace.core.config import settings
from mayspace.services import mailer


@pytest.fixture(autouse=True)
def no_providers(monkeypatch):
    for name in ("GMAIL_CLIENT_ID", "GMAIL_CLIENT_SECRET", "GMAIL_REFRESH_TOKEN",
                 "SMTP_USER", "SMTP_PASS", "AUDIT_EMAIL", "EMAIL_FROM"):
        monkeypatch.setattr(settings, name, "")


def test_missing_recipient():
    with pytest.raises(ValueError):
        mailer.send_otp_email("", "123456")


def test_no_provider_logs_and_returns_false(caplog):
    assert mailer.send_otp_email("maria@example.com", "123456") is False
    assert "123456" in caplog.text


def test_audit_copy(monkeypatch):
    assert mailer.otp_recipients("maria@example.com") == ["maria@example.com"]
    monkeypatch.setattr(settings, "AUDIT_EMAIL", "audit@mayspace.test")
    assert mailer.otp_recipients("maria@example.com") == ["maria@example.com", "audit@mayspace.test"]
    assert mailer.otp_recipients("AUDIT@mayspace.test") == ["AUDIT@mayspace.test"]


def test_encode_for_gmail_is_unpadded_base64url(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_FROM", "noreply@mayspace.test")
    raw = mailer.encode_for_gmail(mailer.build_message("maria@example.com", "Your OTP Code", "<p>hi</p>"))
    assert "=" not in raw
    assert "+" not in raw and "/" not in raw

    decoded = base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)).decode()
    assert "To: maria@example.com" in decoded
    assert "From: noreply@mayspace.test" in decoded
    assert "Subject: Your OTP Code" in decoded


def _use_transport(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(mailer.httpx, "Client", client_factory)


def _configure_gmail(monkeypatch):
    monkeypatch.setattr(settings, "GMAIL_CLIENT_ID", "client")
    monkeypatch.setattr(settings, "GMAIL_CLIENT_SECRET", "secret")
    monkeypatch.setattr(settings, "GMAIL_REFRESH_TOKEN", "refresh")
    monkeypatch.setattr(settings, "EMAIL_FROM", "noreply@mayspace.test")


def test_send_via_gmail(monkeypatch):
    _configure_gmail(monkeypatch)
    monkeypatch.setattr(settings, "AUDIT_EMAIL", "audit@mayspace.test")
    calls = []

    def handler(request):
        calls.append(request)
        if request.url.host == "oauth2.googleapis.com":
            assert b"grant_type=refresh_token" in request.content
            return httpx.Response(200, json={"access_token": "tok"})
        assert request.headers["Authorization"] == "Bearer tok"
        assert "raw" in json.loads(request.content)
        return httpx.Response(200, json={"id": "msg-1"})

    _use_transport(monkeypatch, handler)

    assert mailer.send_otp_email("maria@example.com", "654321") is True
    # one token exchange, one send per recipient
    assert len(calls) == 3


def test_gmail_token_failure(monkeypatch):
    _configure_gmail(monkeypatch)

    def handler(request):
        return httpx.Response(400, json={"error": "invalid_grant"})

    _use_transport(monkeypatch, handler)
    assert mailer.send_otp_email("maria@example.com", "654321") is False


class FakeSMTP:
    instances = []

    def __init__(self, host, port, **kwargs):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, sender, recipient, body):
        self.sent.append((sender, recipient))


def test_send_via_smtp(monkeypatch):
    FakeSMTP.instances.clear()
    monkeypatch.setattr(settings, "SMTP_USER", "mailer@mayspace.test")
    monkeypatch.setattr(settings, "SMTP_PASS", "app-password")
    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", FakeSMTP)

    assert mailer.send_otp_email("maria@example.com", "111222") is True

    [server] = FakeSMTP.instances
    assert server.logged_in == ("mailer@mayspace.test", "app-password")
    assert server.sent == [("mailer@mayspace.test", "maria@example.com")]


def test_smtp_connection_failure(monkeypatch):
    def refuse(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(settings, "SMTP_USER", "mailer@mayspace.test")
    monkeypatch.setattr(settings, "SMTP_PASS", "app-password")
    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", refuse)

    assert mailer.send_otp_email("maria@example.com", "111222") is False
