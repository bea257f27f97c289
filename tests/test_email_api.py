"""Tests for the email pass-through route and SMTP client."""

import asyncio
import smtplib

import pytest

from fundspark.api.email_routes import get_mail_client
from fundspark.connectors.mail.client import MailClient, MailDeliveryError
from fundspark.main import app


class FakeMailClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, to, subject, text=None, html=None):
        if self.fail:
            raise MailDeliveryError("relay down")
        self.sent.append((to, subject, text, html))


@pytest.fixture
def mailer(client):
    fake = FakeMailClient()
    app.dependency_overrides[get_mail_client] = lambda: fake
    return fake


class TestSendEmailRoute:
    def test_sends_message(self, client, mailer, backer, auth_headers):
        response = client.post(
            "/email/send",
            json={"to": "friend@example.com", "subject": "Hi", "text": "Look at this"},
            headers=auth_headers(backer),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Email sent successfully"}
        assert mailer.sent == [("friend@example.com", "Hi", "Look at this", None)]

    def test_requires_token(self, client, mailer):
        response = client.post(
            "/email/send", json={"to": "friend@example.com", "subject": "Hi", "text": "x"}
        )
        assert response.status_code == 401
        assert mailer.sent == []

    @pytest.mark.parametrize(
        "body",
        [
            {"subject": "Hi", "text": "x"},
            {"to": "friend@example.com", "text": "x"},
            {"to": "friend@example.com", "subject": "Hi"},
        ],
    )
    def test_missing_fields(self, client, mailer, backer, auth_headers, body):
        response = client.post("/email/send", json=body, headers=auth_headers(backer))
        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields"

    def test_delivery_failure(self, client, mailer, backer, auth_headers):
        mailer.fail = True
        response = client.post(
            "/email/send",
            json={"to": "friend@example.com", "subject": "Hi", "html": "<p>x</p>"},
            headers=auth_headers(backer),
        )
        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Error sending email"}


class TestMailClient:
    def test_builds_multipart_message(self):
        client = MailClient(host="smtp.example.com", sender="noreply@example.com")
        message = client._build("a@example.com", "Subject", "plain", "<b>rich</b>")

        assert message["To"] == "a@example.com"
        assert message["From"] == "noreply@example.com"
        assert message.is_multipart()

    def test_unconfigured_relay(self):
        client = MailClient()
        client.host = None
        with pytest.raises(MailDeliveryError):
            asyncio.run(client.send("a@example.com", "Subject", "plain"))

    def test_smtp_error_wrapped(self, monkeypatch):
        client = MailClient(host="smtp.example.com", sender="noreply@example.com")

        def boom(message):
            raise smtplib.SMTPException("rejected")

        monkeypatch.setattr(client, "_send_sync", boom)
        with pytest.raises(MailDeliveryError):
            asyncio.run(client.send("a@example.com", "Subject", "plain"))
