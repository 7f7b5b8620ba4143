"""
Integration tests for the verification flow.

Runs the full application (routes, service, file store, console
dispatcher) against a verified emails file in a temporary directory.
"""

import logging
import re
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch
from urllib.parse import urlparse

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.file import FileVerificationStore
from src.adapters.smtp.console import ConsoleNotificationDispatcher
from src.adapters.smtp.relay import SmtpNotificationDispatcher
from src.api.main import app


@pytest.fixture
def store(store_path: Path) -> FileVerificationStore:
    return FileVerificationStore(store_path)


@pytest.fixture
def client(store: FileVerificationStore) -> Generator[TestClient, None, None]:
    """Create test client with a real file store and console dispatcher."""
    app.state.store = store
    app.state.dispatcher = ConsoleNotificationDispatcher()
    yield TestClient(app)


def sent_link(caplog: pytest.LogCaptureFixture) -> str:
    match = re.search(r"Link: (\S+)", caplog.text)
    assert match, "verification link was not logged"
    return match.group(1)


class TestVerificationFlow:
    """End-to-end send, verify, check."""

    def test_full_flow(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            response = client.post("/send-verification", json={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "Verification email sent successfully"}

        # Follow the emailed link
        link = urlparse(sent_link(caplog))
        response = client.get(f"{link.path}?{link.query}")
        assert response.status_code == 200
        assert response.json() == {"message": "Email verified successfully"}

        response = client.get("/check-verification", params={"email": "a@b.com"})
        assert response.json() == {"email": "a@b.com", "verified": True}

        response = client.get("/verify", params={"email": "a@b.com"})
        assert response.status_code == 409

    def test_status_false_before_confirmation(self, client: TestClient) -> None:
        client.post("/send-verification", json={"email": "a@b.com"})

        response = client.get("/check-verification", params={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json() == {"email": "a@b.com", "verified": False}

    def test_send_after_verification_conflicts(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        client.get("/verify", params={"email": "a@b.com"})

        with caplog.at_level(logging.INFO):
            response = client.post("/send-verification", json={"email": "a@b.com"})

        assert response.status_code == 409
        assert "[VERIFICATION]" not in caplog.text

    def test_plus_address_survives_link(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        """'+' in the address must not turn into a space on the way back."""
        with caplog.at_level(logging.INFO):
            client.post("/send-verification", json={"email": "user+tag@example.com"})

        link = urlparse(sent_link(caplog))
        client.get(f"{link.path}?{link.query}")

        response = client.get("/check-verification", params={"email": "user+tag@example.com"})
        assert response.json()["verified"] is True

    def test_record_persisted_to_file(self, client: TestClient, store_path: Path) -> None:
        client.get("/verify", params={"email": "a@b.com"})

        assert store_path.read_text(encoding="utf-8") == "a@b.com\n"

    def test_dispatch_failure_leaves_store_untouched(
        self, client: TestClient, store_path: Path
    ) -> None:
        app.state.dispatcher = SmtpNotificationDispatcher(None, None, None, None)

        response = client.post("/send-verification", json={"email": "a@b.com"})

        assert response.status_code == 500
        assert not store_path.exists()
        response = client.get("/check-verification", params={"email": "a@b.com"})
        assert response.json()["verified"] is False

    def test_storage_failure_returns_500(self, tmp_path: Path) -> None:
        # A directory in place of the file cannot be read
        app.state.store = FileVerificationStore(tmp_path)
        app.state.dispatcher = ConsoleNotificationDispatcher()
        client = TestClient(app)

        assert client.get("/check-verification", params={"email": "a@b.com"}).status_code == 500
        assert client.get("/verify", params={"email": "a@b.com"}).status_code == 500

    def test_undecodable_store_returns_json_500(self, store_path: Path) -> None:
        store_path.write_bytes(b"ok@x.com\n\xff\xfe\n")
        app.state.store = FileVerificationStore(store_path)
        app.state.dispatcher = ConsoleNotificationDispatcher()
        client = TestClient(app)

        response = client.get("/check-verification", params={"email": "a@b.com"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to check verification status"}
        assert client.get("/health").status_code == 503


class TestHostileEmails:
    """Values that would break the file format or mail headers."""

    @pytest.mark.parametrize("email", ["a@b.com\u2028x@y.com", "a@b.com\x85", "a\x00@b.com"])
    def test_send_rejected_as_bad_request(self, client: TestClient, email: str) -> None:
        response = client.post("/send-verification", json={"email": email})

        assert response.status_code == 400

    def test_nul_on_verify_is_bad_request(self, client: TestClient, store_path: Path) -> None:
        response = client.get("/verify", params={"email": "a\x00"})

        assert response.status_code == 400
        assert not store_path.exists()

    @pytest.mark.parametrize("email", ['"', "victim@x.com, spam@y.com"])
    def test_unsendable_address_is_dispatch_failure(self, client: TestClient, email: str) -> None:
        app.state.dispatcher = SmtpNotificationDispatcher(
            "smtp.example.com", 587, "noreply@example.com", "secret"
        )

        with patch("src.adapters.smtp.relay.smtplib.SMTP") as smtp_class:
            response = client.post("/send-verification", json={"email": email})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to send verification email"}
        smtp_class.assert_not_called()


class TestHealth:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_unhealthy_store_returns_503(self, tmp_path: Path) -> None:
        app.state.store = FileVerificationStore(tmp_path)
        client = TestClient(app)

        assert client.get("/health").status_code == 503


class TestCors:
    def test_preflight_from_frontend_origin(self, client: TestClient) -> None:
        response = client.options(
            "/send-verification",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_unknown_origin_not_allowed(self, client: TestClient) -> None:
        response = client.get(
            "/check-verification",
            params={"email": "a@b.com"},
            headers={"Origin": "http://evil.example.com"},
        )

        assert "access-control-allow-origin" not in response.headers
