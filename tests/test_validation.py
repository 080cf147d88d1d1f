"""Tests for local contact checks and the remote phone number verification client."""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import Mock

import pytest
import requests

from rolodex.domain import ConfigError, ExternalValidationError
from rolodex.infrastructure import ContactValidator, PhoneNumberVerifier, build_retrying_session

GERMAN = 491701234567
NOT_GERMAN = 1234567890


# --- local checks ---


def test_name_invalid_polarity():
    assert ContactValidator.is_name_invalid("") is True
    assert ContactValidator.is_name_invalid("x" * 256) is True
    assert ContactValidator.is_name_invalid("x" * 255) is False
    assert ContactValidator.is_name_invalid("Alice") is False


@pytest.mark.parametrize(
    "email",
    ["a.b+c@sub.example.com", "alice@example.de", "first_last@mail.co.uk", "Bob@Example.com"],
)
def test_email_accepted(email):
    assert ContactValidator.is_email_valid(email) is True


@pytest.mark.parametrize(
    "email",
    ["not-an-email", "", "@example.com", ".a@example.com", "a.@example.com", "a@example", "a@example.c0m", "a@b.com extra"],
)
def test_email_rejected(email):
    assert ContactValidator.is_email_valid(email) is False


def test_phone_fallback_regex():
    assert ContactValidator.is_phone_no_valid_fallback(491701234567) is True
    assert ContactValidator.is_phone_no_valid_fallback(49170123456) is True
    assert ContactValidator.is_phone_no_valid_fallback(1234567890) is False
    assert ContactValidator.is_phone_no_valid_fallback(4917012345) is False
    assert ContactValidator.is_phone_no_valid_fallback(4917012345678) is False
    assert ContactValidator.is_phone_no_valid_fallback(1491701234567) is False


def test_phone_check_skipped_without_verifier():
    assert ContactValidator().is_phone_no_valid(NOT_GERMAN) is True


def test_phone_check_delegates_to_verifier():
    verifier = Mock()
    verifier.get_valid_phone_no.return_value = False
    assert ContactValidator(verifier).is_phone_no_valid(GERMAN) is False
    verifier.get_valid_phone_no.assert_called_once_with(GERMAN)


# --- remote verification (mocked session) ---


def _response(status_code: int, payload: dict | None = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.content = json.dumps(payload or {}).encode("utf-8")
    return response


def _verifier_returning(response) -> tuple[PhoneNumberVerifier, Mock]:
    session = Mock()
    if isinstance(response, Exception):
        session.get.side_effect = response
    else:
        session.get.return_value = response
    return PhoneNumberVerifier("test_api_key", base_url="https://verify.test/?number=", session=session), session


def test_request_carries_number_and_api_key():
    verifier, session = _verifier_returning(_response(200, {"valid": True, "country_code": "DE"}))
    verifier.get_valid_phone_no(GERMAN)

    args, kwargs = session.get.call_args
    assert args[0] == f"https://verify.test/?number={GERMAN}"
    assert kwargs["headers"] == {"apikey": "test_api_key"}
    assert kwargs["timeout"] is not None


def test_valid_german_number():
    verifier, _ = _verifier_returning(
        _response(200, {"valid": True, "country_code": "DE", "carrier": "Telekom", "line_type": "mobile"})
    )
    assert verifier.get_valid_phone_no(GERMAN) is True


@pytest.mark.parametrize(
    "payload",
    [{"valid": True, "country_code": "US"}, {"valid": False, "country_code": "DE"}],
)
def test_remote_rejection(payload):
    verifier, _ = _verifier_returning(_response(200, payload))
    assert verifier.get_valid_phone_no(GERMAN) is False


def test_client_error_is_raised_even_if_fallback_would_accept():
    verifier, _ = _verifier_returning(_response(401))
    with pytest.raises(ExternalValidationError) as exc_info:
        verifier.get_valid_phone_no(GERMAN)
    assert exc_info.value.status_code == 401
    assert "401" in str(exc_info.value)


@pytest.mark.parametrize(("number", "expected"), [(GERMAN, True), (NOT_GERMAN, False)])
def test_server_error_falls_back_to_local_check(number, expected):
    verifier, _ = _verifier_returning(_response(503))
    assert verifier.get_valid_phone_no(number) is expected


def test_unreachable_service_falls_back_to_local_check():
    verifier, _ = _verifier_returning(requests.ConnectionError("connection refused"))
    assert verifier.get_valid_phone_no(GERMAN) is True
    verifier, _ = _verifier_returning(requests.ConnectionError("connection refused"))
    assert verifier.get_valid_phone_no(NOT_GERMAN) is False


def test_unusable_payload_is_an_error():
    verifier, _ = _verifier_returning(_response(200, {"number": "491701234567"}))
    with pytest.raises(ExternalValidationError):
        verifier.get_valid_phone_no(GERMAN)


def test_empty_api_key_is_rejected():
    with pytest.raises(ConfigError):
        PhoneNumberVerifier("")


def test_from_env(monkeypatch):
    monkeypatch.delenv("APILAYER_KEY", raising=False)
    with pytest.raises(ConfigError):
        PhoneNumberVerifier.from_env()
    monkeypatch.setenv("APILAYER_KEY", "k")
    assert isinstance(PhoneNumberVerifier.from_env(), PhoneNumberVerifier)


# --- retry policy (real HTTP against a local server) ---


class _StubHandler(BaseHTTPRequestHandler):
    status = 200
    body = b"{}"
    hits = 0
    retry_after = None

    def do_GET(self):
        type(self).hits += 1
        self.send_response(self.status)
        if self.retry_after is not None:
            self.send_header("Retry-After", self.retry_after)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def stub_server():
    handler = type("Handler", (_StubHandler,), {"hits": 0})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server, handler
    finally:
        server.shutdown()
        server.server_close()


def _live_verifier(server) -> PhoneNumberVerifier:
    host, port = server.server_address
    return PhoneNumberVerifier(
        "test_api_key",
        base_url=f"http://{host}:{port}/validate?number=",
        session=build_retrying_session(backoff_factor=0),
    )


def test_server_errors_are_retried_three_times_then_fall_back(stub_server):
    server, handler = stub_server
    handler.status = 503

    assert _live_verifier(server).get_valid_phone_no(GERMAN) is True
    assert handler.hits == 4


def test_retry_after_header_does_not_stretch_the_backoff(stub_server):
    server, handler = stub_server
    handler.status = 503
    handler.retry_after = "3"

    started = time.monotonic()
    assert _live_verifier(server).get_valid_phone_no(GERMAN) is True
    assert time.monotonic() - started < 2
    assert handler.hits == 4


def test_client_errors_are_not_retried(stub_server):
    server, handler = stub_server
    handler.status = 403

    with pytest.raises(ExternalValidationError):
        _live_verifier(server).get_valid_phone_no(GERMAN)
    assert handler.hits == 1


def test_success_is_not_retried(stub_server):
    server, handler = stub_server
    handler.body = json.dumps({"valid": True, "country_code": "DE"}).encode("utf-8")

    assert _live_verifier(server).get_valid_phone_no(GERMAN) is True
    assert handler.hits == 1
