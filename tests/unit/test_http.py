from __future__ import annotations

import pytest
import requests

from kodepos.common.errors import FetchFailure
from kodepos.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


def test_http_get_text_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, "<html></html>"))
    assert client.get_text("https://example.com") == "<html></html>"


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503))

    with pytest.raises(RetryableHttpError):
        client.get_text("https://example.com")


def test_http_client_error_is_a_fetch_failure(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(404))

    with pytest.raises(HttpRequestError) as excinfo:
        client.get_text("https://example.com")
    assert isinstance(excinfo.value, FetchFailure)
    assert not isinstance(excinfo.value, RetryableHttpError)


def test_http_transport_failure_is_retried_then_raised(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=2, multiplier=0.0, max_wait=0.0))
    attempts = []

    def _boom(**_kwargs):
        attempts.append(1)
        raise requests.ConnectionError("connection reset")

    monkeypatch.setattr(client.session, "request", _boom)

    with pytest.raises(RetryableHttpError):
        client.get_text("https://example.com")
    assert len(attempts) == 2


def test_http_retry_recovers_after_transient_status(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0.0))
    responses = iter([FakeResponse(502), FakeResponse(200, "ok")])
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: next(responses))

    assert client.get_text("https://example.com") == "ok"
