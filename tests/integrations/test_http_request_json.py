from __future__ import annotations

from typing import Any

import pytest
import requests

from movie_catalog.integrations.http import UpstreamClientError, request_json
from movie_catalog.integrations.tmdb.client import TmdbClientError


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, *, text: str = "", headers: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = headers or {}

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any] | None, float]] = []

    def get(self, url: str, *, params=None, headers=None, timeout=None):  # noqa: ANN001
        self.calls.append((url, dict(params) if params else None, timeout))
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def test_request_json_returns_payload_and_passes_timeout() -> None:
    session = _FakeSession([_FakeResponse(200, {"ok": True})])

    payload = request_json(session, "https://example.test/x", params={"a": 1}, service="Test", timeout_seconds=7.5)

    assert payload == {"ok": True}
    assert session.calls == [("https://example.test/x", {"a": 1}, 7.5)]


def test_request_json_fails_once_by_default_on_server_error() -> None:
    session = _FakeSession([_FakeResponse(503, text="unavailable"), _FakeResponse(200, {"ok": True})])

    with pytest.raises(TmdbClientError) as excinfo:
        request_json(session, "https://example.test/x", service="TMDb", error_cls=TmdbClientError)

    assert excinfo.value.status_code == 503
    assert excinfo.value.body_snippet == "unavailable"
    assert len(session.calls) == 1


def test_request_json_retries_retryable_statuses_when_enabled() -> None:
    sleeps: list[float] = []
    session = _FakeSession(
        [
            _FakeResponse(429, headers={"Retry-After": "3"}),
            requests.ConnectionError("reset by peer"),
            _FakeResponse(200, {"ok": True}),
        ]
    )

    payload = request_json(session, "https://example.test/x", service="TMDb", max_attempts=3, sleep=sleeps.append)

    assert payload == {"ok": True}
    assert len(session.calls) == 3
    assert len(sleeps) == 2
    assert sleeps[0] >= 3.0


def test_request_json_does_not_retry_client_errors() -> None:
    sleeps: list[float] = []
    session = _FakeSession([_FakeResponse(404, text="missing"), _FakeResponse(200, {"ok": True})])

    with pytest.raises(UpstreamClientError) as excinfo:
        request_json(session, "https://example.test/x", service="TMDb", max_attempts=3, sleep=sleeps.append)

    assert excinfo.value.status_code == 404
    assert sleeps == []
    assert len(session.calls) == 1


def test_request_json_wraps_transport_errors() -> None:
    session = _FakeSession([requests.Timeout("timed out")])

    with pytest.raises(UpstreamClientError, match="timed out"):
        request_json(session, "https://example.test/x", service="OMDb")


def test_request_json_rejects_non_json_and_non_object_bodies() -> None:
    session = _FakeSession([_FakeResponse(200, ValueError("bad json"), text="<html>")])
    with pytest.raises(UpstreamClientError, match="non-JSON"):
        request_json(session, "https://example.test/x", service="OMDb")

    session = _FakeSession([_FakeResponse(200, [1, 2, 3])])
    with pytest.raises(UpstreamClientError, match="not an object"):
        request_json(session, "https://example.test/x", service="OMDb")
