from __future__ import annotations

import pytest
import requests

from eligibility.errors import TransportError
from eligibility.http_client import NO_CACHE_HEADERS, HttpClient

from .conftest import SHEET_URL, FakeResponse, FakeSession


def test_get_text_returns_body(client: HttpClient, session: FakeSession):
    text = client.get_text(SHEET_URL)
    assert text.startswith("email,")
    assert len(session.calls) == 1
    assert session.calls[0]["url"] == SHEET_URL


def test_every_request_bypasses_caches(client: HttpClient, session: FakeSession):
    client.get_text(SHEET_URL)
    sent = session.calls[0]["headers"]
    assert sent["Cache-Control"] == NO_CACHE_HEADERS["Cache-Control"]
    assert "no-store" in sent["Cache-Control"]
    assert sent["Pragma"] == "no-cache"
    assert "Authorization" not in session.headers


def test_timeout_from_settings(client: HttpClient, session: FakeSession):
    client.get_text(SHEET_URL)
    assert session.calls[0]["timeout"] == 5


def test_non_success_status(settings):
    session = FakeSession(response=FakeResponse(status_code=404, text="Not Found"))
    client = HttpClient(settings, session=session)
    with pytest.raises(TransportError) as e:
        client.get_text(SHEET_URL)
    assert e.value.status_code == 404
    assert e.value.url == SHEET_URL
    assert "404" in str(e.value)


def test_network_error(settings, failing_session: FakeSession):
    client = HttpClient(settings, session=failing_session)
    with pytest.raises(TransportError) as e:
        client.get_text(SHEET_URL)
    assert e.value.status_code == 0
    assert isinstance(e.value.__cause__, requests.ConnectionError)


def test_no_retry_on_failure(settings):
    session = FakeSession(response=FakeResponse(status_code=503, text="busy"))
    client = HttpClient(settings, session=session)
    with pytest.raises(TransportError):
        client.get_text(SHEET_URL)
    assert len(session.calls) == 1


def test_missing_charset_decoded_as_utf8(settings):
    response = FakeResponse(text="email\n", encoding="ISO-8859-1")
    client = HttpClient(settings, session=FakeSession(response=response))
    client.get_text(SHEET_URL)
    assert response.encoding == "utf-8"


def test_close(client: HttpClient, session: FakeSession):
    client.close()
    assert session.closed is True
