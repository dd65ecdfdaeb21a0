# Shared pytest fixtures
from __future__ import annotations

import os
import threading

import pytest
import requests

from eligibility.config import Settings
from eligibility.http_client import HttpClient


SHEET_URL = "https://sheets.example.test/export?format=csv"

SHEET_CSV = (
    "email,MeMoon_First1000,MeMoon_1000Plus,ChargeAL,NFTCollabAL,GuildMissionAL,GreetingTapAL\r\n"
    "a@b.com,TRUE,FALSE,yes,0,⭕,\r\n"
    " C@D.com ,no,1,FALSE,✖,○,maybe\r\n"
    ",,,,,,\r\n"
    "a@b.com,FALSE,FALSE,FALSE,FALSE,FALSE,FALSE\r\n"
)


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", encoding: str | None = "utf-8"):
        self.status_code = status_code
        self.text = text
        self.encoding = encoding


class FakeSession:
    """Stands in for requests.Session; records every GET."""

    def __init__(self, response: FakeResponse | None = None, exc: Exception | None = None):
        self.headers: dict[str, str] = {}
        self.response = response or FakeResponse(text=SHEET_CSV)
        self.exc = exc
        self.calls: list[dict] = []
        self.closed = False
        # When set, get() blocks until gate is released
        self.gate: threading.Event | None = None
        self.started = threading.Event()

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env():
    # load_dotenv writes straight into os.environ, so restore by hand
    saved = {k: v for k, v in os.environ.items() if k.startswith("ELIG_")}
    for k in saved:
        del os.environ[k]
    yield
    for k in [k for k in os.environ if k.startswith("ELIG_")]:
        del os.environ[k]
    os.environ.update(saved)


@pytest.fixture(autouse=True)
def no_project_env_file(monkeypatch, tmp_path):
    # Settings must never come from a developer's real project .env
    monkeypatch.setattr("eligibility.config.DEFAULT_ENV_FILE", tmp_path / "absent.env")


@pytest.fixture()
def settings() -> Settings:
    return Settings(sheet_csv_url=SHEET_URL, timeout_sec=5)


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def failing_session() -> FakeSession:
    return FakeSession(exc=requests.ConnectionError("connection refused"))


@pytest.fixture()
def client(settings: Settings, session: FakeSession) -> HttpClient:
    return HttpClient(settings, session=session)
