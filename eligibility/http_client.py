"""
http_client.py - HTTP Client for the Sheet Export
==================================================
This module handles all HTTP communication with the sheet host:
- Managing the HTTP session and headers
- Fetching the published CSV export as text
- Turning network failures and non-2xx responses into TransportError

Features:
---------
- Every request asks intermediate caches to bypass their copy
- No authentication (the sheet is published publicly)
- No automatic retry: a failed fetch is reported once, and the caller
  decides whether to try again
"""

import logging

import requests

from .config import Settings
from .errors import TransportError


logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST HEADERS
# =============================================================================
# Sent with every request. The sheet changes while people are looking it up,
# so a cached export must never be served.

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
    "Accept": "text/csv, text/plain;q=0.9, */*;q=0.1",
}


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class HttpClient:
    """
    HTTP client for downloading the published sheet.

    Usage:
        client = HttpClient(settings)
        text = client.get_text(settings.sheet_csv_url)
        client.close()

    A pre-built session can be passed in (tests use an in-memory fake).
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration object containing the timeout
            session: Optional session to use instead of a new requests.Session
        """
        self.settings = settings
        self.s = session if session is not None else requests.Session()
        self.timeout = settings.timeout_sec

    def get_text(self, url: str) -> str:
        """
        GET a URL and return the full response body as text.

        Args:
            url: Absolute URL of the CSV export

        Returns:
            The decoded response body

        Raises:
            TransportError: On a network error (status_code 0) or a non-2xx status
        """
        logger.debug(f"GET {url}")
        try:
            r = self.s.get(url, headers=NO_CACHE_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(
                f"Network error: {type(e).__name__}: {e}", url=url
            ) from e

        if not 200 <= r.status_code < 300:
            raise TransportError(
                f"HTTP {r.status_code} fetching sheet: {(r.text or '')[:200]}",
                url=url,
                status_code=r.status_code,
            )

        # Sheet exports are UTF-8 even when the server forgets to say so;
        # requests would otherwise fall back to ISO-8859-1 for text/*.
        if r.encoding is None or r.encoding.lower() == "iso-8859-1":
            r.encoding = "utf-8"

        body = r.text or ""
        logger.debug(f"Received {len(body)} characters from {url}")
        return body

    def close(self):
        """Close the HTTP session and release resources."""
        self.s.close()
