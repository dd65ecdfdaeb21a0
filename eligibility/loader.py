"""
loader.py - Eligibility Sheet Loader
=====================================
This module downloads the published eligibility sheet, parses it and keeps
the resulting entries in memory for the lifetime of the process.

Load States:
------------
    UNINITIALIZED --> LOADING --> LOADED   (kept until reload())
                          |
                          +-----> FAILED   (the next ensure_loaded() tries again)

Only one download runs at a time. A caller that asks for the sheet while a
download is in progress waits for that download instead of starting another
one, and then sees its result.

Observers:
----------
Listeners registered on the loader receive a LoadEvent for every state
change, with a message suitable for showing to the person searching.
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .coercion import EligibilityEntry, coerce_record
from .csv_parser import parse_records
from .errors import DatasetLoadError
from .http_client import HttpClient


logger = logging.getLogger(__name__)


Dataset = Tuple[EligibilityEntry, ...]


# =============================================================================
# LOAD STATE AND EVENTS
# =============================================================================

class LoadState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


# Human-readable status lines for each state change
STATUS_MESSAGES = {
    LoadState.LOADING: "Loading the eligibility sheet…",
    LoadState.LOADED: "Eligibility sheet loaded. Enter an email address to search.",
    LoadState.FAILED: (
        "Failed to load the eligibility sheet. "
        "Check the URL and its publishing settings."
    ),
}


@dataclass(frozen=True)
class LoadEvent:
    """A state change reported to listeners."""

    state: LoadState
    message: str
    error: Optional[Exception] = None


Listener = Callable[[LoadEvent], None]


# =============================================================================
# DATASET LOADER CLASS
# =============================================================================

class DatasetLoader:
    """
    Owns the in-memory copy of the eligibility sheet.

    Usage:
        loader = DatasetLoader(client, settings.sheet_csv_url)
        if loader.ensure_loaded():
            entries = loader.dataset

    The loader is safe to share between threads. The dataset is replaced in a
    single assignment, so readers never observe a half-built list.
    """

    def __init__(
        self,
        client: HttpClient,
        url: str,
        listeners: Iterable[Listener] = (),
        grammar: str = "quoted",
    ):
        """
        Args:
            client: HTTP client used to download the export
            url: Published CSV export URL
            listeners: Callables receiving a LoadEvent on each state change
            grammar: CSV grammar passed to parse_records ("quoted" or "simple")
        """
        self.client = client
        self.url = url
        self.grammar = grammar
        self._listeners: List[Listener] = list(listeners)

        self._lock = threading.Lock()
        self._state = LoadState.UNINITIALIZED
        self._dataset: Optional[Dataset] = None
        self._last_error: Optional[DatasetLoadError] = None
        self._pending: Optional[Future] = None

    # -------------------------------------------------------------------------
    # READ-ONLY STATE
    # -------------------------------------------------------------------------

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def dataset(self) -> Optional[Dataset]:
        """The loaded entries, or None if nothing has been loaded yet."""
        return self._dataset

    @property
    def last_error(self) -> Optional[DatasetLoadError]:
        """The error from the most recent failed load, cleared on success."""
        return self._last_error

    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    # -------------------------------------------------------------------------
    # LOADING
    # -------------------------------------------------------------------------

    def ensure_loaded(self) -> bool:
        """
        Make sure the sheet is in memory, downloading it if needed.

        - Already loaded: returns True without any network access.
        - Download in progress: waits for it and returns its outcome.
        - Otherwise: downloads, parses and stores the sheet.

        Returns:
            True if a dataset is available, False if the load failed.
            Failures are reported to listeners and kept in last_error.
        """
        with self._lock:
            if self._dataset is not None:
                return True
        return self._load(force=False)

    def reload(self) -> bool:
        """
        Download the sheet again even if it is already loaded.

        If the download fails, the previously loaded entries stay in place.
        """
        return self._load(force=True)

    def _load(self, force: bool) -> bool:
        with self._lock:
            pending = self._pending
            if pending is None:
                if self._dataset is not None and not force:
                    return True
                pending = self._pending = Future()
                self._state = LoadState.LOADING
                owner = True
            else:
                owner = False

        if not owner:
            logger.debug("Sheet download already in progress, waiting for it")
            pending.result()
            return self._dataset is not None

        try:
            self._notify(LoadEvent(LoadState.LOADING, STATUS_MESSAGES[LoadState.LOADING]))
            self._run_load()
        finally:
            with self._lock:
                self._pending = None
                # Anything unexpected that escaped _run_load
                if self._state is LoadState.LOADING:
                    self._state = LoadState.LOADED if self._dataset is not None else LoadState.FAILED
            pending.set_result(self._dataset is not None)

        return self._dataset is not None

    def _run_load(self):
        try:
            dataset = self._fetch_dataset()
        except Exception as e:
            error = DatasetLoadError(f"Could not load eligibility sheet: {e}")
            error.__cause__ = e
            logger.error(f"Sheet load failed: {e}")
            with self._lock:
                self._last_error = error
                # A failed reload keeps serving the previous entries
                self._state = LoadState.LOADED if self._dataset is not None else LoadState.FAILED
            self._notify(LoadEvent(LoadState.FAILED, STATUS_MESSAGES[LoadState.FAILED], error))
            return

        with self._lock:
            self._dataset = dataset
            self._last_error = None
            self._state = LoadState.LOADED
        logger.info(f"Loaded {len(dataset)} entries from the eligibility sheet")
        self._notify(LoadEvent(LoadState.LOADED, STATUS_MESSAGES[LoadState.LOADED]))

    def _fetch_dataset(self) -> Dataset:
        text = self.client.get_text(self.url)
        records = parse_records(text, grammar=self.grammar)
        logger.debug(f"Parsed {len(records)} records")
        return tuple(coerce_record(record) for record in records)

    # -------------------------------------------------------------------------
    # NOTIFICATIONS
    # -------------------------------------------------------------------------

    def _notify(self, event: LoadEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken status display must not break the load itself
                logger.exception(f"Load listener {listener!r} failed on {event.state.value}")
