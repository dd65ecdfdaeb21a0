"""
lookup.py - Email Lookup
=========================
Answers "which allowlists is this email on?" against the loaded sheet.

Every lookup ends in exactly one LookupOutcome:

- MATCHED        : the email is in the sheet; result.entry holds its flags
- NOT_FOUND      : the sheet loaded but the email is not in it
- INVALID_QUERY  : the email was blank; nothing was loaded or fetched
- LOAD_ERROR     : the sheet could not be loaded

Per-flag display uses a third state, NOT_SEARCHED, so a status display can
tell "not searched yet" apart from "searched, not eligible".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .coercion import FLAG_FIELDS, EligibilityEntry, normalize_email
from .loader import DatasetLoader


logger = logging.getLogger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================

class LookupOutcome(Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"
    INVALID_QUERY = "invalid_query"
    LOAD_ERROR = "load_error"


OUTCOME_MESSAGES = {
    LookupOutcome.MATCHED: "Found. Check each item's ⭕ / ❌ below.",
    LookupOutcome.NOT_FOUND: "This email address is not registered in the sheet.",
    LookupOutcome.INVALID_QUERY: "Please enter an email address.",
    LookupOutcome.LOAD_ERROR: "The eligibility sheet is unavailable right now.",
}


@dataclass(frozen=True)
class LookupResult:
    """The answer to one lookup."""

    outcome: LookupOutcome
    query: str
    entry: Optional[EligibilityEntry] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.outcome is LookupOutcome.MATCHED

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


class FlagStatus(Enum):
    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    NOT_SEARCHED = "not_searched"


def flag_statuses(result: Optional[LookupResult]) -> Dict[str, FlagStatus]:
    """
    Map every tracked flag to its display status.

    No result, a blank query or a load error -> NOT_SEARCHED for every flag.
    A miss -> NOT_ELIGIBLE for every flag. A match -> per the entry's flags.
    """
    if result is None or result.outcome in (LookupOutcome.INVALID_QUERY, LookupOutcome.LOAD_ERROR):
        return {name: FlagStatus.NOT_SEARCHED for name in FLAG_FIELDS}

    if result.entry is None:
        return {name: FlagStatus.NOT_ELIGIBLE for name in FLAG_FIELDS}

    return {
        name: FlagStatus.ELIGIBLE if value else FlagStatus.NOT_ELIGIBLE
        for name, value in result.entry.flags().items()
    }


# =============================================================================
# LOOKUP SERVICE
# =============================================================================

class LookupService:
    """
    Looks up emails in the sheet owned by a DatasetLoader.

    The service never modifies the loader's dataset and never raises for
    network or data problems; those come back as LOAD_ERROR.
    """

    def __init__(self, loader: DatasetLoader):
        self.loader = loader

    def find(self, email_raw: str | None) -> LookupResult:
        """
        Look up one email address.

        Args:
            email_raw: The email as typed (case and surrounding spaces ignored)

        Returns:
            A LookupResult; see LookupOutcome for the possible outcomes
        """
        query = email_raw or ""
        normalized = normalize_email(query)

        if not normalized:
            return LookupResult(LookupOutcome.INVALID_QUERY, query, error="Empty email address")

        if not self.loader.ensure_loaded():
            error = self.loader.last_error
            return LookupResult(
                LookupOutcome.LOAD_ERROR,
                query,
                error=str(error) if error else "Eligibility sheet not loaded",
            )

        # First row wins when the sheet lists an email more than once
        for entry in self.loader.dataset or ():
            if entry.email == normalized:
                logger.debug(f"Matched {normalized}")
                return LookupResult(LookupOutcome.MATCHED, query, entry=entry)

        logger.debug(f"No entry for {normalized}")
        return LookupResult(LookupOutcome.NOT_FOUND, query)
