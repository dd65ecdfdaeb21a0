"""
errors.py - Exception Types
============================
Every error raised by this package derives from EligibilityError, so callers
(the CLI, or anything embedding the lookup service) can catch one base class.

Lookup outcomes such as "not found" or "empty query" are NOT exceptions;
they are reported through LookupResult (see lookup.py).
"""


class EligibilityError(Exception):
    """Base class for all errors raised by the eligibility package."""


class ConfigError(EligibilityError):
    """A required setting is missing or invalid."""


class TransportError(EligibilityError):
    """
    The sheet export could not be fetched.

    Raised for network failures (status_code == 0) and for any response
    whose status is not 2xx.
    """

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DatasetLoadError(EligibilityError):
    """A dataset load failed (transport, parse or coercion failure)."""


class InputFileError(EligibilityError, ValueError):
    """A batch input file has an unsupported type or lacks an email column."""
