"""
config.py - Configuration Management
=====================================
This module loads configuration from environment variables. It reads
settings from a .env file in the project root and makes them available to
the rest of the application.

Environment Variables Used:
---------------------------
- ELIG_SHEET_CSV_URL    : (Required) The published CSV export URL of the eligibility sheet
- ELIG_TIMEOUT_SEC      : (Optional) Request timeout in seconds (default: 20, 0 = no timeout)
- ELIG_EXCEL_HEADER_ROW : (Optional) Which row contains headers in batch Excel files (default: 0)

Example .env file:
------------------
ELIG_SHEET_CSV_URL=https://docs.google.com/spreadsheets/d/<sheet-id>/gviz/tq?tqx=out:csv
ELIG_TIMEOUT_SEC=20
"""

from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv

from .errors import ConfigError


# The .env file lives in the project root (eligibility/ -> project root)
DEFAULT_ENV_FILE = Path(__file__).resolve().parents[1] / ".env"


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================

@dataclass
class Settings:
    """Container for all application configuration values."""

    # Required: Where the sheet is published as CSV
    sheet_csv_url: str

    # Optional: How long to wait for the sheet before giving up.
    # None means wait indefinitely.
    timeout_sec: float | None = 20

    # Optional: Which row in batch Excel files contains the column headers
    excel_header_row: int = 0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize an environment variable value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _int_setting(name: str, default: int) -> int:
    raw = _clean(os.getenv(name))
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings(env_file: Path | None = None) -> Settings:
    """
    Load application configuration from environment variables.

    Args:
        env_file: Optional path to a .env file. Defaults to the project root.

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        ConfigError: If ELIG_SHEET_CSV_URL is not set, or a numeric value is invalid
    """
    if env_file is None:
        env_file = DEFAULT_ENV_FILE

    # Existing environment variables win over the .env file
    load_dotenv(dotenv_path=env_file)

    url = _clean(os.getenv("ELIG_SHEET_CSV_URL"))

    if not url:
        raise ConfigError(
            "ELIG_SHEET_CSV_URL is not set in environment. "
            "Please add it to your .env file."
        )

    # "docs.google.com/..." -> "https://docs.google.com/..."
    if not url.startswith("http"):
        url = "https://" + url

    timeout = _int_setting("ELIG_TIMEOUT_SEC", 20)

    return Settings(
        sheet_csv_url=url,
        timeout_sec=timeout if timeout > 0 else None,
        excel_header_row=_int_setting("ELIG_EXCEL_HEADER_ROW", 0),
    )
