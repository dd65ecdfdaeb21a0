"""
coercion.py - Cell Value Coercion
==================================
Converts raw sheet cells into domain values:
- email addresses are trimmed and lowercased so lookups are case-insensitive
- flag cells ("TRUE", "1", "yes", "⭕", "×", ...) become booleans

Column Mapping:
---------------
The sheet columns are mapped to entry attributes by COLUMN_MAP. The mapping
is fixed: every entry gets the same flags whether or not a column exists in
the export. A missing column simply reads as "not eligible".
"""

from dataclasses import dataclass
from typing import Dict, Mapping


# =============================================================================
# COLUMN NAME MAPPING
# =============================================================================
# attribute name -> column header in the sheet export

EMAIL_FIELD = "email"

COLUMN_MAP = {
    EMAIL_FIELD: "email",
    "memoon_first1000": "MeMoon_First1000",
    "memoon_1000plus": "MeMoon_1000Plus",
    "charge_al": "ChargeAL",
    "nft_collab_al": "NFTCollabAL",
    "guild_mission_al": "GuildMissionAL",
    "greeting_tap_al": "GreetingTapAL",
}

FLAG_FIELDS = tuple(k for k in COLUMN_MAP if k != EMAIL_FIELD)


# =============================================================================
# BOOLEAN TOKENS AND SYMBOLS
# =============================================================================
# Exact (case-insensitive) tokens are checked first, then symbols anywhere in
# the cell. Anything else is False.

TRUE_TOKENS = frozenset({"true", "1", "yes"})
FALSE_TOKENS = frozenset({"false", "0", "no"})

TRUE_SYMBOLS = frozenset("◯○⭕◎")
FALSE_SYMBOLS = frozenset("×✕✖")


# =============================================================================
# ENTRY DATACLASS
# =============================================================================

@dataclass(frozen=True)
class EligibilityEntry:
    """One participant row with its eligibility flags."""

    email: str
    memoon_first1000: bool = False
    memoon_1000plus: bool = False
    charge_al: bool = False
    nft_collab_al: bool = False
    guild_mission_al: bool = False
    greeting_tap_al: bool = False

    def flags(self) -> Dict[str, bool]:
        """Return the flags in sheet column order."""
        return {name: getattr(self, name) for name in FLAG_FIELDS}


# =============================================================================
# NORMALIZATION FUNCTIONS
# =============================================================================

def normalize_email(value: str | None) -> str:
    """
    Normalize an email address for comparison.

    Examples:
        normalize_email(" A@B.com ")  -> "a@b.com"
        normalize_email("   ")        -> ""
        normalize_email(None)         -> ""
    """
    if not value:
        return ""
    return value.strip().lower()


def to_bool(value) -> bool:
    """
    Interpret a sheet cell as a yes/no flag.

    Precedence:
        1. blank                      -> False
        2. "true" / "1" / "yes"       -> True   (case-insensitive)
        3. "false" / "0" / "no"       -> False  (case-insensitive)
        4. contains ◯ ○ ⭕ ◎          -> True
        5. contains × ✕ ✖             -> False
        6. anything else              -> False

    Booleans pass through unchanged, so coercing twice is harmless.
    """
    if isinstance(value, bool):
        return value
    if not value:
        return False

    v = str(value).strip()
    lower = v.lower()

    if lower in TRUE_TOKENS:
        return True
    if lower in FALSE_TOKENS:
        return False

    if any(ch in TRUE_SYMBOLS for ch in v):
        return True
    if any(ch in FALSE_SYMBOLS for ch in v):
        return False

    return False


def coerce_record(record: Mapping[str, str], column_map: Mapping[str, str] = COLUMN_MAP) -> EligibilityEntry:
    """
    Build an EligibilityEntry from one parsed sheet record.

    Args:
        record: Column header -> raw cell text
        column_map: Attribute name -> column header (defaults to COLUMN_MAP)

    Returns:
        An entry with a normalized email and every flag set to a bool
    """
    values = {
        name: to_bool(record.get(column_map[name], ""))
        for name in FLAG_FIELDS
    }
    return EligibilityEntry(
        email=normalize_email(record.get(column_map[EMAIL_FIELD], "")),
        **values,
    )
