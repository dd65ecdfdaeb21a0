"""
input_file.py - Batch Input Loader
===================================
Reads a list of email addresses to check from an Excel or CSV file, for
running many lookups in one go from the command line.

Supported Input Formats:
------------------------
- Excel files: .xlsx, .xls
- CSV files: .csv

Column Name Normalization:
--------------------------
The email column may be called "email", "Email Address", "E-mail",
"mail_address" and so on. All of these are normalized to "EMAIL" so the
rest of the code does not care how the file labels it.
"""

import re
import zipfile
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .errors import InputFileError


# =============================================================================
# COLUMN NAME NORMALIZATION
# =============================================================================

def normalize_header(header: str) -> str:
    """
    Standardize a column name by removing spaces, underscores and hyphens
    and converting to uppercase.

    Examples:
        normalize_header("Email Address") -> "EMAILADDRESS"
        normalize_header("e-mail")        -> "EMAIL"
        normalize_header("mail_address")  -> "MAILADDRESS"
    """
    normalized = re.sub(r'[\s_\-]+', '', header)
    return normalized.strip().upper()


# Normalized header -> canonical column name
COLUMN_MAP = {
    'EMAIL': 'EMAIL',
    'EMAILADDRESS': 'EMAIL',
    'MAIL': 'EMAIL',
    'MAILADDRESS': 'EMAIL',
}

SUPPORTED_SUFFIXES = ('.csv', '.xlsx', '.xls')


# =============================================================================
# MAIN DATA LOADER
# =============================================================================

def load_input_emails(filepath: str, header_row: int = 0) -> List[Dict[str, Any]]:
    """
    Load the rows of a batch input file.

    Args:
        filepath: Path to the input file (.xlsx, .xls, or .csv)
        header_row: Which row contains column headers in Excel files (0-indexed)

    Returns:
        One dict per non-empty row, with an 'InputRow' number (1-based) and
        an 'EMAIL' column. Other columns are kept under their normalized names.
        Example: [
            {'InputRow': 1, 'EMAIL': 'a@b.com', 'NAME': 'Alice'},
            {'InputRow': 2, 'EMAIL': 'c@d.com', 'NAME': 'Bob'},
        ]

    Raises:
        FileNotFoundError: If the input file doesn't exist
        InputFileError: If the file type is unsupported or no email column exists
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {filepath}")

    suffix = path.suffix.lower()

    if suffix not in SUPPORTED_SUFFIXES:
        raise InputFileError(
            f"Unsupported file type: {path.suffix}. "
            f"Only {', '.join(SUPPORTED_SUFFIXES)} files are supported."
        )

    # Everything is read as text so pandas never turns cells into floats/NaN.
    # pandas reports empty or unreadable files as ValueError subclasses.
    try:
        if suffix == '.csv':
            df = pd.read_csv(path, dtype=str, skip_blank_lines=True)
        else:
            df = pd.read_excel(path, header=header_row, dtype=str)
    except (ValueError, zipfile.BadZipFile) as e:
        raise InputFileError(f"Could not read {path.name}: {e}") from e

    df.dropna(how='all', inplace=True)

    # Map original column names to canonical names; the first column that
    # claims a canonical name keeps it
    renamed = {}
    for col in df.columns:
        final_name = COLUMN_MAP.get(normalize_header(str(col)), normalize_header(str(col)))
        if final_name not in renamed.values():
            renamed[col] = final_name

    df = df[list(renamed)].rename(columns=renamed)

    if 'EMAIL' not in df.columns:
        raise InputFileError(
            "Required column missing: EMAIL. "
            f"Available columns after normalization: {list(df.columns)}"
        )

    df = df.fillna('')
    df.insert(0, 'InputRow', range(1, len(df) + 1))

    return df.to_dict('records')
