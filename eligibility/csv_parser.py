"""
csv_parser.py - Tolerant CSV Parser
====================================
Turns the raw text of a sheet export into a list of records
(column name -> raw cell string).

Two grammars are supported:

- "quoted" (default): comma separated, double-quote escaping as produced by
  spreadsheet exports. A doubled quote inside a quoted field is a literal
  quote. Commas and newlines inside quotes belong to the value.
- "simple": one record per line, split on the delimiter, no quoting at all.

Neither grammar raises on malformed input. The worst case is a row with too
many or too few cells, which is absorbed when rows are aligned to the header.
"""

import re
from types import MappingProxyType
from typing import List, Mapping


Record = Mapping[str, str]

QUOTE = '"'

GRAMMARS = ("quoted", "simple")


# =============================================================================
# ROW SPLITTING
# =============================================================================

def split_rows(text: str, delimiter: str = ",") -> List[List[str]]:
    """
    Split CSV text into rows of cells, honouring double-quote escaping.

    Carriage returns are dropped wherever they appear, so CRLF and LF
    exports parse the same way. A final row without a trailing newline is
    still returned.

    Examples:
        split_rows('a,b\\n1,2')          -> [['a', 'b'], ['1', '2']]
        split_rows('a,"x, y"\\n')    -> [['a', 'x, y']]
    """
    rows: List[List[str]] = []
    current: List[str] = []
    value: List[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        char = text[i]

        if in_quotes:
            if char == QUOTE and i + 1 < n and text[i + 1] == QUOTE:
                value.append(QUOTE)
                i += 1
            elif char == QUOTE:
                in_quotes = False
            elif char != "\r":
                value.append(char)
        elif char == QUOTE:
            in_quotes = True
        elif char == delimiter:
            current.append("".join(value))
            value = []
        elif char == "\n":
            current.append("".join(value))
            rows.append(current)
            current = []
            value = []
        elif char != "\r":
            value.append(char)

        i += 1

    if value or current:
        current.append("".join(value))
        rows.append(current)

    return rows


def split_rows_simple(text: str, delimiter: str = ",") -> List[List[str]]:
    """
    Split text into rows without any quote handling.

    Lines may end in \\n, \\r\\n or \\r. Blank lines are dropped. A delimiter
    inside a value always splits it.
    """
    lines = re.split(r"\r\n|\r|\n", text)
    return [line.split(delimiter) for line in lines if line.strip()]


# =============================================================================
# RECORD BUILDING
# =============================================================================

def _is_blank_row(row: List[str]) -> bool:
    return all(not cell.strip() for cell in row)


def rows_to_records(rows: List[List[str]]) -> List[Record]:
    """
    Align rows to the header (the first non-blank row) and build records.

    - header cells are trimmed
    - rows where every cell is blank are skipped
    - short rows are padded with "" for the missing columns
    - cells beyond the header are ignored
    """
    start = 0
    while start < len(rows) and _is_blank_row(rows[start]):
        start += 1
    if start == len(rows):
        return []

    header = [h.strip() for h in rows[start]]

    records: List[Record] = []
    for row in rows[start + 1:]:
        if _is_blank_row(row):
            continue
        record = {
            key: (row[idx] if idx < len(row) else "")
            for idx, key in enumerate(header)
        }
        records.append(MappingProxyType(record))

    return records


def parse_records(text: str, delimiter: str = ",", grammar: str = "quoted") -> List[Record]:
    """
    Parse a sheet export into records.

    Args:
        text: The raw export body
        delimiter: Field separator (default: ",")
        grammar: "quoted" (default) or "simple"

    Returns:
        One read-only mapping per non-blank data row. Empty input gives [].

    Raises:
        ValueError: If grammar is not one of GRAMMARS
    """
    if grammar == "quoted":
        rows = split_rows(text, delimiter)
    elif grammar == "simple":
        rows = split_rows_simple(text, delimiter)
    else:
        raise ValueError(f"Unknown CSV grammar {grammar!r}, expected one of {GRAMMARS}")

    return rows_to_records(rows)
