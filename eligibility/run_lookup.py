"""
run_lookup.py - Command Line Entry Point
=========================================
Looks up one or more email addresses in the published eligibility sheet and
shows which allowlists each one is on.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Downloads the eligibility sheet (once, on the first lookup)
3. Looks up each email and prints a ⭕ / ❌ status line per allowlist
4. In batch mode, writes the results to a CSV file

Usage:
------
    python -m eligibility.run_lookup someone@example.com
    python -m eligibility.run_lookup a@example.com b@example.com --debug
    python -m eligibility.run_lookup --input emails.xlsx --output-dir reports
    python -m eligibility.run_lookup            (prompts for emails until EOF)

Exit Codes:
-----------
    0 : all lookups ran (found or not found)
    1 : configuration or input file error
    2 : the eligibility sheet could not be loaded
"""

import sys
import logging
import csv
import argparse
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .coercion import FLAG_FIELDS
from .config import load_settings
from .errors import EligibilityError
from .http_client import HttpClient
from .input_file import load_input_emails
from .loader import DatasetLoader, LoadEvent, LoadState
from .lookup import FlagStatus, LookupOutcome, LookupResult, LookupService, flag_statuses


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LOG_LEVEL = logging.INFO

OUTPUT_DIR = "out"

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_LOAD_FAILED = 2

# Display names for each flag, in sheet column order
FLAG_LABELS = {
    "memoon_first1000": "MeMoon First 1000",
    "memoon_1000plus": "MeMoon 1000+",
    "charge_al": "Charge AL",
    "nft_collab_al": "NFT Collab AL",
    "guild_mission_al": "Guild Mission AL",
    "greeting_tap_al": "Greeting Tap AL",
}

PILLS = {
    FlagStatus.ELIGIBLE: ("⭕", "eligible"),
    FlagStatus.NOT_ELIGIBLE: ("❌", "not eligible"),
    FlagStatus.NOT_SEARCHED: ("—", "not searched"),
}


logger = logging.getLogger(__name__)


# =============================================================================
# RENDERING
# =============================================================================

def render_result(result: Optional[LookupResult]) -> str:
    """
    Format a lookup result as a block of status lines.

    Example:
        Email : a@b.com
        Status: Found. Check each item's ⭕ / ❌ below.
          ⭕ eligible       MeMoon First 1000
          ❌ not eligible   MeMoon 1000+
          ...
    """
    lines = [
        f"Email : {(result.query if result else '') or '—'}",
        f"Status: {result.message if result else 'Not searched yet.'}",
    ]
    for name, status in flag_statuses(result).items():
        icon, text = PILLS[status]
        lines.append(f"  {icon} {text:<14} {FLAG_LABELS[name]}")
    return "\n".join(lines)


def log_load_event(event: LoadEvent):
    """Loader listener that reports sheet loading progress through logging."""
    if event.state is LoadState.FAILED:
        logger.error(f"{event.message} ({event.error})")
    else:
        logger.info(event.message)


# =============================================================================
# OUTPUT FUNCTIONS
# =============================================================================

def result_to_row(input_row: Optional[Dict[str, Any]], result: LookupResult) -> Dict[str, Any]:
    """Flatten one lookup into a results CSV row."""
    row = {
        "InputRow": input_row.get("InputRow") if input_row else None,
        "Email": result.query,
        "Outcome": result.outcome.value,
    }
    for name, status in flag_statuses(result).items():
        row[name] = "" if status is FlagStatus.NOT_SEARCHED else status is FlagStatus.ELIGIBLE
    row["Note"] = result.error or result.message
    row["CheckedAt"] = datetime.now().isoformat()
    return row


def write_results_to_csv(results: List[Dict[str, Any]], output_path: Path):
    """
    Write batch lookup results to a CSV file.

    Args:
        results: Rows built by result_to_row()
        output_path: Path where the CSV file should be written
    """
    if not results:
        logger.warning("No results to write")
        return

    fieldnames = ["InputRow", "Email", "Outcome", *FLAG_FIELDS, "Note", "CheckedAt"]

    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(results)

    logger.info(f"Results written to {output_path.resolve()}")


# =============================================================================
# COMMAND LINE ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Namespace object with the parsed arguments:
        - emails: Email addresses given on the command line
        - input: Optional batch input file
        - output_dir: Directory for the batch results CSV
        - env_file: Optional .env file to load settings from
        - debug: Boolean, if True enable debug logging
    """
    parser = argparse.ArgumentParser(
        description='Look up allowlist eligibility by email address',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m eligibility.run_lookup someone@example.com
  python -m eligibility.run_lookup --input emails.xlsx --output-dir reports
        """
    )

    parser.add_argument(
        'emails',
        nargs='*',
        help='Email addresses to look up (prompts interactively when omitted)'
    )

    parser.add_argument(
        '--input',
        help='Excel (.xlsx, .xls) or CSV file with an email column to check in bulk'
    )

    parser.add_argument(
        '--output-dir',
        default=OUTPUT_DIR,
        help=f'Directory for the batch results CSV (default: {OUTPUT_DIR})'
    )

    parser.add_argument(
        '--env-file',
        type=Path,
        help='Read settings from this .env file instead of the project root one'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


# =============================================================================
# MAIN EXECUTION FUNCTIONS
# =============================================================================

def _interactive_emails():
    while True:
        try:
            line = input("Email address (Ctrl+D to quit): ")
        except EOFError:
            return
        yield line


def _run_batch(service: LookupService, args, header_row: int) -> bool:
    logger.info(f"Loading emails from {args.input}...")
    input_rows = load_input_emails(args.input, header_row)
    logger.info(f"Loaded {len(input_rows)} rows")

    # Load once up front so a dead sheet is not re-requested for every row
    if not service.loader.ensure_loaded():
        logger.error("Batch aborted, no results written")
        return False

    results = []
    for row in input_rows:
        result = service.find(row.get("EMAIL"))
        results.append(result_to_row(row, result))

    found = sum(1 for r in results if r["Outcome"] == LookupOutcome.MATCHED.value)
    missing = sum(1 for r in results if r["Outcome"] == LookupOutcome.NOT_FOUND.value)
    logger.info("-" * 50)
    logger.info(f"Total Rows: {len(results)}")
    logger.info(f"Found: {found}")
    logger.info(f"Not registered: {missing}")
    logger.info(f"Blank or failed: {len(results) - found - missing}")
    logger.info("-" * 50)

    output_path = Path(args.output_dir) / f"lookup_{datetime.now():%Y%m%d_%H%M%S}.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    write_results_to_csv(results, output_path)
    return True


def run_lookup(argv: Optional[List[str]] = None, session: Optional[requests.Session] = None) -> int:
    """
    Main execution logic for the lookup CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        session: Optional HTTP session to use instead of a new requests.Session

    Returns:
        The process exit code (see module docstring)
    """
    args = parse_arguments(argv)

    logging.basicConfig(
        level=LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    client = None

    try:
        settings = load_settings(args.env_file)
        logger.debug(f"Sheet URL: {settings.sheet_csv_url}")

        client = HttpClient(settings, session=session)
        loader = DatasetLoader(client, settings.sheet_csv_url, listeners=[log_load_event])
        service = LookupService(loader)

        if args.input:
            ok = _run_batch(service, args, settings.excel_header_row)
            return EXIT_OK if ok else EXIT_LOAD_FAILED

        emails = args.emails or _interactive_emails()
        load_failed = False
        for email in emails:
            result = service.find(email)
            print(render_result(result))
            print()
            load_failed = load_failed or result.outcome is LookupOutcome.LOAD_ERROR

        return EXIT_LOAD_FAILED if load_failed else EXIT_OK

    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return EXIT_OK

    except (EligibilityError, FileNotFoundError) as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL

    finally:
        if client:
            client.close()


def main():
    sys.exit(run_lookup())


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    main()
