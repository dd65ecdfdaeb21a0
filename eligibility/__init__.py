"""
eligibility - Allowlist Eligibility Lookup
===========================================

A Python package for checking which allowlists an email address is on,
using a spreadsheet published on the web as CSV.

Modules:
--------
- config.py      : Configuration management (loads settings from .env)
- http_client.py : HTTP client that downloads the published sheet
- csv_parser.py  : Tolerant CSV parsing into records
- coercion.py    : Email normalization and flag cell coercion
- loader.py      : Downloads and caches the sheet, reports load progress
- lookup.py      : Email lookup and per-flag status
- input_file.py  : Batch input loading (Excel/CSV with column normalization)
- run_lookup.py  : Command line entry point

Usage:
------
    python -m eligibility.run_lookup someone@example.com
    python -m eligibility.run_lookup --input emails.xlsx
    python -m eligibility.run_lookup --debug

Workflow:
---------
1. Load configuration from .env file
2. Download the sheet export on the first lookup and keep it in memory
3. Normalize the email (trim, lowercase) and find the first matching row
4. Report ⭕ / ❌ for each allowlist, or write batch results to CSV
"""
