"""Roster Parser — turns uploaded CSV files and pasted spreadsheet text into name rows.

Invariants:
    - Pure: bytes/str in, RosterRow list out; no IO, no DB
    - Every cell is sanitized (trimmed, NUL bytes and HTML tags removed)
    - A row without both a first and a last name never reaches the importer
    - Header matching is case-insensitive

Three input shapes are accepted:
    - CSV upload: a proper CSV file with a header row (parsed with the csv module)
    - spreadsheet paste: header row required, tab or comma delimiter sniffed from it
    - loose paste: header optional, delimiter chosen per line (tab, then ';', then ',')
"""

import csv
import io
import re
from dataclasses import dataclass, field

from lmpg.core.errors import ValidationFailedError

_TAG_RE = re.compile(r"<[^>]*>")
_EDGE_QUOTES_RE = re.compile(r"^[\"']|[\"']$")

FIRST_NAME_KEYS = ("FIRST NAME", "First Name", "first_name")
LAST_NAME_KEYS = ("LAST NAME", "Last Name", "last_name")
FAMILY_NAME_KEYS = ("FAMILY NAME", "Family Name", "family_name")

TEMPLATE_CSV = (
    '"FIRST NAME","LAST NAME","FAMILY NAME"\n'
    '"John","Smith","SMITH, John and Jane"\n'
    '"Jane","Smith","SMITH, John and Jane"\n'
    '"Michael","Johnson","JOHNSON, Michael"'
)


@dataclass(frozen=True)
class RosterRow:
    first_name: str
    last_name: str
    family_name: str = ""


@dataclass
class ParsedRoster:
    rows: list[RosterRow] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)


def sanitize_cell(value: object) -> str:
    """Trim, drop NUL bytes and strip HTML tags. None becomes ''."""
    if value is None:
        return ""
    text = str(value).strip().replace("\0", "")
    return _TAG_RE.sub("", text).strip()


def _first_present(record: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return ""


# ─── CSV upload ──────────────────────────────────────────────────

def read_csv_records(content: bytes) -> list[dict]:
    """Decode an uploaded CSV (BOM tolerated) into header-keyed dicts."""
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(io.StringIO(text))
    return [
        {(k or "").strip(): v for k, v in record.items()}
        for record in reader
    ]


def roster_from_records(records: list[dict]) -> ParsedRoster:
    """Map CSV records to rows, collecting unusable records with a reason."""
    parsed = ParsedRoster()
    for record in records:
        first = sanitize_cell(_first_present(record, FIRST_NAME_KEYS))
        last = sanitize_cell(_first_present(record, LAST_NAME_KEYS))
        family = sanitize_cell(_first_present(record, FAMILY_NAME_KEYS))
        if not first or not last:
            parsed.skipped.append({
                "row": record,
                "reason": "Missing or invalid first or last name",
            })
            continue
        parsed.rows.append(RosterRow(first, last, family))
    return parsed


# ─── Spreadsheet paste (header required) ─────────────────────────

def detect_delimiter(header_line: str) -> str:
    """Tab when the header has more tabs than commas, otherwise comma."""
    if header_line.count("\t") > header_line.count(","):
        return "\t"
    return ","


def split_quoted(line: str, delimiter: str) -> list[str]:
    """Split one line on delimiter, treating text between double quotes as literal.

    Quote characters toggle the quoted state and are dropped; each value is trimmed.
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    values.append("".join(current).strip())
    return values


def _header_index(headers: list[str], *names: str) -> int:
    for i, header in enumerate(headers):
        if header.upper() in names:
            return i
    return -1


def parse_spreadsheet_paste(data: str) -> ParsedRoster:
    """Parse pasted CSV/TSV with a header row naming FIRST NAME and LAST NAME."""
    lines = data.strip().splitlines()
    if len(lines) < 2:
        raise ValidationFailedError(
            "Invalid data - must have headers and at least one row", "data",
        )

    delimiter = detect_delimiter(lines[0])
    headers = [h.strip().replace('"', "") for h in lines[0].split(delimiter)]
    first_idx = _header_index(headers, "FIRST NAME", "FIRSTNAME")
    last_idx = _header_index(headers, "LAST NAME", "LASTNAME")
    family_idx = _header_index(headers, "FAMILY NAME", "FAMILYNAME")
    if first_idx == -1 or last_idx == -1:
        raise ValidationFailedError(
            "Data must contain FIRST NAME and LAST NAME columns", "data",
        )

    parsed = ParsedRoster()
    for raw in lines[1:]:
        line = raw.strip()
        if not line:
            continue
        values = split_quoted(line, delimiter)
        if len(values) < max(first_idx, last_idx) + 1:
            parsed.skipped.append({"row": line, "reason": "Too few columns"})
            continue
        first = sanitize_cell(values[first_idx])
        last = sanitize_cell(values[last_idx])
        family = (
            sanitize_cell(values[family_idx])
            if family_idx != -1 and family_idx < len(values) else ""
        )
        if not first or not last:
            parsed.skipped.append({
                "row": line,
                "reason": "Missing or invalid first or last name",
            })
            continue
        parsed.rows.append(RosterRow(first, last, family))
    return parsed


# ─── Loose paste (header optional) ───────────────────────────────

def _line_delimiter(line: str) -> str:
    if "\t" in line:
        return "\t"
    if ";" in line:
        return ";"
    return ","


def _looks_like_header(cells: list[str]) -> bool:
    first = cells[0].lower() if cells else ""
    return "first" in first or "name" in first


def parse_loose_paste(data: str) -> ParsedRoster:
    """Parse free-form pasted rows: first, last, optional family name per line."""
    parsed = ParsedRoster()
    for i, raw in enumerate(data.strip().splitlines()):
        line = raw.strip()
        if not line:
            continue
        cells = [
            _EDGE_QUOTES_RE.sub("", col.strip()).strip()
            for col in line.split(_line_delimiter(line))
        ]
        if i == 0 and _looks_like_header(cells):
            continue
        if len(cells) < 2:
            continue
        first = sanitize_cell(cells[0])
        last = sanitize_cell(cells[1])
        family = sanitize_cell(cells[2]) if len(cells) > 2 else ""
        if first and last:
            parsed.rows.append(RosterRow(first, last, family))
    return parsed
