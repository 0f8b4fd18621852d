"""Roster Parser — tests for CSV, spreadsheet-paste and loose-paste parsing.

Tests cover:
    - sanitize_cell trims and strips tags and NUL bytes
    - CSV records map header variants and collect skipped rows
    - Spreadsheet paste sniffs tab vs comma and honours quotes
    - Loose paste picks a delimiter per line and skips a header row
"""

import pytest

from lmpg.core.errors import ValidationFailedError
from lmpg.core.roster_parser import (
    RosterRow,
    TEMPLATE_CSV,
    detect_delimiter,
    parse_loose_paste,
    parse_spreadsheet_paste,
    read_csv_records,
    roster_from_records,
    sanitize_cell,
    split_quoted,
)


# ─── sanitize_cell ───────────────────────────────────────────────

def test_sanitize_cell():
    assert sanitize_cell("  <b>Ann</b>\0 ") == "Ann"
    assert sanitize_cell(None) == ""
    assert sanitize_cell("<script>x</script>") == "x"


# ─── CSV upload ──────────────────────────────────────────────────

def test_read_csv_records_strips_bom_and_header_spaces():
    records = read_csv_records(b"\xef\xbb\xbf FIRST NAME ,LAST NAME\nAnn,Lee\n")
    assert records == [{"FIRST NAME": "Ann", "LAST NAME": "Lee"}]


def test_template_parses_to_three_rows():
    parsed = roster_from_records(read_csv_records(TEMPLATE_CSV.encode()))
    assert parsed.rows[0] == RosterRow("John", "Smith", "SMITH, John and Jane")
    assert len(parsed.rows) == 3
    assert parsed.skipped == []


def test_records_accept_header_variants():
    parsed = roster_from_records([
        {"first_name": "Ann", "last_name": "Lee"},
        {"First Name": "Bo", "Last Name": "Moe", "Family Name": "MOE"},
    ])
    assert parsed.rows == [RosterRow("Ann", "Lee", ""), RosterRow("Bo", "Moe", "MOE")]


def test_records_without_both_names_are_skipped():
    record = {"FIRST NAME": "Ann", "LAST NAME": "  "}
    parsed = roster_from_records([record])
    assert parsed.rows == []
    assert parsed.skipped == [
        {"row": record, "reason": "Missing or invalid first or last name"},
    ]


# ─── Spreadsheet paste ───────────────────────────────────────────

def test_detect_delimiter():
    assert detect_delimiter("FIRST NAME\tLAST NAME\tFAMILY NAME") == "\t"
    assert detect_delimiter("FIRST NAME,LAST NAME") == ","


def test_split_quoted_keeps_commas_inside_quotes():
    assert split_quoted('Ann, Lee ,"LEE, Ann"', ",") == ["Ann", "Lee", "LEE, Ann"]


def test_spreadsheet_paste_tab_separated():
    parsed = parse_spreadsheet_paste(
        "Last Name\tFirst Name\tFamily Name\nLee\tAnn\tLEE, Ann\n\nMoe\tBo\n",
    )
    assert parsed.rows == [RosterRow("Ann", "Lee", "LEE, Ann"), RosterRow("Bo", "Moe", "")]


def test_spreadsheet_paste_comma_separated_with_quoted_headers():
    parsed = parse_spreadsheet_paste('"FIRSTNAME","LASTNAME"\n"Ann","Lee"')
    assert parsed.rows == [RosterRow("Ann", "Lee", "")]


def test_spreadsheet_paste_collects_short_and_blank_rows():
    parsed = parse_spreadsheet_paste("FIRST NAME,LAST NAME\nAnn\n,Lee\n")
    assert parsed.rows == []
    assert [s["reason"] for s in parsed.skipped] == [
        "Too few columns", "Missing or invalid first or last name",
    ]


def test_spreadsheet_paste_needs_header_and_a_row():
    with pytest.raises(ValidationFailedError, match="must have headers"):
        parse_spreadsheet_paste("FIRST NAME,LAST NAME")


def test_spreadsheet_paste_needs_name_columns():
    with pytest.raises(ValidationFailedError, match="FIRST NAME and LAST NAME"):
        parse_spreadsheet_paste("NAME,AGE\nAnn,4")


# ─── Loose paste ─────────────────────────────────────────────────

def test_loose_paste_mixed_delimiters():
    parsed = parse_loose_paste("Ann\tLee\tLEE\nBo;Moe\n\"Cy\",'Zed'\n")
    assert parsed.rows == [
        RosterRow("Ann", "Lee", "LEE"),
        RosterRow("Bo", "Moe", ""),
        RosterRow("Cy", "Zed", ""),
    ]


def test_loose_paste_skips_header_only_on_first_line():
    parsed = parse_loose_paste("First,Last\nNathan,Name\n")
    assert parsed.rows == [RosterRow("Nathan", "Name", "")]


def test_loose_paste_ignores_single_column_lines():
    assert parse_loose_paste("Ann\nBo,Moe").rows == [RosterRow("Bo", "Moe", "")]
