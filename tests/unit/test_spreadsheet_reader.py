import io
from datetime import datetime

import pytest
from openpyxl import Workbook

from realty_crm.lib.errors import ValidationError
from realty_crm.services.spreadsheet_reader import read_spreadsheet
from realty_crm.services.unit_normalizer import process_unit_data


def _xlsx_bytes(rows, title="Units") -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def test_reads_xlsx_headers_and_rows():
    content = _xlsx_bytes([
        ["Tower", "Unit No", None, "Price"],
        ["Tower A", 101, "x", 900000],
        [None, None, None, None],
        ["Tower A", 102, None, 600000],
    ])

    headers, rows = read_spreadsheet(content, "units.xlsx")

    assert headers == ["Tower", "Unit No", "col_3", "Price"]
    assert rows == [
        ["Tower A", 101, "x", 900000],
        ["Tower A", 102, None, 600000],
    ]


def test_xlsx_dates_become_iso_strings():
    content = _xlsx_bytes([
        ["Unit No", "Handover"],
        ["A-1", datetime(2027, 3, 31)],
    ])

    _, rows = read_spreadsheet(content, "units.xlsx")

    assert rows[0][1] == "2027-03-31T00:00:00"


def test_reads_named_sheet_and_rejects_missing_one():
    content = _xlsx_bytes([["Unit No"], ["A-1"]], title="Phase 2")

    headers, rows = read_spreadsheet(content, "units.xlsx", sheet_name="Phase 2")
    assert headers == ["Unit No"]
    assert rows == [["A-1"]]

    with pytest.raises(ValidationError):
        read_spreadsheet(content, "units.xlsx", sheet_name="Phase 9")


def test_reads_csv_with_bom():
    content = "\ufeffUnit No,Status\nA-1, Available \n,\nA-2,Sold\n".encode("utf-8")

    headers, rows = read_spreadsheet(content, "UNITS.CSV")

    assert headers == ["Unit No", "Status"]
    assert rows == [["A-1", "Available"], ["A-2", "Sold"]]


def test_csv_falls_back_to_latin1():
    content = "Unit No,View\nA-1,Caf\xe9 side\n".encode("latin-1")

    _, rows = read_spreadsheet(content, "units.csv")

    assert rows == [["A-1", "Caf\xe9 side"]]


def test_empty_csv_returns_nothing():
    assert read_spreadsheet(b"", "units.csv") == ([], [])


def test_unsupported_extension_is_rejected():
    with pytest.raises(ValidationError):
        read_spreadsheet(b"%PDF-1.4", "brochure.pdf")


def test_corrupt_workbook_is_rejected():
    with pytest.raises(ValidationError):
        read_spreadsheet(b"not a zip file", "units.xlsx")


def test_blank_spacer_column_does_not_lower_header_confidence():
    headers, rows = read_spreadsheet(b"Unit No,,Status\n101,,Available\n", "units.csv")

    units, summary, mapping = process_unit_data(rows, headers)

    assert headers == ["Unit No", "col_2", "Status"]
    assert mapping == {"Unit No": "unit_number", "Status": "status_raw"}
    assert summary.confidence.header_mapping == 1.0
    assert units[0].raw_data == {"Unit No": "101", "col_2": "", "Status": "Available"}
