"""
Spreadsheet Reader

Reads uploaded unit sheets (.xlsx or .csv) into a header list and raw cell
rows, with NO normalization. Row 1 holds the headers.
"""
import csv
import io
import logging
from datetime import date, datetime, time
from typing import Any, List, Optional, Tuple

from openpyxl import load_workbook

from realty_crm.lib.errors import ValidationError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS + CSV_EXTENSIONS


def _cell_value(value: Any) -> Any:
    """Keep cells JSON-safe: dates become ISO strings."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


def placeholder_header(position: int) -> str:
    """Name given to a blank header cell at a 1-based column position."""
    return f"col_{position}"


def _headers_from(row: Tuple[Any, ...]) -> List[str]:
    headers: List[str] = []
    for position, value in enumerate(row, start=1):
        text = str(value).strip() if value is not None else ""
        headers.append(text or placeholder_header(position))
    return headers


def _is_blank_row(row: List[Any]) -> bool:
    return all(value in (None, "") for value in row)


def _read_excel(content: bytes, sheet_name: Optional[str]) -> Tuple[List[str], List[List[Any]]]:
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValidationError(f"Cannot read Excel file (is it corrupted or wrong format?): {e}")

    try:
        if sheet_name:
            if sheet_name not in wb.sheetnames:
                raise ValidationError(f"Sheet '{sheet_name}' not found")
            ws = wb[sheet_name]
        else:
            ws = wb.worksheets[0]

        row_iter = ws.iter_rows(values_only=True)
        first = next(row_iter, None)
        if first is None:
            return [], []

        headers = _headers_from(first)
        rows: List[List[Any]] = []
        for raw in row_iter:
            row = [_cell_value(v) for v in raw[:len(headers)]]
            if not _is_blank_row(row):
                rows.append(row)
        return headers, rows
    finally:
        wb.close()


def _read_csv(content: bytes) -> Tuple[List[str], List[List[Any]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")

    reader = csv.reader(io.StringIO(text))
    first = next(reader, None)
    if first is None:
        return [], []

    headers = _headers_from(tuple(first))
    rows: List[List[Any]] = []
    for raw in reader:
        row = [_cell_value(v) for v in raw[:len(headers)]]
        if not _is_blank_row(row):
            rows.append(row)
    return headers, rows


def read_spreadsheet(
    content: bytes,
    filename: str,
    sheet_name: Optional[str] = None,
) -> Tuple[List[str], List[List[Any]]]:
    """
    Read an uploaded sheet.

    Args:
        content: Raw file bytes
        filename: Original file name, used to pick the reader
        sheet_name: Optional sheet name for workbooks (first sheet if None)

    Returns:
        (headers, rows) where each row is a list of cell values

    Raises:
        ValidationError: unsupported extension or unreadable file
    """
    lowered = (filename or "").lower()
    if lowered.endswith(EXCEL_EXTENSIONS):
        headers, rows = _read_excel(content, sheet_name)
    elif lowered.endswith(CSV_EXTENSIONS):
        headers, rows = _read_csv(content)
    else:
        raise ValidationError(
            "Invalid file type. Please select Excel files (.xlsx) or CSV files (.csv)."
        )

    logger.info("Read %d rows with %d columns from %s", len(rows), len(headers), filename)
    return headers, rows
