"""Read invoice rows from .xlsx workbooks or .csv exports"""

import csv
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from collections_kpi.domain.exceptions import SpreadsheetReadError

Row = Dict[str, Any]


def _rows_from_matrix(matrix: List[Tuple[Any, ...]]) -> Tuple[List[str], List[Row]]:
    """First row is the header; every header is kept, even over empty columns"""
    if not matrix:
        return [], []
    columns = ["" if c is None else str(c) for c in matrix[0]]
    rows = []
    for values in matrix[1:]:
        if all(v is None or v == "" for v in values):
            continue
        padded = list(values) + [None] * (len(columns) - len(values))
        rows.append(dict(zip(columns, padded)))
    return columns, rows


def read_xlsx(path: Path) -> Tuple[List[str], List[Row]]:
    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as e:
        raise SpreadsheetReadError(f"Cannot open workbook {path}: {e}") from e
    try:
        sheet = workbook.worksheets[0]
        matrix = [tuple(r) for r in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()
    return _rows_from_matrix(matrix)


def read_csv(path: Path) -> Tuple[List[str], List[Row]]:
    try:
        with path.open(newline="", encoding="utf-8-sig") as f:
            matrix = [tuple(r) for r in csv.reader(f)]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise SpreadsheetReadError(f"Cannot read CSV {path}: {e}") from e
    return _rows_from_matrix(matrix)


def read_spreadsheet(path: Union[str, Path]) -> Tuple[List[str], List[Row]]:
    """
    Load the first sheet of a workbook (or a CSV file).

    Returns:
        (column names, rows keyed by column name)

    Raises:
        SpreadsheetReadError: Missing file, unsupported extension or unreadable content
    """
    path = Path(path)
    if not path.exists():
        raise SpreadsheetReadError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        return read_xlsx(path)
    if suffix == ".csv":
        return read_csv(path)
    raise SpreadsheetReadError(f"Unsupported file type: {suffix or path.name}")
