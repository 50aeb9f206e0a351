"""Normalize raw spreadsheet rows into Invoice records"""

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from collections_kpi.domain.models import Invoice

logger = logging.getLogger(__name__)

# Spreadsheet serial day 0
SERIAL_EPOCH = datetime(1899, 12, 30)

MTD_OVERDUE_COLUMN = "MTD Overdue"

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")
_NUMERIC_PREFIX = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")

# Header patterns used to suggest a mapping; first matching column wins.
FIELD_PATTERNS: Dict[str, str] = {
    "invoice_number": r"invoice.*number|inv.*no",
    "customer_name": r"customer",
    "payment_terms": r"terms|pt",
    "status": r"status",
    "invoice_date": r"invoice.*date",
    "due_date": r"due.*date",
    "expected_date": r"expected",
    "collector_name": r"collector",
    "payment_date": r"payment.*date",
    "customer_type": r"type",
    "total_amount": r"total.*amount|amount",
    "amount_collected": r"collected",
    "total_balance": r"balance",
    "business_case": r"business.*case|case",
    "credit_note": r"credit.*note|cn",
    "opening_balance": r"opening.*balance",
    "salesperson": r"sales.*person|sales",
    "mtd_overdue": r"mtd.*overdue",
}

REQUIRED_FIELDS = ("invoice_number", "customer_name", "invoice_date", "total_amount")


def parse_number(value: Any) -> float:
    """
    Tolerant numeric parse.

    Strips everything except digits, '.' and '-', then reads the leading
    number: "$1,234.50" -> 1234.5, "(12) units" -> 12.0. Anything unparseable
    (including NaN/inf) is 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _NUMERIC_PREFIX.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_date(value: Any, today: Optional[date] = None) -> date:
    """
    Cascading date parse: date objects pass through, numbers are spreadsheet
    serials, strings are tried as ISO-8601 then YYYY-MM-DD. Falls back to today.
    """
    fallback = today or date.today()

    if value is None or value == "":
        return fallback
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return fallback
        try:
            return (SERIAL_EPOCH + timedelta(days=value)).date()
        except OverflowError:
            logger.debug("Serial date out of range: %r", value)
            return fallback

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        logger.debug("Unparseable date %r, using %s", value, fallback)
        return fallback


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_invoice(
    row: Mapping[str, Any],
    mapping: Mapping[str, str],
    index: int,
    today: Optional[date] = None,
) -> Invoice:
    """
    Convert one raw row into an Invoice.

    Args:
        row: Raw spreadsheet row (column name -> cell value)
        mapping: Canonical field name -> raw column name
        index: Row position, used for the generated id
        today: Fallback for missing/unparseable dates
    """
    today = today or date.today()

    def raw(field_name: str) -> Any:
        column = mapping.get(field_name)
        return row.get(column) if column else None

    def optional_date(field_name: str) -> Optional[date]:
        value = raw(field_name)
        return None if _is_blank(value) else parse_date(value, today)

    def optional_number(field_name: str) -> Optional[float]:
        return parse_number(raw(field_name)) if mapping.get(field_name) else None

    mtd_overdue = raw("mtd_overdue")
    if _is_blank(mtd_overdue):
        mtd_overdue = row.get(MTD_OVERDUE_COLUMN)

    return Invoice(
        id=f"INV-{index}",
        invoice_number=_text(raw("invoice_number")) or f"INV-{index}",
        customer_name=_text(raw("customer_name")) or "Unknown",
        customer_type=_text(raw("customer_type")) or "Commercial",
        collector_name=_text(raw("collector_name")) or "Unassigned",
        salesperson=_text(raw("salesperson")),
        payment_terms=_text(raw("payment_terms")) or "",
        status=_text(raw("status")) or "Open",
        business_case=_text(raw("business_case")),
        invoice_date=parse_date(raw("invoice_date"), today),
        due_date=parse_date(raw("due_date"), today),
        expected_date=optional_date("expected_date"),
        payment_date=optional_date("payment_date"),
        total_amount=parse_number(raw("total_amount")),
        amount_collected=parse_number(raw("amount_collected")),
        total_balance=parse_number(raw("total_balance")),
        opening_balance=optional_number("opening_balance"),
        credit_note=optional_number("credit_note"),
        mtd_overdue=parse_number(mtd_overdue),
    )


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    mapping: Mapping[str, str],
    today: Optional[date] = None,
) -> List[Invoice]:
    """Normalize a whole sheet; ids follow row order"""
    today = today or date.today()
    return [normalize_invoice(row, mapping, index, today) for index, row in enumerate(rows)]


def detect_field_mapping(columns: Sequence[Any]) -> Dict[str, str]:
    """Suggest a canonical-field -> column mapping from header names"""
    headers = [str(c) for c in columns]
    mapping: Dict[str, str] = {}
    for field_name, pattern in FIELD_PATTERNS.items():
        regex = re.compile(pattern, re.IGNORECASE)
        match = next((h for h in headers if regex.search(h)), None)
        if match is not None:
            mapping[field_name] = match
    return mapping


def missing_required_fields(mapping: Mapping[str, str]) -> List[str]:
    return [f for f in REQUIRED_FIELDS if not mapping.get(f)]
