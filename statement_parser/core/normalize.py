"""
Data normalization and cleaning functions.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Pattern, Tuple
import logging

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_MONTH_NAME_DATE_RE = re.compile(r'([a-z]{3})[a-z]*\.?\s+(\d{1,2}),?\s+(\d{4})')
_NUMERIC_DATE_RE = re.compile(r'^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$')

MONTH_ABBREVIATIONS = [
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
]

# Ordered: the first pattern found anywhere in the text decides the currency.
CURRENCY_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'\$|USD|US\s*Dollar', re.IGNORECASE), "USD"),
    (re.compile(r'€|EUR|Euro', re.IGNORECASE), "EUR"),
    (re.compile(r'£|GBP|Pound', re.IGNORECASE), "GBP"),
    (re.compile(r'₱|PHP|Peso', re.IGNORECASE), "PHP"),
    (re.compile(r'S\$|SGD|Singapore', re.IGNORECASE), "SGD"),
]
DEFAULT_CURRENCY = "USD"

_CENTS = Decimal('0.01')


def _iso(year: int, month: int, day: int) -> str:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def normalize_date(value: str) -> str:
    """
    Normalize a date string to ``YYYY-MM-DD``.

    Recognizes ISO dates, ``Mon D, YYYY`` and numeric ``M/D/YYYY`` (US order).

    Args:
        value: Raw date string

    Returns:
        ISO date string, or "" when the value is not a valid calendar date
    """
    if not value or not value.strip():
        return ""

    cleaned = re.sub(r'[^\d/\-.]', '', value)

    if ISO_DATE_RE.match(cleaned):
        year, month, day = cleaned.split('-')
        return _iso(int(year), int(month), int(day))

    month_match = _MONTH_NAME_DATE_RE.search(value.lower())
    if month_match and month_match.group(1) in MONTH_ABBREVIATIONS:
        month = MONTH_ABBREVIATIONS.index(month_match.group(1)) + 1
        return _iso(int(month_match.group(3)), month, int(month_match.group(2)))

    numeric_match = _NUMERIC_DATE_RE.match(cleaned)
    if numeric_match:
        month, day, year = (int(part) for part in numeric_match.groups())
        return _iso(year, month, day)

    logger.debug(f"Could not parse date: {value}")
    return ""


def parse_amount(value: str) -> Decimal:
    """
    Parse a money string into a signed Decimal.

    A leading ``-`` or surrounding parentheses make the value negative.
    Anything unparsable becomes zero.
    """
    if not value or not value.strip():
        return Decimal('0')

    stripped = value.strip()
    is_negative = stripped.startswith('-') or ('(' in stripped and ')' in stripped)

    numeric = re.sub(r'[^\d.,]', '', stripped).replace(',', '')
    try:
        amount = Decimal(numeric)
    except InvalidOperation:
        logger.warning(f"Could not extract numeric value from: {value}")
        return Decimal('0')

    return -amount if is_negative else amount


def normalize_amount(value: str) -> str:
    """
    Normalize money values to a signed string with two decimals.

    Args:
        value: Raw money string, e.g. "$1,200.50" or "($50.00)"

    Returns:
        Normalized amount such as "1200.50" or "-50.00"; "0.00" if unparsable
    """
    try:
        amount = parse_amount(value).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        logger.warning(f"Amount out of range: {value}")
        return "0.00"
    if amount == 0:
        return "0.00"
    return f"{amount:.2f}"


def detect_currency(text: str) -> str:
    """Return the ISO code of the first currency cue found in ``text``."""
    for pattern, code in CURRENCY_PATTERNS:
        if pattern.search(text):
            return code
    return DEFAULT_CURRENCY


def normalize_text(value: str) -> str:
    """
    Normalize text by trimming and collapsing whitespace.

    Args:
        value: Raw text string

    Returns:
        Cleaned text string
    """
    if not value:
        return ""

    return re.sub(r'\s+', ' ', value.strip())


def clean_description(description: str) -> str:
    """Drop everything but word characters, whitespace, hyphens and periods."""
    cleaned = re.sub(r'[^\w\s\-.]', ' ', normalize_text(description))
    return normalize_text(cleaned)
