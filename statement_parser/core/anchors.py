"""
Header field extraction from trigger anchors in the first statement lines.
"""
import re
from typing import Callable, Dict, List, Optional, Sequence
import logging

from .normalize import normalize_date, normalize_text
from ..models.schema import StatementHeader

logger = logging.getLogger(__name__)

HEADER_SCAN_LINES = 15

_ACCOUNT_RE = re.compile(r'[*x\d\s-]{4,}', re.IGNORECASE)
_STATEMENT_DATE_RE = re.compile(
    r'\d{4}-\d{2}-\d{2}|[A-Za-z]{3,9}\.?\s+\d{1,2},?\s+\d{4}|\d{1,2}[/-]\d{1,2}[/-]\d{4}'
)
_DOLLAR_AMOUNT_RE = re.compile(r'\$[\d,]+\.\d{2}')


class AnchorRule:
    """
    Extracts one header field from the first line whose anchor matches.

    ``trigger`` receives the lower-cased line; ``extract`` receives the
    unmodified line and returns the value, or None to keep scanning.
    """
    def __init__(self, field: str, trigger: Callable[[str], bool],
                 extract: Callable[[str], Optional[str]]):
        self.field = field
        self.trigger = trigger
        self.extract = extract

    def apply(self, line: str) -> Optional[str]:
        if not self.trigger(line.lower()):
            return None
        return self.extract(line)

    def __repr__(self):
        return f"AnchorRule('{self.field}')"


def _extract_bank(line: str) -> Optional[str]:
    return normalize_text(line) or None


def _extract_account(line: str) -> Optional[str]:
    for match in _ACCOUNT_RE.finditer(line):
        value = match.group().strip()
        if value:
            return value
    return None


def _extract_statement_date(line: str) -> Optional[str]:
    match = _STATEMENT_DATE_RE.search(line)
    if not match:
        return None
    return normalize_date(match.group()) or None


def _extract_dollar_amount(line: str) -> Optional[str]:
    match = _DOLLAR_AMOUNT_RE.search(line)
    if not match:
        return None
    return match.group().replace('$', '')


HEADER_RULES: List[AnchorRule] = [
    AnchorRule(
        'bank',
        lambda l: ('bank' in l or 'credit card' in l) and 'statement' in l,
        _extract_bank
    ),
    AnchorRule(
        'customer_account',
        lambda l: 'account' in l and 'number' in l,
        _extract_account
    ),
    AnchorRule(
        'statement_date',
        lambda l: 'statement' in l and 'date' in l,
        _extract_statement_date
    ),
    AnchorRule(
        'opening_balance',
        lambda l: 'opening' in l,
        _extract_dollar_amount
    ),
    AnchorRule(
        'closing_balance',
        lambda l: 'closing' in l,
        _extract_dollar_amount
    ),
]


def extract_header_fields(lines: Sequence[str],
                          max_lines: int = HEADER_SCAN_LINES) -> Dict[str, str]:
    """
    Scan the first lines for header fields.

    Each rule keeps the value of the first line it matches; later lines
    never override it.

    Args:
        lines: Non-empty statement lines in document order
        max_lines: Number of leading lines to scan

    Returns:
        Mapping of header field name to extracted value (found fields only)
    """
    found = {}

    for line in lines[:max_lines]:
        for rule in HEADER_RULES:
            if rule.field in found:
                continue
            value = rule.apply(line)
            if value is not None:
                found[rule.field] = value
                logger.debug(f"Header field '{rule.field}' found: {value}")

    return found


def extract_header(lines: Sequence[str], max_lines: int = HEADER_SCAN_LINES) -> StatementHeader:
    """Build an unscored header; fields that were not found keep their sentinels."""
    return StatementHeader(**extract_header_fields(lines, max_lines))
