"""
Transaction extraction from statement text lines and CSV rows.
"""
import re
from typing import Dict, List, Optional, Sequence
import logging

from .normalize import normalize_date, normalize_amount, clean_description

logger = logging.getLogger(__name__)

LINE_DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2}')
LINE_AMOUNT_RE = re.compile(r'\$?[\d,]+\.\d{2}|\(\$?[\d,]+\.\d{2}\)')

LABEL_KEYWORDS = [
    "statement",
    "account",
    "balance",
    "total",
    "summary",
    "date",
    "description",
    "amount",
    "debit",
    "credit",
]

MIN_CSV_COLUMNS = 3


def is_label_line(line: str) -> bool:
    """A line with a label keyword and no ISO date is a heading, not a transaction."""
    lower_line = line.lower()
    has_keyword = any(keyword in lower_line for keyword in LABEL_KEYWORDS)
    return has_keyword and not LINE_DATE_RE.search(line)


def _description_between(line: str, date_match, amount_match) -> str:
    if date_match.start() < amount_match.start():
        return line[date_match.end():amount_match.start()].strip()

    before_date = line[:date_match.start()].strip()
    after_amount = line[amount_match.end():].strip()
    return before_date or after_amount


def extract_line_transaction(line: str) -> Optional[Dict[str, str]]:
    """
    Extract date, description and amount from one statement line.

    Args:
        line: A reconstructed text line

    Returns:
        Dict with date, description and amount, or None if the line is not a transaction
    """
    if is_label_line(line):
        return None

    date_match = LINE_DATE_RE.search(line)
    if not date_match:
        return None

    amount_match = LINE_AMOUNT_RE.search(line)
    if not amount_match:
        return None

    description = clean_description(_description_between(line, date_match, amount_match))
    if not description:
        return None

    return {
        'date': normalize_date(date_match.group()),
        'description': description,
        'amount': normalize_amount(amount_match.group()),
    }


def extract_line_transactions(lines: Sequence[str]) -> List[Dict[str, str]]:
    """Extract transaction fields from every qualifying line, in document order."""
    transactions = []

    for line in lines:
        transaction = extract_line_transaction(line)
        if transaction:
            transactions.append(transaction)
            logger.debug(f"Found transaction: {transaction}")

    logger.info(f"Line extraction: {len(transactions)} transactions from {len(lines)} lines")
    return transactions


def extract_csv_transactions(rows: Sequence[Sequence[str]]) -> List[Dict[str, str]]:
    """
    Map CSV data rows to transaction fields.

    Columns are positional: date, description, amount. Rows with fewer
    than three cells, or whose three cells are all blank, are skipped.
    """
    transactions = []

    for row in rows:
        if len(row) < MIN_CSV_COLUMNS:
            logger.debug(f"Skipping row with insufficient columns: {row}")
            continue

        date_cell, description_cell, amount_cell = (cell.strip() for cell in row[:MIN_CSV_COLUMNS])
        if not (date_cell or description_cell or amount_cell):
            continue

        transactions.append({
            'date': normalize_date(date_cell),
            'description': description_cell,
            'amount': normalize_amount(amount_cell),
        })

    logger.info(f"CSV extraction: {len(transactions)} transactions from {len(rows)} rows")
    return transactions
