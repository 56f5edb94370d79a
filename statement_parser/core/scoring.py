"""
Confidence scoring for parsed statements.

Every score is an additive sum of independent field checks, so the same
fields always produce the same score. Weights are kept in tenths to keep
the sums exact.
"""
from decimal import Decimal, InvalidOperation
from typing import Sequence
import logging

from .normalize import ISO_DATE_RE, parse_amount
from ..models.schema import UNKNOWN, ZERO_BALANCE, StatementHeader, Transaction

logger = logging.getLogger(__name__)

RECONCILIATION_BONUS = 0.1
RECONCILIATION_TOLERANCE = Decimal('0.01')


def _is_finite_number(value: str) -> bool:
    try:
        return Decimal(value).is_finite()
    except (InvalidOperation, TypeError, ValueError):
        return False


def is_found(value: str, sentinel: str) -> bool:
    """A header field counts as found when it is non-empty and not its sentinel."""
    return bool(value) and value != sentinel


def score_transaction(date: str, description: str, amount: str) -> float:
    """
    Score a transaction row.

    +0.5 for an ISO date, +0.4 for a numeric amount, +0.1 for a
    description of three or more words.
    """
    tenths = 0
    if date and ISO_DATE_RE.match(date):
        tenths += 5
    if amount and _is_finite_number(amount):
        tenths += 4
    if description and len(description.split()) >= 3:
        tenths += 1
    return tenths / 10


def score_header(header: StatementHeader) -> float:
    """
    Score the statement header.

    +0.5 for any account identity, +0.1 for the statement date and +0.2
    for each balance.
    """
    tenths = 0
    if (is_found(header.bank, UNKNOWN)
            or is_found(header.bank_account, UNKNOWN)
            or is_found(header.customer_account, UNKNOWN)):
        tenths += 5
    if is_found(header.statement_date, UNKNOWN):
        tenths += 1
    if is_found(header.opening_balance, ZERO_BALANCE):
        tenths += 2
    if is_found(header.closing_balance, ZERO_BALANCE):
        tenths += 2
    return tenths / 10


def balances_reconcile(header: StatementHeader, transactions: Sequence[Transaction]) -> bool:
    """Check ``opening + sum(amounts) == closing`` within one cent."""
    if not (is_found(header.opening_balance, ZERO_BALANCE)
            and is_found(header.closing_balance, ZERO_BALANCE)):
        return False

    opening = parse_amount(header.opening_balance)
    closing = parse_amount(header.closing_balance)
    total = sum((parse_amount(txn.amount) for txn in transactions), Decimal('0'))

    difference = abs(opening + total - closing)
    logger.debug(f"Balance check: {opening} + {total} - {closing} = {difference}")
    return difference < RECONCILIATION_TOLERANCE


def score_document(header: StatementHeader, transactions: Sequence[Transaction]) -> float:
    """
    Average the header and transaction row scores, plus a bonus when the
    balances reconcile. Rounded to 5 decimal places.
    """
    scores = [header.row_score] + [txn.row_score for txn in transactions]
    document_score = sum(scores) / len(scores)

    if balances_reconcile(header, transactions):
        document_score += RECONCILIATION_BONUS

    return round(document_score, 5)
