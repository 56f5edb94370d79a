"""
Document type and structure detection.
"""
from typing import Callable, List, Sequence, Tuple
import logging

from ..models.schema import PDFType, ReadabilityDiagnostics

logger = logging.getLogger(__name__)

# Evaluated top to bottom, first match wins.
READABILITY_RULES: List[Tuple[str, Callable[[ReadabilityDiagnostics], bool], PDFType]] = [
    (
        "dense_text",
        lambda d: d.text_length > 200 and d.digit_count > 10 and d.ascii_ratio > 0.7,
        PDFType.TEXT,
    ),
    (
        "sparse_text",
        lambda d: d.text_length > 50 and d.digit_count > 3,
        PDFType.TEXT,
    ),
    (
        "some_text",
        lambda d: d.text_length > 10,
        PDFType.SCANNED,
    ),
]

CSV_HEADER_KEYWORDS = [
    "date",
    "transaction",
    "description",
    "amount",
    "debit",
    "credit",
    "txn",
    "details",
    "amt",
    "posting",
    "reference",
]

DELIMITER_SAMPLE_LINES = 5


def classify_readability(diagnostics: ReadabilityDiagnostics) -> PDFType:
    """
    Decide whether extracted text is usable.

    Args:
        diagnostics: Metrics of the reconstructed text

    Returns:
        PDFType.TEXT, PDFType.SCANNED or PDFType.UNREADABLE
    """
    for name, predicate, pdf_type in READABILITY_RULES:
        if predicate(diagnostics):
            logger.debug(f"Readability rule '{name}' matched: {pdf_type.value}")
            return pdf_type

    return PDFType.UNREADABLE


def detect_delimiter(content: str, sample_lines: int = DELIMITER_SAMPLE_LINES) -> str:
    """
    Pick ``;`` or ``,`` by raw character frequency in the first non-empty lines.

    Quoting is ignored; ties go to the comma.
    """
    sample = [line for line in content.splitlines() if line.strip()][:sample_lines]

    comma_count = sum(line.count(",") for line in sample)
    semicolon_count = sum(line.count(";") for line in sample)

    logger.debug(f"Comma count: {comma_count}, semicolon count: {semicolon_count}")

    return ";" if semicolon_count > comma_count else ","


def is_header_row(row: Sequence[str]) -> bool:
    """Check whether a CSV row's first cell looks like a column label."""
    if not row:
        return False

    first_cell = (row[0] or "").strip().lower()
    return any(keyword in first_cell for keyword in CSV_HEADER_KEYWORDS)


def get_file_type(filename: str) -> str:
    """Map a file name to "csv", "pdf", "xlsx" or "unknown" by extension."""
    extension = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""

    if extension == "csv":
        return "csv"
    if extension == "pdf":
        return "pdf"
    if extension in ("xlsx", "xls"):
        return "xlsx"
    return "unknown"
