"""
Bank Statement Parser

Heuristic extraction of bank and credit card statements from CSV files and
PDF text layers into a normalized header, transactions and confidence scores.
"""

__version__ = "1.0.0"
__author__ = "BillBuddy Team"

from .core.runner import (
    StatementParser,
    StatementDecodeError,
    parse_csv_statement,
    parse_pdf_statement,
    parse_pdf_file,
    parse_statement_file,
    analyze_pdf,
)
from .core.detectors import classify_readability, detect_delimiter
from .core.settings import ParserSettings, load_settings
from .models.schema import (
    ParsedStatement,
    StatementHeader,
    Transaction,
    TextFragment,
    ReadabilityDiagnostics,
    ReadabilityReport,
    PDFType,
)

__all__ = [
    "StatementParser",
    "StatementDecodeError",
    "parse_csv_statement",
    "parse_pdf_statement",
    "parse_pdf_file",
    "parse_statement_file",
    "analyze_pdf",
    "classify_readability",
    "detect_delimiter",
    "ParserSettings",
    "load_settings",
    "ParsedStatement",
    "StatementHeader",
    "Transaction",
    "TextFragment",
    "ReadabilityDiagnostics",
    "ReadabilityReport",
    "PDFType",
]
