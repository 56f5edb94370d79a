"""
End-to-end parsing orchestration.
"""
import csv
import io
from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from .loader import PDFLoader, PdfDocument, PdfSource
from .lines import compute_diagnostics
from .extractors import (
    EmbeddedTextExtractor,
    OCRTextExtractor,
    OCRUnsupportedError,
    TextExtractor,
)
from .detectors import classify_readability, detect_delimiter, is_header_row, get_file_type
from .anchors import extract_header_fields
from .transactions import MIN_CSV_COLUMNS, extract_csv_transactions, extract_line_transactions
from .normalize import detect_currency
from .scoring import score_document, score_header, score_transaction
from .settings import ParserSettings
from ..models.schema import (
    PDFType,
    ParsedStatement,
    ReadabilityReport,
    StatementHeader,
    Transaction,
)

logger = logging.getLogger(__name__)


class StatementDecodeError(ValueError):
    """Raised when CSV bytes are not valid UTF-8 text."""


class StatementParser:
    """Main parser class that orchestrates the entire parsing process."""

    def __init__(self, settings: Optional[ParserSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 text_extractor: Optional[TextExtractor] = None,
                 ocr_extractor: Optional[TextExtractor] = None):
        self.settings = settings or ParserSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.text_extractor = text_extractor or EmbeddedTextExtractor(self.settings.line_tolerance)
        self.ocr_extractor = ocr_extractor or OCRTextExtractor()

    def parse_csv(self, raw: Union[bytes, str]) -> ParsedStatement:
        """
        Parse delimited statement content.

        Args:
            raw: File bytes (decoded as UTF-8) or already decoded text

        Returns:
            ParsedStatement object; empty or malformed content yields an empty statement
        """
        content = _decode(raw)

        delimiter = detect_delimiter(content, self.settings.delimiter_sample_lines)
        try:
            records = _read_records(content, delimiter)
        except csv.Error as e:
            self.logger.warning(f"CSV parsing failed: {e}")
            return ParsedStatement()

        if not records:
            self.logger.info("CSV content has no records")
            return ParsedStatement()

        has_header = is_header_row(records[0])
        data_rows = records[1:] if has_header else records

        self.logger.info(
            f"CSV structure: delimiter='{delimiter}' header={has_header} rows={len(data_rows)}"
        )

        statement = self._build_statement(
            _header_lines(data_rows),
            extract_csv_transactions(data_rows),
            detect_currency(content)
        )
        self._log_summary("csv", statement)
        return statement

    def parse_text(self, text: str) -> ParsedStatement:
        """Parse reconstructed statement text, one visual line per text line."""
        lines = _clean_lines(text)
        self.logger.debug(f"Parsing {len(lines)} non-empty lines")

        return self._build_statement(
            lines,
            extract_line_transactions(lines),
            detect_currency(" ".join(lines))
        )

    def analyze_pdf(self, document: PdfDocument) -> ReadabilityReport:
        """
        Extract embedded text and classify how usable it is.

        Args:
            document: Loaded PDF pages

        Returns:
            ReadabilityReport with diagnostics, classification and text
        """
        text = self.text_extractor.extract(document)
        diagnostics = compute_diagnostics(text, document.page_count)
        pdf_type = classify_readability(diagnostics)

        self.logger.info(
            f"Readability: {pdf_type.value} (length={diagnostics.text_length}, "
            f"digits={diagnostics.digit_count}, ascii_ratio={diagnostics.ascii_ratio}, "
            f"pages={diagnostics.page_count})"
        )
        return ReadabilityReport(diagnostics=diagnostics, pdf_type=pdf_type, text=text)

    def parse_pdf(self, document: PdfDocument) -> ParsedStatement:
        """Parse a loaded PDF, trying OCR for scanned or unreadable text layers."""
        report = self.analyze_pdf(document)
        text = report.text

        if report.pdf_type is not PDFType.TEXT and self.settings.ocr_enabled:
            self.logger.info(f"Attempting {self.ocr_extractor.kind} extraction")
            try:
                text = self.ocr_extractor.extract(document)
                self.logger.info(f"OCR completed, text length: {len(text)}")
            except OCRUnsupportedError as e:
                self.logger.warning(f"OCR failed: {e}")
            except Exception as e:
                self.logger.warning(f"OCR failed: {type(e).__name__}: {e}")

        statement = self.parse_text(text)
        self._log_summary(report.pdf_type.value, statement)
        return statement

    def parse_pdf_file(self, source: PdfSource) -> ParsedStatement:
        """Load a PDF from a path or bytes and parse it."""
        loader = PDFLoader(source)
        try:
            document = loader.load_document()
        finally:
            loader.close()
        return self.parse_pdf(document)

    def parse_file(self, path: Path) -> ParsedStatement:
        """Parse a statement file, routed by its extension."""
        file_type = get_file_type(path.name)

        if file_type == "csv":
            return self.parse_csv(path.read_bytes())
        if file_type == "pdf":
            return self.parse_pdf_file(path)
        if file_type == "xlsx":
            raise ValueError("XLSX parsing not yet implemented")
        raise ValueError(f"Unsupported file type: {path.name}")

    def _build_statement(self, lines: List[str], transaction_fields: List[dict],
                         currency: str) -> ParsedStatement:
        header_fields = extract_header_fields(lines, self.settings.header_scan_lines)
        header = StatementHeader(
            **header_fields,
            row_score=score_header(StatementHeader(**header_fields))
        )

        transactions = [
            Transaction(
                **fields,
                currency=currency,
                row_score=score_transaction(**fields)
            )
            for fields in transaction_fields
        ]

        if not transactions:
            self.logger.warning("No transactions found in statement")

        return ParsedStatement(
            header=header,
            transactions=transactions,
            document_score=score_document(header, transactions)
        )

    def _log_summary(self, source_type: str, statement: ParsedStatement):
        self.logger.info(
            f"Parsed {source_type} statement: header_score={statement.header.row_score} "
            f"transactions={len(statement.transactions)} "
            f"document_score={statement.document_score}"
        )


def _decode(raw: Union[bytes, str]) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise StatementDecodeError(f"Statement is not valid UTF-8 text: {e}") from e


def _read_records(content: str, delimiter: str) -> List[List[str]]:
    reader = csv.reader(io.StringIO(content, newline=''), delimiter=delimiter)
    records = []
    for row in reader:
        cells = [cell.strip() for cell in row]
        if any(cells):
            records.append(cells)
    return records


def _clean_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _header_lines(records: Sequence[Sequence[str]]) -> List[str]:
    # rows wide enough to be transactions never feed the header rules
    return [" ".join(cell for cell in record if cell)
            for record in records if len(record) < MIN_CSV_COLUMNS]


def parse_csv_statement(raw: Union[bytes, str], settings: Optional[ParserSettings] = None,
                        logger: Optional[logging.Logger] = None) -> ParsedStatement:
    """
    Parse a CSV statement.

    Args:
        raw: CSV file bytes
        settings: Parser settings
        logger: Logger receiving stage events

    Returns:
        ParsedStatement object
    """
    return StatementParser(settings, logger).parse_csv(raw)


def parse_pdf_statement(page_fragments: Sequence[Sequence],
                        settings: Optional[ParserSettings] = None,
                        logger: Optional[logging.Logger] = None) -> ParsedStatement:
    """
    Parse a PDF statement from its per-page positioned text.

    Args:
        page_fragments: For each page, TextFragment objects or ``(text, x, y)`` tuples
        settings: Parser settings
        logger: Logger receiving stage events

    Returns:
        ParsedStatement object
    """
    document = PdfDocument.from_fragments(page_fragments)
    return StatementParser(settings, logger).parse_pdf(document)


def parse_pdf_file(source: PdfSource, settings: Optional[ParserSettings] = None,
                   logger: Optional[logging.Logger] = None) -> ParsedStatement:
    """Parse a PDF statement from a file path or raw bytes."""
    return StatementParser(settings, logger).parse_pdf_file(source)


def analyze_pdf(page_fragments: Sequence[Sequence],
                settings: Optional[ParserSettings] = None) -> ReadabilityReport:
    """Return the readability report for per-page positioned text."""
    document = PdfDocument.from_fragments(page_fragments)
    return StatementParser(settings).analyze_pdf(document)


def parse_statement_file(path: Path, settings: Optional[ParserSettings] = None,
                         verbose: bool = False) -> ParsedStatement:
    """
    Parse a CSV or PDF statement file.

    Args:
        path: Path to the statement file
        settings: Parser settings
        verbose: Enable verbose logging

    Returns:
        ParsedStatement object
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    return StatementParser(settings).parse_file(Path(path))
