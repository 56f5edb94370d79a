"""
End-to-end tests for CSV and PDF statement parsing.
"""
import logging

import pytest
from pydantic import ValidationError

from ..core.runner import (
    StatementParser,
    StatementDecodeError,
    parse_csv_statement,
    parse_pdf_statement,
    parse_pdf_file,
    parse_statement_file,
    analyze_pdf,
)
from ..core.loader import PdfDocument
from ..core.extractors import OCRTextExtractor, OCRUnsupportedError, TextExtractor
from ..core.settings import ParserSettings, load_settings
from ..models.schema import ParsedStatement, PDFType, StatementHeader


SAMPLE_CSV = (
    b"Date,Description,Amount\n"
    b"2024-01-15,Coffee Shop Purchase,4.50\n"
    b"2024-01-16,Grocery Store,85.23\n"
)


@pytest.fixture
def statement_pages():
    """Positioned fragments of a one-page statement that reconciles."""
    return [[
        ("First National Bank Statement", 50, 760),
        ("Account Number:", 50, 740),
        ("****1234", 200, 740),
        ("Statement Date:", 50, 720),
        ("Jan 31, 2024", 200, 720),
        ("$1,000.00", 400, 700),
        ("Opening Balance", 50, 700),
        ("Closing Balance", 50, 680),
        ("$1,250.50", 400, 681),
        ("Date", 50, 650),
        ("Description", 120, 650),
        ("Amount", 400, 650),
        ("2024-01-05", 50, 630),
        ("Payroll Deposit ACME Corp", 120, 630),
        ("$300.50", 400, 631),
        ("2024-01-12", 50, 610),
        ("Electric Bill", 120, 610),
        ("($50.00)", 400, 610),
    ]]


class RecordingOCR(TextExtractor):
    kind = "ocr"

    def __init__(self, text):
        self.text = text
        self.calls = 0

    def extract(self, document):
        self.calls += 1
        return self.text


class TestCsvStatement:

    def test_header_row_dropped_and_rows_parsed(self):
        result = parse_csv_statement(SAMPLE_CSV)

        assert len(result.transactions) == 2
        first, second = result.transactions
        assert (first.date, first.description, first.amount) == ("2024-01-15", "Coffee Shop Purchase", "4.50")
        assert (second.date, second.description, second.amount) == ("2024-01-16", "Grocery Store", "85.23")
        assert {t.currency for t in result.transactions} == {"USD"}
        assert first.row_score == 1.0
        assert second.row_score == 0.9
        assert result.header.row_score == 0.0
        assert result.document_score == pytest.approx(0.63333)

    def test_empty_csv(self):
        result = parse_csv_statement(b"")

        assert result.header == StatementHeader()
        assert result.transactions == []
        assert result.document_score == 0

    def test_blank_lines_only(self):
        result = parse_csv_statement(b"\n \n\n")
        assert result == ParsedStatement()

    def test_header_only(self):
        result = parse_csv_statement(b"Date,Description,Amount\n")
        assert result.transactions == []
        assert result.document_score == 0

    def test_semicolon_delimited(self):
        content = "Date;Description;Amount\n2024-01-15;Online Transfer Out;-1200.00\n"
        result = parse_csv_statement(content.encode("utf-8"))

        assert len(result.transactions) == 1
        assert result.transactions[0].amount == "-1200.00"
        assert result.transactions[0].description == "Online Transfer Out"

    def test_quoted_amount_with_thousands_separator(self):
        content = b'2024-01-15,Rent For January,"1,850.00"\n'
        result = parse_csv_statement(content)
        assert result.transactions[0].amount == "1850.00"

    def test_no_header_row(self):
        result = parse_csv_statement(b"2024-01-15,Coffee Shop Purchase,4.50\n")
        assert len(result.transactions) == 1

    def test_currency_detected_from_content(self):
        content = "2024-01-15,Cafe Latte Order,€4.50\n".encode("utf-8")
        result = parse_csv_statement(content)
        assert result.transactions[0].currency == "EUR"
        assert result.transactions[0].amount == "4.50"

    def test_utf8_bom_is_ignored(self):
        result = parse_csv_statement(b"\xef\xbb\xbf" + SAMPLE_CSV)
        assert len(result.transactions) == 2

    def test_invalid_utf8_raises(self):
        with pytest.raises(StatementDecodeError):
            parse_csv_statement(b"\xff\xfe\xfa bad bytes")

    def test_short_rows_skipped(self):
        result = parse_csv_statement(b"2024-01-15,Coffee\n2024-01-16,Grocery Store,85.23\n")
        assert [t.description for t in result.transactions] == ["Grocery Store"]

    def test_oversized_amount_degrades_to_zero(self):
        result = parse_csv_statement(b"2024-01-15,Coffee Shop Purchase,1234567890123456789012345678.00\n")

        assert len(result.transactions) == 1
        assert result.transactions[0].amount == "0.00"
        assert result.transactions[0].row_score == 1.0

    def test_data_rows_do_not_fill_header(self):
        result = parse_csv_statement(b"2024-01-20,Credit card statement payment,-100.00\n")

        assert result.header == StatementHeader()
        assert result.transactions[0].description == "Credit card statement payment"
        assert result.document_score == pytest.approx(0.5)

    def test_preamble_lines_fill_header(self):
        content = (
            b"First National Bank Statement\n"
            b"2024-01-20,Credit card statement payment,-100.00\n"
        )
        result = parse_csv_statement(content)

        assert result.header.bank == "First National Bank Statement"
        assert result.header.row_score == 0.5
        assert len(result.transactions) == 1


class TestPdfStatement:

    def test_single_transaction_line(self):
        page = [
            ("2024-03-01", 50, 700),
            ("Monthly Service Fee", 120, 700),
            ("$12.00", 400, 700),
        ]
        result = parse_pdf_statement([page])

        assert len(result.transactions) == 1
        txn = result.transactions[0]
        assert txn.date == "2024-03-01"
        assert txn.amount == "12.00"
        assert txn.description == "Monthly Service Fee"
        assert txn.currency == "USD"
        assert txn.row_score == 1.0

    def test_full_statement(self, statement_pages):
        result = parse_pdf_statement(statement_pages)

        header = result.header
        assert header.bank == "First National Bank Statement"
        assert header.customer_account == "****1234"
        assert header.statement_date == "2024-01-31"
        assert header.opening_balance == "1,000.00"
        assert header.closing_balance == "1,250.50"
        assert header.bank_account == "unknown"
        assert header.row_score == 1.0

        assert [(t.description, t.amount) for t in result.transactions] == [
            ("Payroll Deposit ACME Corp", "300.50"),
            ("Electric Bill", "-50.00"),
        ]
        assert [t.row_score for t in result.transactions] == [1.0, 0.9]
        assert result.document_score == pytest.approx(1.06667)

    def test_readability_report(self, statement_pages):
        report = analyze_pdf(statement_pages)

        assert report.pdf_type == PDFType.TEXT
        assert report.diagnostics.page_count == 1
        assert report.diagnostics.text_length == 239
        assert report.text.startswith("First National Bank Statement\n")

    def test_no_text_layer(self):
        assert analyze_pdf([]).pdf_type == PDFType.UNREADABLE

        result = parse_pdf_statement([])
        assert result == ParsedStatement()

    def test_page_order_is_preserved(self):
        pages = [
            [("2024-03-01 First Page Item $1.00", 50, 700)],
            [("2024-03-02 Second Page Item $2.00", 50, 700)],
        ]
        result = parse_pdf_statement(pages)
        assert [t.description for t in result.transactions] == ["First Page Item", "Second Page Item"]

    def test_malformed_pdf_bytes_degrade_to_empty(self):
        result = parse_pdf_file(b"not really a pdf")
        assert result.transactions == []
        assert result.document_score == 0


class FailingOCR(TextExtractor):
    kind = "ocr"

    def extract(self, document):
        raise IOError("engine crashed")


class TestOcrFallback:

    @pytest.fixture
    def scanned_document(self):
        return PdfDocument.from_fragments([[("Scan of page one", 50, 700)]])

    def test_stub_reports_unsupported(self, scanned_document):
        with pytest.raises(OCRUnsupportedError):
            OCRTextExtractor().extract(scanned_document)
        assert OCRTextExtractor.kind == "ocr"

    def test_unsupported_ocr_continues_with_text(self, scanned_document, caplog):
        caplog.set_level(logging.WARNING)
        result = StatementParser().parse_pdf(scanned_document)

        assert result.transactions == []
        assert any("OCR failed" in record.getMessage() for record in caplog.records)

    def test_failing_ocr_engine_continues_with_text(self, scanned_document, caplog):
        caplog.set_level(logging.WARNING)
        result = StatementParser(ocr_extractor=FailingOCR()).parse_pdf(scanned_document)

        assert result.transactions == []
        assert result.document_score == 0
        assert any("engine crashed" in record.getMessage() for record in caplog.records)

    def test_ocr_text_replaces_embedded_text(self, scanned_document):
        ocr = RecordingOCR("2024-03-01 Monthly Service Fee $12.00\n")
        result = StatementParser(ocr_extractor=ocr).parse_pdf(scanned_document)

        assert ocr.calls == 1
        assert result.transactions[0].description == "Monthly Service Fee"

    def test_ocr_not_attempted_for_text_documents(self, statement_pages):
        ocr = RecordingOCR("")
        StatementParser(ocr_extractor=ocr).parse_pdf(PdfDocument.from_fragments(statement_pages))
        assert ocr.calls == 0

    def test_ocr_can_be_disabled(self, scanned_document):
        ocr = RecordingOCR("2024-03-01 Monthly Service Fee $12.00\n")
        parser = StatementParser(ParserSettings(ocr_enabled=False), ocr_extractor=ocr)
        parser.parse_pdf(scanned_document)
        assert ocr.calls == 0


class TestObserver:

    def test_events_go_to_injected_logger(self, caplog):
        caplog.set_level(logging.INFO, logger="test.observer")
        parse_csv_statement(SAMPLE_CSV, logger=logging.getLogger("test.observer"))

        messages = [r.getMessage() for r in caplog.records if r.name == "test.observer"]
        assert any("delimiter=','" in m for m in messages)
        assert any("document_score" in m for m in messages)

    def test_results_do_not_depend_on_logging(self):
        silent = logging.getLogger("test.silent")
        silent.disabled = True
        assert parse_csv_statement(SAMPLE_CSV, logger=silent) == parse_csv_statement(SAMPLE_CSV)


class TestSettings:

    def test_defaults(self):
        settings = load_settings()
        assert settings.line_tolerance == 5.0
        assert settings.header_scan_lines == 15
        assert settings.delimiter_sample_lines == 5
        assert settings.ocr_enabled is True

    def test_load_from_yaml(self, tmp_path):
        config = tmp_path / "parser.yaml"
        config.write_text("line_tolerance: 2\nheader_scan_lines: 1\n")

        settings = load_settings(config)
        assert settings.line_tolerance == 2.0
        assert settings.header_scan_lines == 1

    def test_unknown_keys_rejected(self, tmp_path):
        config = tmp_path / "parser.yaml"
        config.write_text("tolerance: 2\n")

        with pytest.raises(ValidationError):
            load_settings(config)

    def test_header_scan_limit_applies(self, statement_pages):
        result = parse_pdf_statement(statement_pages, settings=ParserSettings(header_scan_lines=1))
        assert result.header.bank == "First National Bank Statement"
        assert result.header.customer_account == "unknown"


class TestStatementFile:

    def test_csv_file(self, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_bytes(SAMPLE_CSV)
        assert len(parse_statement_file(path).transactions) == 2

    @pytest.mark.parametrize("name", ["statement.xlsx", "statement.txt"])
    def test_unsupported_types(self, tmp_path, name):
        path = tmp_path / name
        path.write_bytes(b"data")
        with pytest.raises(ValueError):
            parse_statement_file(path)
