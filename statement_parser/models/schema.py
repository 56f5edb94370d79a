"""
Pydantic models for parsed bank and credit card statements.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Absence is represented by equality to these sentinels, never by None.
UNKNOWN = "unknown"
ZERO_BALANCE = "0"


class _StatementModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PDFType(str, Enum):
    """Readability classification of a PDF text layer."""
    TEXT = "text"
    SCANNED = "scanned"
    UNREADABLE = "unreadable"


class TextFragment(_StatementModel):
    """A positioned text run on a PDF page (y grows towards the top of the page)."""
    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


class Transaction(_StatementModel):
    """Individual transaction record."""
    date: str = ""
    description: str
    amount: str
    currency: str = "USD"
    row_score: float = Field(default=0.0, ge=0.0, le=1.0)


class StatementHeader(_StatementModel):
    """Statement identity and balances."""
    bank: str = UNKNOWN
    bank_account: str = UNKNOWN
    customer_account: str = UNKNOWN
    statement_date: str = UNKNOWN
    opening_balance: str = ZERO_BALANCE
    closing_balance: str = ZERO_BALANCE
    row_score: float = Field(default=0.0, ge=0.0, le=1.0)


class ReadabilityDiagnostics(_StatementModel):
    """Text-layer metrics used to classify a PDF."""
    text_length: int = Field(default=0, ge=0)
    digit_count: int = Field(default=0, ge=0)
    ascii_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    page_count: int = Field(default=0, ge=0)


class ReadabilityReport(_StatementModel):
    """Inspectable intermediate result of the PDF text stage."""
    diagnostics: ReadabilityDiagnostics
    pdf_type: PDFType
    text: str = ""


class ParsedStatement(_StatementModel):
    """Complete result of one parse invocation."""
    header: StatementHeader = Field(default_factory=StatementHeader)
    transactions: List[Transaction] = Field(default_factory=list)
    document_score: float = 0.0

    @field_validator('document_score')
    @classmethod
    def round_document_score(cls, v):
        """Document scores are reported with 5 decimal places."""
        return round(v, 5)
