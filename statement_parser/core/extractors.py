"""
Text extraction strategies for PDF documents.
"""
from abc import ABC, abstractmethod
import logging

from .loader import PdfDocument
from .lines import LINE_TOLERANCE, reconstruct_text

logger = logging.getLogger(__name__)


class OCRUnsupportedError(RuntimeError):
    """Raised when OCR is requested but no OCR engine is available."""


class TextExtractor(ABC):
    """Produces plain document text from a loaded PDF."""

    kind: str = ""

    @abstractmethod
    def extract(self, document: PdfDocument) -> str:
        """Return the document text, one line per visual line."""


class EmbeddedTextExtractor(TextExtractor):
    """Reads the PDF's embedded text layer."""

    kind = "embedded-text"

    def __init__(self, tolerance: float = LINE_TOLERANCE):
        self.tolerance = tolerance

    def extract(self, document: PdfDocument) -> str:
        return reconstruct_text(document.pages, self.tolerance).text


class OCRTextExtractor(TextExtractor):
    """
    Placeholder for image-based extraction of scanned statements.

    No OCR engine is wired in, so every call reports the capability as
    unsupported and callers continue with the embedded text.
    """

    kind = "ocr"

    def extract(self, document: PdfDocument) -> str:
        logger.info("OCR is disabled - only text-based PDFs are supported")
        raise OCRUnsupportedError(
            "OCR is currently disabled. Please use text-based PDFs only."
        )
