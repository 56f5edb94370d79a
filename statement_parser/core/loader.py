"""
PDF loading and positioned text extraction using pdfplumber.
"""
import io
import re
import pdfplumber
from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from ..models.schema import TextFragment

logger = logging.getLogger(__name__)

PdfSource = Union[Path, str, bytes]


class PageData:
    """Represents a page with its positioned text fragments."""
    def __init__(self, page_num: int, width: float, height: float,
                 fragments: List[TextFragment]):
        self.page_num = page_num
        self.width = width
        self.height = height
        self.fragments = fragments

    def __repr__(self):
        return f"PageData(page_num={self.page_num}, fragments={len(self.fragments)})"


class PdfDocument:
    """Loaded pages plus the raw source, handed to text extractors."""
    def __init__(self, pages: List[PageData], source: Optional[PdfSource] = None):
        self.pages = pages
        self.source = source

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @classmethod
    def from_fragments(cls, page_fragments: Sequence[Sequence]) -> "PdfDocument":
        """
        Build a document from per-page fragments.

        Each fragment may be a TextFragment or a ``(text, x, y)`` tuple.
        """
        pages = []
        for i, fragments in enumerate(page_fragments, 1):
            pages.append(PageData(
                page_num=i,
                width=0.0,
                height=0.0,
                fragments=[_coerce_fragment(f) for f in fragments]
            ))
        return cls(pages)


def _coerce_fragment(fragment) -> TextFragment:
    if isinstance(fragment, TextFragment):
        return fragment
    text, x, y = fragment[:3]
    return TextFragment(text=str(text), x=float(x), y=float(y))


class PDFLoader:
    """Handles PDF loading and fragment extraction."""

    def __init__(self, source: PdfSource):
        self.source = source
        self._pdf = None
        self._pages = []

    def load(self) -> List[PageData]:
        """
        Load the PDF and extract fragments from all pages.

        A document without a retrievable text layer yields an empty list
        instead of raising.
        """
        if self._pages:
            return self._pages

        try:
            if isinstance(self.source, bytes):
                self._pdf = pdfplumber.open(io.BytesIO(self.source))
            else:
                self._pdf = pdfplumber.open(self.source)
            logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")

            for i, page in enumerate(self._pdf.pages, 1):
                words_data = page.extract_words(
                    x_tolerance=1,
                    y_tolerance=2,
                    keep_blank_chars=False,
                )

                fragments = []
                for word_data in words_data:
                    text = self._normalize_text(word_data.get('text', ''))
                    if not text:
                        continue
                    x0 = word_data.get('x0', 0)
                    top = word_data.get('top', 0)
                    bottom = word_data.get('bottom', 0)
                    # pdfplumber measures from the top; fragments use PDF space
                    fragments.append(TextFragment(
                        text=text,
                        x=x0,
                        y=page.height - bottom,
                        width=word_data.get('x1', x0) - x0,
                        height=bottom - top
                    ))

                self._pages.append(PageData(
                    page_num=i,
                    width=page.width,
                    height=page.height,
                    fragments=fragments
                ))
                logger.debug(f"Page {i}: {len(fragments)} fragments extracted")

        except Exception as e:
            logger.error(f"Error loading PDF: {e}")
            self._pages = []

        return self._pages

    def load_document(self) -> PdfDocument:
        """Load pages and wrap them together with their source."""
        return PdfDocument(self.load(), source=self.source)

    def _normalize_text(self, text: str) -> str:
        """Normalize text by handling ligatures and multiple spaces."""
        ligatures = {
            'ﬁ': 'fi',
            'ﬂ': 'fl',
            'ﬀ': 'ff',
            'ﬃ': 'ffi',
            'ﬄ': 'ffl',
            'ﬆ': 'st',
            'ﬅ': 'st'
        }

        for ligature, replacement in ligatures.items():
            text = text.replace(ligature, replacement)

        return re.sub(r'\s+', ' ', text).strip()

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None
