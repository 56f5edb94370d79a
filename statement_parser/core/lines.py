"""
Reading-order reconstruction of positioned PDF text.
"""
import re
from typing import List, Sequence
import logging

from .loader import PageData
from ..models.schema import TextFragment, ReadabilityDiagnostics

logger = logging.getLogger(__name__)

LINE_TOLERANCE = 5.0

_PRINTABLE_ASCII = re.compile(r'[\x20-\x7E]')
_DIGIT = re.compile(r'\d')


class ReconstructedText:
    """Document text rebuilt from fragments, with its diagnostics."""
    def __init__(self, text: str, lines: List[str], diagnostics: ReadabilityDiagnostics):
        self.text = text
        self.lines = lines
        self.diagnostics = diagnostics

    def __repr__(self):
        return f"ReconstructedText(lines={len(self.lines)}, diagnostics={self.diagnostics!r})"


def group_fragments_into_lines(fragments: Sequence[TextFragment],
                               tolerance: float = LINE_TOLERANCE) -> List[List[TextFragment]]:
    """
    Cluster fragments into visual lines, top of page first.

    A new line starts whenever a fragment's Y differs from the current
    line's anchor Y by more than ``tolerance``. Fragments inside a line are
    ordered left to right.
    """
    if not fragments:
        return []

    sorted_fragments = sorted(fragments, key=lambda f: (-f.y, f.x))

    lines = []
    current_line = []
    anchor_y = sorted_fragments[0].y

    for fragment in sorted_fragments:
        if abs(anchor_y - fragment.y) > tolerance:
            if current_line:
                lines.append(current_line)
            current_line = [fragment]
            anchor_y = fragment.y
        else:
            current_line.append(fragment)

    if current_line:
        lines.append(current_line)

    return [sorted(line, key=lambda f: f.x) for line in lines]


def join_fragments(fragments: Sequence[TextFragment]) -> str:
    """Join a line's fragments, adding a single space only where neither side has one."""
    line_text = ""
    for fragment in fragments:
        if not fragment.text:
            continue
        if line_text and not line_text[-1].isspace() and not fragment.text[0].isspace():
            line_text += " "
        line_text += fragment.text
    return line_text.strip()


def reconstruct_page(page: PageData, tolerance: float = LINE_TOLERANCE) -> List[str]:
    """Return the non-empty text lines of a page in reading order."""
    lines = []
    for line_fragments in group_fragments_into_lines(page.fragments, tolerance):
        text = join_fragments(line_fragments)
        if text:
            lines.append(text)
    return lines


def compute_diagnostics(text: str, page_count: int) -> ReadabilityDiagnostics:
    """Compute length, digit density and printable-ASCII ratio of ``text``."""
    text_length = len(text)
    digit_count = len(_DIGIT.findall(text))
    ascii_count = len(_PRINTABLE_ASCII.findall(text))
    ascii_ratio = round(ascii_count / text_length, 3) if text_length > 0 else 0.0

    return ReadabilityDiagnostics(
        text_length=text_length,
        digit_count=digit_count,
        ascii_ratio=ascii_ratio,
        page_count=page_count
    )


def reconstruct_text(pages: Sequence[PageData],
                     tolerance: float = LINE_TOLERANCE) -> ReconstructedText:
    """
    Rebuild the whole document's text, pages separated by a blank line.

    Args:
        pages: Pages in document order
        tolerance: Maximum Y drift for fragments on the same line

    Returns:
        ReconstructedText with the concatenated text, its lines and diagnostics
    """
    text = ""
    all_lines = []

    for i, page in enumerate(pages):
        page_lines = reconstruct_page(page, tolerance)
        for line in page_lines:
            text += line + "\n"
        all_lines.extend(page_lines)

        if i < len(pages) - 1:
            text += "\n"

        logger.debug(f"Page {page.page_num}: {len(page_lines)} lines reconstructed")

    diagnostics = compute_diagnostics(text, len(pages))
    logger.info(
        f"Text reconstruction: pages={diagnostics.page_count} "
        f"length={diagnostics.text_length} digits={diagnostics.digit_count} "
        f"ascii_ratio={diagnostics.ascii_ratio}"
    )

    return ReconstructedText(text, all_lines, diagnostics)
