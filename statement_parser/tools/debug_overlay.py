"""
Debug overlay tool for visual QA of reading-order reconstruction.
"""
from pathlib import Path
from typing import List, Sequence, Tuple
import logging
from PIL import Image, ImageDraw, ImageFont
import fitz  # PyMuPDF

from ..core.loader import PDFLoader, PageData
from ..core.lines import LINE_TOLERANCE, group_fragments_into_lines
from ..models.schema import TextFragment

logger = logging.getLogger(__name__)

LINE_COLORS = [
    (0, 150, 255, 160),
    (255, 120, 0, 160),
    (0, 200, 90, 160),
    (220, 0, 120, 160),
]


def assign_line_numbers(fragments: Sequence[TextFragment],
                        tolerance: float = LINE_TOLERANCE) -> List[Tuple[int, TextFragment]]:
    """Pair every fragment with the index of the reconstructed line it falls on."""
    numbered = []
    for line_no, line in enumerate(group_fragments_into_lines(fragments, tolerance)):
        numbered.extend((line_no, fragment) for fragment in line)
    return numbered


def _load_font(size: int):
    try:
        return ImageFont.truetype("arial.ttf", size)
    except OSError:
        return ImageFont.load_default()


class DebugOverlay:
    """Creates visual debug overlays showing how fragments were grouped into lines."""

    def __init__(self, pdf_path: Path, tolerance: float = LINE_TOLERANCE):
        self.pdf_path = pdf_path
        self.tolerance = tolerance

        self.loader = PDFLoader(pdf_path)
        self.pages = self.loader.load()

        # Load PDF with PyMuPDF for rendering
        self.pdf_doc = fitz.open(str(pdf_path))

    def create_overlays(self, output_dir: Path):
        """
        Create debug overlay images for all pages.

        Args:
            output_dir: Directory to save overlay images
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        for page_data in self.pages:
            page_num = page_data.page_num

            pdf_page = self.pdf_doc[page_num - 1]
            mat = fitz.Matrix(2.0, 2.0)  # 2x zoom for better visibility
            pix = pdf_page.get_pixmap(matrix=mat)
            img = Image.frombytes("RGB", [pix.width, pix.height], pix.samples)

            overlay = self._create_page_overlay(page_data, img.size)
            combined = Image.alpha_composite(img.convert("RGBA"), overlay)

            output_path = output_dir / f"page_{page_num:02d}_overlay.png"
            combined.save(output_path)
            logger.info(f"Created overlay: {output_path}")

    def _create_page_overlay(self, page_data: PageData, img_size: Tuple[int, int]) -> Image.Image:
        """Draw fragment boxes coloured by line, with the line number at each line start."""
        overlay = Image.new("RGBA", img_size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        font = _load_font(8)

        scale_x = img_size[0] / page_data.width
        scale_y = img_size[1] / page_data.height

        labelled = set()
        for line_no, fragment in assign_line_numbers(page_data.fragments, self.tolerance):
            # Fragment y is measured from the bottom of the page
            x0 = int(fragment.x * scale_x)
            x1 = int((fragment.x + fragment.width) * scale_x)
            y0 = int((page_data.height - fragment.y - fragment.height) * scale_y)
            y1 = int((page_data.height - fragment.y) * scale_y)

            color = LINE_COLORS[line_no % len(LINE_COLORS)]
            draw.rectangle([x0, y0, x1, y1], outline=color, width=1)

            if line_no not in labelled:
                draw.text((max(x0 - 20, 0), y0), str(line_no + 1), fill=color, font=font)
                labelled.add(line_no)

        return overlay

    def close(self):
        """Close resources."""
        self.loader.close()
        self.pdf_doc.close()


def create_debug_overlay(pdf_path: Path, output_dir: Path, tolerance: float = LINE_TOLERANCE):
    """
    Create debug overlay images for a PDF.

    Args:
        pdf_path: Path to PDF file
        output_dir: Directory to save overlay images
        tolerance: Line grouping tolerance used by the parser
    """
    overlay = DebugOverlay(pdf_path, tolerance)
    try:
        overlay.create_overlays(output_dir)
    finally:
        overlay.close()
