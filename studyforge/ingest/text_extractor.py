"""
Text extraction from the supported document formats.

Converts PDF, DOCX, TXT and MD files into the plain source text the
orchestrator works on. Extraction failures are reported as
ExtractionError; an empty result is returned as "" and treated by the
orchestrator exactly like "no document loaded".
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict

from studyforge.core.exceptions import ExtractionError
from studyforge.core.logging import get_logger

logger = get_logger(__name__)

MAX_FILE_SIZE = 50_000_000  # 50MB

SUPPORTED_SUFFIXES = (".pdf", ".docx", ".txt", ".md")


def clean_text(text: str) -> str:
    """Normalise whitespace while keeping paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\x00", "")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


class TextExtractor:
    """
    Extract text from a document.

    Supports:
    - PDF (via PyMuPDF)
    - DOCX (via python-docx)
    - TXT/MD (direct read)
    """

    def __init__(self) -> None:
        self._fitz: Any = None

    @property
    def fitz(self) -> Any:
        """Lazy-load PyMuPDF."""
        if self._fitz is None:
            try:
                import fitz
            except ImportError:
                raise ImportError(
                    "PyMuPDF is required for PDF processing. "
                    "Install with: pip install pymupdf"
                )
            fitz.TOOLS.mupdf_display_errors(False)
            self._fitz = fitz
        return self._fitz

    def extract(self, file_path: Path) -> str:
        """
        Extract text from a document.

        Args:
            file_path: Path to the document

        Returns:
            Extracted text ("" if the document has no text)

        Raises:
            ExtractionError: If the file is missing, too large, of an
                unsupported format, or cannot be parsed
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise ExtractionError(f"File not found: {file_path.name}")

        suffix = file_path.suffix.lower()
        extractors: Dict[str, Callable[[Path], str]] = {
            ".pdf": self._extract_pdf,
            ".docx": self._extract_docx,
            ".txt": self._extract_text,
            ".md": self._extract_text,
        }
        extractor = extractors.get(suffix)
        if extractor is None:
            raise ExtractionError(f"Unsupported file format: {suffix or '(none)'}")

        if file_path.stat().st_size > MAX_FILE_SIZE:
            raise ExtractionError(
                f"File too large: {file_path.name}",
                how_to_fix=["Split the document and load one part at a time"],
            )

        try:
            text = extractor(file_path)
        except ImportError:
            raise
        except Exception as e:
            raise ExtractionError(f"Could not read {file_path.name}: {e}") from e

        text = clean_text(text)
        logger.info("Extracted document text", file=file_path.name, chars=len(text))
        return text

    def _extract_pdf(self, file_path: Path) -> str:
        """Extract text page by page from a PDF."""
        pages = []
        with self.fitz.open(file_path) as doc:
            for page in doc:
                page_text = page.get_text("text")
                if page_text.strip():
                    pages.append(page_text)

        text = "\n\n".join(pages)
        # Drop bare page numbers
        return re.sub(r"\n\d+\n", "\n", text)

    def _extract_docx(self, file_path: Path) -> str:
        """Extract text from DOCX."""
        try:
            from docx import Document
        except ImportError:
            raise ImportError(
                "python-docx is required for DOCX processing. "
                "Install with: pip install python-docx"
            )

        doc = Document(file_path)
        texts = []
        for para in doc.paragraphs:
            text = para.text.strip()
            if text:
                texts.append(self._format_paragraph(para, text))

        return "\n\n".join(texts)

    @staticmethod
    def _format_paragraph(para: Any, text: str) -> str:
        """Prefix headings with markdown hashes so structure survives."""
        style = para.style.name if para.style else ""
        if "Heading" not in style:
            return text

        match = re.search(r"(\d)", style)
        level = int(match.group(1)) if match else 1
        return "#" * level + " " + text

    @staticmethod
    def _extract_text(file_path: Path) -> str:
        """Extract text from plain text files."""
        with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
