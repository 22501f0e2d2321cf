"""PDF text extraction for uploaded ESG reports.

Uses pypdfium2 for high-quality text extraction, falling back to pdfplumber
(with table extraction) when pypdfium2 fails or yields too little text.
Pages are emitted as ``Page N:`` blocks so flagged quotes can be located.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pdfplumber
import pypdfium2 as pdfium
from loguru import logger


MIN_CONTENT_LENGTH = 100

log = logger.bind(component="PdfTextExtractor")


@dataclass
class PdfExtractionResult:
    """Outcome of a PDF text extraction attempt."""

    success: bool
    text: str = ""
    page_count: int = 0
    extractor: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "text_length": len(self.text),
            "page_count": self.page_count,
            "extractor": self.extractor,
            "error": self.error,
        }


def _join_pages(pages: List[str]) -> str:
    return "\n\n".join(
        f"Page {number}:\n{text.strip()}"
        for number, text in enumerate(pages, start=1)
        if text and text.strip()
    )


def _extract_with_pdfium(pdf_bytes: bytes) -> List[str]:
    pages: List[str] = []
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        for page in pdf:
            text_page = page.get_textpage()
            pages.append(text_page.get_text_range() or "")
            text_page.close()
            page.close()
    finally:
        pdf.close()
    return pages


def _extract_with_pdfplumber(pdf_bytes: bytes) -> List[str]:
    pages: List[str] = []
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            parts = [page.extract_text() or ""]
            for table in page.extract_tables():
                if table:
                    parts.append(
                        "\n".join(
                            "\t".join(str(cell) if cell else "" for cell in row)
                            for row in table
                        )
                    )
            pages.append("\n".join(p for p in parts if p))
    return pages


def extract_pdf_text(
    pdf_bytes: bytes,
    min_content_length: int = MIN_CONTENT_LENGTH,
) -> PdfExtractionResult:
    """
    Extract text content from PDF bytes.

    Args:
        pdf_bytes: Raw PDF file bytes
        min_content_length: Below this many characters the pypdfium2 result
            is considered sparse and pdfplumber is tried

    Returns:
        PdfExtractionResult; success is False when no text could be extracted
    """
    if not pdf_bytes:
        return PdfExtractionResult(success=False, error="Empty PDF content")

    # Sparse pypdfium2 output is kept in case pdfplumber does no better
    sparse = PdfExtractionResult(success=False, error="No extractable text found in PDF")
    try:
        pages = _extract_with_pdfium(pdf_bytes)
        text = _join_pages(pages)
        if len(text.strip()) >= min_content_length:
            log.debug("PDF extracted with pypdfium2", page_count=len(pages), text_length=len(text))
            return PdfExtractionResult(
                success=True, text=text, page_count=len(pages), extractor="pypdfium2"
            )
        sparse.page_count = len(pages)
        if text:
            sparse = PdfExtractionResult(
                success=True, text=text, page_count=len(pages), extractor="pypdfium2"
            )
    except Exception as e:
        log.debug(f"pypdfium2 extraction failed: {e}, trying pdfplumber")

    try:
        pages = _extract_with_pdfplumber(pdf_bytes)
    except Exception as e:
        if sparse.success:
            return sparse
        error_msg = f"PDF extraction failed with all extractors: {e}"
        log.error(error_msg)
        return PdfExtractionResult(
            success=False, page_count=sparse.page_count, error=error_msg
        )

    text = _join_pages(pages)
    if len(text) > len(sparse.text):
        log.debug("PDF extracted with pdfplumber fallback", page_count=len(pages), text_length=len(text))
        return PdfExtractionResult(
            success=True, text=text, page_count=len(pages), extractor="pdfplumber"
        )

    if not sparse.success:
        sparse.page_count = max(sparse.page_count, len(pages))
    return sparse


def extract_pdf_file(path: str | Path) -> PdfExtractionResult:
    """Read a PDF from disk and extract its text."""
    try:
        pdf_bytes = Path(path).read_bytes()
    except OSError as e:
        return PdfExtractionResult(success=False, error=f"Failed to read {path}: {e}")
    return extract_pdf_text(pdf_bytes)
