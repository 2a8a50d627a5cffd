"""
Document text extraction for uploaded resumes.

PDF text comes from PyMuPDF, DOCX from python-docx. The same module renders
PDF pages to PNG for the vision fallback of the AI parser.
"""
import io
import logging
import re
from typing import List, Optional

import fitz  # PyMuPDF
from docx import Document

from ..config import get_settings
from ..exceptions import (
    DocumentExtractionError,
    FileTooLargeError,
    FileTooSmallError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
DOC_TYPE = "application/msword"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_TYPE = "text/plain"

ALLOWED_CONTENT_TYPES = {PDF_TYPE, DOC_TYPE, DOCX_TYPE, TEXT_TYPE}

_EXTENSION_TYPES = {
    ".pdf": PDF_TYPE,
    ".doc": DOC_TYPE,
    ".docx": DOCX_TYPE,
    ".txt": TEXT_TYPE,
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_INLINE_SPACE = re.compile(r"[^\S\n]+")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def resolve_content_type(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Trust the declared type when we support it, otherwise fall back to the extension."""
    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type in ALLOWED_CONTENT_TYPES:
        return content_type
    if filename:
        for extension, guessed in _EXTENSION_TYPES.items():
            if filename.lower().endswith(extension):
                return guessed
    return content_type


def validate_upload(content: bytes, content_type: str, filename: str = "") -> str:
    """Check type and size of an upload. Returns the resolved content type."""
    settings = get_settings()
    resolved = resolve_content_type(content_type, filename)

    if resolved not in ALLOWED_CONTENT_TYPES:
        raise UnsupportedFileTypeError(content_type or "unknown", filename)
    if len(content) > settings.max_upload_bytes:
        raise FileTooLargeError(len(content), settings.max_upload_bytes)
    if len(content) < settings.min_upload_bytes:
        raise FileTooSmallError(len(content), settings.min_upload_bytes)

    logger.info(f"File validation passed: name={filename}, type={resolved}, size={len(content) / 1024:.2f}KB")
    return resolved


def clean_extracted_text(text: str) -> str:
    """Normalize whitespace and strip control characters, keeping line structure."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _INLINE_SPACE.sub(" ", text)
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def extract_text_from_pdf(content: bytes, max_pages: Optional[int] = None) -> str:
    max_pages = max_pages or get_settings().max_pdf_pages
    try:
        pdf_document = fitz.open(stream=content, filetype="pdf")
    except Exception as e:
        raise DocumentExtractionError(
            "PDF file appears to be corrupted or invalid. Please try a different file.",
            {"error": str(e)},
        ) from e

    try:
        if pdf_document.needs_pass:
            raise DocumentExtractionError("PDF is password-protected. Please remove the password and try again.")
        pages = []
        for page_num in range(min(len(pdf_document), max_pages)):
            pages.append(pdf_document[page_num].get_text("text"))
    finally:
        pdf_document.close()

    logger.info(f"PDF extraction result: pages={len(pages)}")
    return clean_extracted_text("\n".join(pages))


def extract_text_from_docx(content: bytes) -> str:
    try:
        document = Document(io.BytesIO(content))
    except Exception as e:
        raise DocumentExtractionError(
            "Failed to parse Word document. The file may be corrupted or in an unsupported format.",
            {"error": str(e)},
        ) from e

    lines = [paragraph.text for paragraph in document.paragraphs]
    # Resumes often keep skills or dates in layout tables
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells if cell.text.strip()))
    return clean_extracted_text("\n".join(lines))


def extract_text(content: bytes, content_type: str, filename: str = "") -> str:
    """
    Extract cleaned text from an uploaded document.

    Raises DocumentExtractionError (or a subclass) when the type is not
    supported or the document cannot be read. Empty text is not an error here;
    scanned PDFs legitimately have none.
    """
    resolved = resolve_content_type(content_type, filename)

    if resolved == PDF_TYPE:
        return extract_text_from_pdf(content)
    if resolved in (DOCX_TYPE, DOC_TYPE):
        return extract_text_from_docx(content)
    if resolved == TEXT_TYPE:
        return clean_extracted_text(content.decode("utf-8", errors="replace"))

    raise UnsupportedFileTypeError(content_type or "unknown", filename)


def pdf_to_images(pdf_bytes: bytes, dpi: int = 150, max_pages: Optional[int] = None) -> List[bytes]:
    """
    Convert PDF to list of PNG images using PyMuPDF (no poppler dependency).

    Args:
        pdf_bytes: Raw PDF file bytes
        dpi: Resolution for conversion (default 150 for good quality without huge size)
        max_pages: Page cap, defaults to the configured maximum

    Returns:
        List of PNG image bytes, one per page
    """
    max_pages = max_pages or get_settings().max_pdf_pages
    images = []
    pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")

    # Scale factor for DPI (default PDF is 72 DPI)
    zoom = dpi / 72.0
    matrix = fitz.Matrix(zoom, zoom)

    try:
        for page_num in range(min(len(pdf_document), max_pages)):
            pix = pdf_document[page_num].get_pixmap(matrix=matrix)
            images.append(pix.tobytes("png"))
    finally:
        pdf_document.close()
    return images
