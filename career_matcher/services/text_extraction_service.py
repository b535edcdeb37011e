"""Plain-text extraction for uploaded CV documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from docx import Document
from pypdf import PdfReader

from career_matcher.errors import UnsupportedFileTypeError, UpstreamError

_LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx")


def get_file_extension(file_path: str) -> str:
    """Return the lower-cased extension of `file_path`, including the dot."""
    return Path(file_path).suffix.lower()


def extract_pdf_text(file_path: str) -> str:
    """Extract text from every page of a PDF file."""
    try:
        reader = PdfReader(file_path)
        collected: List[str] = []
        for page in reader.pages:
            page_text = page.extract_text() or ""
            if page_text:
                collected.append(page_text)
    except Exception as exc:
        raise UpstreamError(f"Failed to extract text from PDF: {exc}") from exc

    return "\n".join(collected).strip()


def extract_docx_text(file_path: str) -> str:
    """Extract paragraph and table text from a DOCX file."""
    try:
        document = Document(file_path)
        parts = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                parts.append(" | ".join(cell.text.strip() for cell in row.cells))
    except Exception as exc:
        raise UpstreamError(f"Failed to extract text from DOCX: {exc}") from exc

    return "\n".join(part for part in parts if part.strip()).strip()


def extract_text(file_path: str, file_extension: Optional[str] = None) -> str:
    """Dispatch to the right extractor for the declared extension."""
    extension = (file_extension or get_file_extension(file_path)).lower()
    if extension == ".pdf":
        text = extract_pdf_text(file_path)
    elif extension == ".docx":
        text = extract_docx_text(file_path)
    else:
        raise UnsupportedFileTypeError()

    _LOGGER.debug("Extracted %d characters from %s", len(text), extension)
    return text
