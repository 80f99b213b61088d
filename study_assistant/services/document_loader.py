"""
PDF page text extraction using PyMuPDF.

Only the leading pages are read; the sampler never looks past the first
five, so opening the rest of a long document would be wasted work.
"""

import logging
from typing import List

import fitz

from study_assistant.exceptions import DocumentUnreadableError
from study_assistant.models.analysis import PageText

logger = logging.getLogger(__name__)

MAX_PAGES_TO_ANALYZE = 5


def load_pages(content: bytes, max_pages: int = MAX_PAGES_TO_ANALYZE) -> List[PageText]:
    """
    Extract text from the first ``max_pages`` pages of an in-memory PDF.

    Args:
        content: Raw PDF bytes
        max_pages: Upper bound on pages read (capped at 5)

    Returns:
        One PageText per page read, in document order. Pages without a text
        layer (scanned images) yield empty text rather than an error.

    Raises:
        DocumentUnreadableError: If the bytes cannot be opened as a PDF
    """
    max_pages = max(1, min(max_pages, MAX_PAGES_TO_ANALYZE))

    try:
        doc = fitz.open(stream=content, filetype="pdf")
    except Exception as e:
        logger.warning(f"Error parsing PDF: {e}")
        raise DocumentUnreadableError("Failed to parse PDF content") from e

    try:
        pages = []
        for page_index in range(min(doc.page_count, max_pages)):
            text = doc[page_index].get_text()
            pages.append(PageText(page_number=page_index + 1, text=text))
        return pages
    except Exception as e:
        logger.warning(f"Error reading PDF pages: {e}")
        raise DocumentUnreadableError("Failed to parse PDF content") from e
    finally:
        doc.close()
