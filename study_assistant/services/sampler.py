"""
Page sampling for the analysis prompt.

Builds a bounded excerpt from the first pages of a PDF: pages 1 and 2 are
always included, plus the single longest of the remaining pages
("content heavy"). The excerpt is whitespace-collapsed and capped so the
Gemini prompt stays small regardless of document length.
"""

import re
from typing import List, Optional, Sequence

from study_assistant.models.analysis import PageText

MAX_EXCERPT_CHARS = 4000
MIN_EXCERPT_CHARS = 50
NO_TEXT_SENTINEL = "No readable text content found (possibly parsed as image)."

_WHITESPACE_RUN = re.compile(r"\s+")


def _select_content_heavy(candidates: Sequence[PageText]) -> Optional[PageText]:
    """Return the longest page; the first one wins on a tie."""
    heaviest: Optional[PageText] = None
    max_length = -1
    for page in candidates:
        if page.length > max_length:
            max_length = page.length
            heaviest = page
    return heaviest


def sample(pages: Sequence[PageText]) -> str:
    """
    Build the excerpt sent to Gemini from up to five leading pages.

    Args:
        pages: Pages in document order. The loader caps these at five.

    Returns:
        Excerpt of at most 4000 characters, or NO_TEXT_SENTINEL when fewer
        than 50 characters of text survive whitespace collapsing.
    """
    blocks: List[str] = []

    if len(pages) > 0:
        blocks.append(f"--- Page 1 ---\n{pages[0].text}\n\n")
    if len(pages) > 1:
        blocks.append(f"--- Page 2 ---\n{pages[1].text}\n\n")

    heaviest = _select_content_heavy(pages[2:])
    if heaviest is not None:
        blocks.append(f"--- Page {heaviest.page_number} (Content Heavy) ---\n{heaviest.text}\n\n")

    excerpt = _WHITESPACE_RUN.sub(" ", "".join(blocks)).strip()

    if len(excerpt) < MIN_EXCERPT_CHARS:
        return NO_TEXT_SENTINEL
    return excerpt[:MAX_EXCERPT_CHARS]
