# File: backend/pdf_templates/utils/pdf_extractor.py
import logging
from typing import List, Optional

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


def extract_page_texts(doc: fitz.Document) -> Optional[List[str]]:
    """Read the text of every page of an open document.

    Returns None when text cannot be read; callers treat that as "no text".
    """
    try:
        texts = [page.get_text("text") for page in doc]
    except Exception as e:
        logger.warning(f"[ENGINE] Text extraction failed, continuing without text: {e}")
        return None

    logger.info(
        f"[ENGINE] Extracted {sum(len(t) for t in texts)} characters "
        f"from {len(texts)} page(s)"
    )
    return texts


def join_page_texts(page_texts: Optional[List[str]]) -> str:
    """Concatenate per-page text into one best-effort document string."""
    if not page_texts:
        return ""
    full_text = ""
    for text in page_texts:
        if text:
            full_text += text + PAGE_SEPARATOR
    return full_text
