"""
Per-page text strategies for template extraction.

PyMuPDF-independent: strategies only see a LoadedDocument. The default
strategy splits the whole-document text proportionally by character count,
which approximates page boundaries rather than detecting them.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from pdf_templates.core.config import settings
from pdf_templates.services.document_engine import LoadedDocument

logger = logging.getLogger(__name__)


def apportion_text(full_text: str, page_count: int) -> List[str]:
    """Split text into page_count trimmed slices of equal character share.

    Page i receives full_text[floor(i*L/N) : floor((i+1)*L/N)].
    """
    if page_count < 1:
        raise ValueError(f"page_count must be >= 1, got {page_count}")

    length = len(full_text or "")
    if length == 0:
        return [""] * page_count

    slices = []
    for i in range(page_count):
        start = (i * length) // page_count
        end = ((i + 1) * length) // page_count
        slices.append(full_text[start:end].strip())
    return slices


class PageTextSource(ABC):
    """Strategy that yields one text string per page of a loaded document."""

    name: str = ""

    @abstractmethod
    def page_texts(self, document: LoadedDocument) -> List[str]:
        ...


class ProportionalPageTextSource(PageTextSource):
    name = "proportional"

    def page_texts(self, document: LoadedDocument) -> List[str]:
        texts = apportion_text(document.full_text, document.page_count)
        logger.debug(
            f"[APPORTION] {len(document.full_text)} chars over {document.page_count} page(s)"
        )
        return texts


class NativePageTextSource(PageTextSource):
    """Uses the engine's own per-page text when it reported any."""

    name = "native"

    def page_texts(self, document: LoadedDocument) -> List[str]:
        native = document.page_texts
        if native is None or len(native) != document.page_count:
            logger.info("[APPORTION] Native page text unavailable, apportioning instead")
            return ProportionalPageTextSource().page_texts(document)
        return [(text or "").strip() for text in native]


_TEXT_SOURCES = {
    ProportionalPageTextSource.name: ProportionalPageTextSource,
    NativePageTextSource.name: NativePageTextSource,
}


def get_page_text_source(name: Optional[str] = None) -> PageTextSource:
    """Look up a strategy by name; defaults to settings.TEMPLATE_TEXT_SOURCE."""
    key = (name or settings.TEMPLATE_TEXT_SOURCE).strip().lower()
    source_cls = _TEXT_SOURCES.get(key)
    if source_cls is None:
        raise ValueError(
            f"Unknown page text source '{key}'. "
            f"Expected one of: {', '.join(sorted(_TEXT_SOURCES))}"
        )
    return source_cls()
