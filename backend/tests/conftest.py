import os
import sys
from typing import List, Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import fitz

from pdf_templates.services.document_engine import LoadedDocument, PageGeometry


def make_pdf(pages: List[List[str]], width: float = 612, height: float = 792) -> bytes:
    """Build a PDF in memory: one page per list, one text line per string."""
    doc = fitz.open()
    for page_lines in pages:
        page = doc.new_page(width=width, height=height)
        y = 60
        for text in page_lines:
            page.insert_text((40, y), text, fontname="helv", fontsize=12)
            y += 20
    data = doc.tobytes()
    doc.close()
    return data


class StubEngine:
    """Engine double that returns a fixed LoadedDocument and records builds."""

    def __init__(self, document: Optional[LoadedDocument] = None):
        self.document = document
        self.built = []

    def load_document(self, data: bytes) -> LoadedDocument:
        return self.document

    def build_document(self, plans) -> bytes:
        self.built.append(plans)
        return b"%PDF-stub"


def loaded(page_texts: List[str], width: float = 612, height: float = 792) -> LoadedDocument:
    """LoadedDocument with exact per-page text and matching full text."""
    return LoadedDocument(
        pages=[PageGeometry(width=width, height=height) for _ in page_texts],
        full_text="".join(page_texts),
        page_texts=list(page_texts),
    )


@pytest.fixture
def valid_template_dict():
    return {
        "version": "1.0",
        "metadata": {"createdAt": "2025-01-15T00:00:00+00:00", "sourcePageCount": 1},
        "pages": [
            {
                "width": 612,
                "height": 792,
                "elements": [
                    {"type": "text", "content": "Hello", "x": 0, "y": 0},
                ],
            }
        ],
        "fields": [],
        "fonts": {},
    }
