"""
Document Engine: PyMuPDF boundary for template extraction and generation.

Parsing side:  bytes → page geometry + best-effort text (fail-soft on text).
Rendering side: page draw plans → new PDF bytes.

Templates use a bottom-left origin (PDF user space); PyMuPDF places text with
a top-left origin, so every draw command is flipped against its page height.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from pdf_templates.core.config import settings
from pdf_templates.utils.pdf_extractor import extract_page_texts, join_page_texts

logger = logging.getLogger(__name__)


class DocumentLoadError(RuntimeError):
    """Source document bytes could not be opened as a PDF."""


# ─── Data classes ───────────────────────────────────────────────────────────

@dataclass
class PageGeometry:
    width: float
    height: float


@dataclass
class LoadedDocument:
    """What extraction gets back from the engine."""
    pages: List[PageGeometry]
    full_text: str = ""
    # Per-page text as read by the engine; None when text was unavailable.
    page_texts: Optional[List[str]] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass
class DrawTextCommand:
    """One text run at (x, y) in bottom-left-origin page coordinates."""
    text: str
    x: float
    y: float
    font_name: str
    font_size: float
    bold: bool = False
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class PageDrawPlan:
    width: float
    height: float
    commands: List[DrawTextCommand] = field(default_factory=list)


# ─── Base-14 faces ─────────────────────────────────────────────────────────

# family → (regular, bold) PyMuPDF base-14 font codes
_BASE14_FACES = {
    "helvetica": ("helv", "hebo"),
    "times": ("tiro", "tibo"),
    "times-roman": ("tiro", "tibo"),
    "timesroman": ("tiro", "tibo"),
    "courier": ("cour", "cobo"),
}
_DEFAULT_FACES = _BASE14_FACES["helvetica"]


def select_face(font_name: str, bold: bool) -> str:
    """Map a template font name + weight to a PyMuPDF base-14 font code."""
    key = (font_name or "").strip().lower()
    faces = _BASE14_FACES.get(key)
    if faces is None:
        # "Helvetica-Bold", "Times-Bold" etc. name the family before the dash
        faces = _BASE14_FACES.get(key.split("-", 1)[0], _DEFAULT_FACES)
    return faces[1] if bold else faces[0]


# ─── Engine ────────────────────────────────────────────────────────────────

class PyMuPDFEngine:
    """Document Engine backed by PyMuPDF. Stateless; safe to share."""

    def load_document(self, data: bytes) -> LoadedDocument:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadError(f"Source document unreadable: {e}") from e

        try:
            if doc.page_count == 0:
                raise DocumentLoadError("Source document unreadable: document has no pages")

            pages = [
                PageGeometry(width=page.mediabox.width, height=page.mediabox.height)
                for page in doc
            ]
            page_texts = extract_page_texts(doc)
        finally:
            doc.close()

        logger.info(f"[ENGINE] Loaded document: {len(pages)} page(s)")
        return LoadedDocument(
            pages=pages,
            full_text=join_page_texts(page_texts),
            page_texts=page_texts,
        )

    def build_document(self, plans: List[PageDrawPlan]) -> bytes:
        doc = fitz.open()
        try:
            for page_idx, plan in enumerate(plans):
                page = doc.new_page(width=plan.width, height=plan.height)
                for cmd in plan.commands:
                    page.insert_text(
                        (cmd.x, plan.height - cmd.y),
                        cmd.text,
                        fontname=select_face(cmd.font_name, cmd.bold),
                        fontsize=cmd.font_size,
                        color=cmd.color,
                    )
                logger.debug(
                    f"[BUILD] Page {page_idx + 1}: {len(plan.commands)} text run(s) "
                    f"on {plan.width}x{plan.height}"
                )

            output = doc.tobytes(
                garbage=settings.PDF_SAVE_GARBAGE,
                deflate=settings.PDF_SAVE_DEFLATE,
            )
        finally:
            doc.close()

        logger.info(f"[BUILD] Built {len(plans)} page(s), {len(output)} bytes")
        return output
