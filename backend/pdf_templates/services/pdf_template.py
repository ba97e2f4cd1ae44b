"""
PDF Template codec: derive a Template from a PDF and regenerate PDFs from it.

Extraction (fail-soft on text):
  bytes → engine.load_document → PageTextSource → line layout
        → placeholder recognition + field aggregation → Template

Generation (fail-fast on structure):
  Template → validate → resolve placeholders → draw plans → engine.build_document
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pdf_templates.core.config import settings
from pdf_templates.schemas.template import (
    MissingFieldBehavior,
    Template,
    TemplateColor,
    TemplateDefaults,
    TemplateElement,
    TemplateFont,
    TemplateMetadata,
    TemplatePage,
    TemplateVersion,
)
from pdf_templates.services.document_engine import LoadedDocument, PyMuPDFEngine
from pdf_templates.services.page_text import PageTextSource, get_page_text_source
from pdf_templates.services.template_layout import (
    FieldAggregator,
    build_line_layout,
    classify_line,
)
from pdf_templates.services.template_renderer import render_template
from pdf_templates.services.template_validator import parse_template

logger = logging.getLogger(__name__)


@dataclass
class PdfToTemplateOptions:
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class TemplateToPdfOptions:
    missing_field_behavior: Optional[Union[str, MissingFieldBehavior]] = None


def default_font() -> TemplateFont:
    return TemplateFont(
        name=settings.TEMPLATE_DEFAULT_FONT_NAME,
        size=settings.TEMPLATE_DEFAULT_FONT_SIZE,
    )


def font_key(font: TemplateFont) -> str:
    """Catalog key for a font, e.g. "Helvetica-12"."""
    return f"{font.name}-{font.size:g}"


# ─── Extraction ────────────────────────────────────────────────────────────

def build_template(
    document: LoadedDocument,
    text_source: PageTextSource,
    options: Optional[PdfToTemplateOptions] = None,
) -> Template:
    """Assemble a complete Template from an already-loaded document."""
    options = options or PdfToTemplateOptions()
    font = default_font()

    try:
        page_texts = text_source.page_texts(document)
    except Exception as e:
        logger.warning(f"[EXTRACT] Page text unavailable, continuing without text: {e}")
        page_texts = [""] * document.page_count

    if len(page_texts) != document.page_count:
        logger.warning(
            f"[EXTRACT] Text source returned {len(page_texts)} page text(s) "
            f"for {document.page_count} page(s), continuing without text"
        )
        page_texts = [""] * document.page_count

    aggregator = FieldAggregator()
    pages: List[TemplatePage] = []

    for page_idx, geometry in enumerate(document.pages):
        lines = build_line_layout(page_texts[page_idx], geometry.height)
        elements: List[TemplateElement] = [classify_line(line, font) for line in lines]
        aggregator.add_page([line.text for line in lines], page_idx + 1)

        pages.append(
            TemplatePage(width=geometry.width, height=geometry.height, elements=elements)
        )
        logger.debug(f"[EXTRACT] Page {page_idx + 1}: {len(elements)} element(s)")

    fields = aggregator.fields()
    logger.info(
        f"[EXTRACT] Built template: {len(pages)} page(s), {len(fields)} field(s) "
        f"via {text_source.name or type(text_source).__name__}"
    )

    return Template(
        version=TemplateVersion.V1_0,
        metadata=TemplateMetadata(
            name=options.name,
            description=options.description,
            created_at=datetime.now(timezone.utc).isoformat(),
            source_page_count=document.page_count,
        ),
        pages=pages,
        fields=fields,
        fonts={font_key(font): font},
        defaults=TemplateDefaults(
            font=font,
            color=TemplateColor(r=0, g=0, b=0),
            missing_field_behavior=MissingFieldBehavior.LEAVE_PLACEHOLDER,
        ),
    )


async def pdf_to_template(
    file: bytes,
    options: Optional[PdfToTemplateOptions] = None,
    *,
    engine: Optional[PyMuPDFEngine] = None,
    text_source: Optional[Union[str, PageTextSource]] = None,
) -> Template:
    """Extract a reusable Template from PDF bytes.

    Raises DocumentLoadError only when the PDF itself cannot be read; missing
    or failing text extraction yields pages with no elements.
    """
    engine = engine or PyMuPDFEngine()
    if not isinstance(text_source, PageTextSource):
        text_source = get_page_text_source(text_source)

    document = await asyncio.to_thread(engine.load_document, bytes(file))
    return build_template(document, text_source, options)


# ─── Generation ────────────────────────────────────────────────────────────

async def template_to_pdf(
    template: Union[Template, Mapping[str, Any]],
    data: Optional[Mapping[str, Any]] = None,
    options: Optional[TemplateToPdfOptions] = None,
    *,
    engine: Optional[PyMuPDFEngine] = None,
) -> bytes:
    """Render a Template plus data into new PDF bytes.

    Raises TemplateValidationError before any rendering when the template is
    structurally invalid. Engine build errors propagate unchanged.
    """
    parsed = parse_template(template)
    options = options or TemplateToPdfOptions()
    engine = engine or PyMuPDFEngine()

    plans = render_template(parsed, data or {}, options.missing_field_behavior)
    return await asyncio.to_thread(engine.build_document, plans)


def template_summary(template: Template) -> Dict[str, Any]:
    """Compact overview for logs and the command-line runner."""
    return {
        "name": template.metadata.name,
        "pages": len(template.pages),
        "elements": sum(len(p.elements) for p in template.pages),
        "fields": {f.name: f.pages for f in template.fields},
    }
