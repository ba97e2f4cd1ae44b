"""
Template layout: turns per-page text into template elements and fields.

1. Split each page's text into non-empty lines with synthetic positions
2. Tag each line as TEXT or PLACEHOLDER; name the field only when the whole
   line is a single {{token}}
3. Independently collect every {{token}} occurrence into page-indexed fields
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from pdf_templates.core.config import settings
from pdf_templates.schemas.template import (
    ElementType,
    TemplateElement,
    TemplateField,
    TemplateFont,
)

logger = logging.getLogger(__name__)

# ASCII word characters only, e.g. {{firstName}} or {{line_2}}
PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}", re.ASCII)
_WHOLE_LINE_PLACEHOLDER = re.compile(r"^\{\{(\w+)\}\}$", re.ASCII)


# ─── Step 1: Line layout ───────────────────────────────────────────────────

@dataclass
class LayoutLine:
    text: str  # trimmed
    x: float
    y: float


def build_line_layout(
    page_text: str,
    page_height: float,
    margin: Optional[float] = None,
    line_height: Optional[float] = None,
) -> List[LayoutLine]:
    """Stack the page's non-empty lines top-down from (margin, height - margin)."""
    margin = settings.TEMPLATE_MARGIN if margin is None else margin
    line_height = settings.TEMPLATE_LINE_HEIGHT if line_height is None else line_height

    lines: List[LayoutLine] = []
    if not page_text:
        return lines

    y_pos = page_height - margin
    for raw in page_text.split("\n"):
        text = raw.strip()
        if not text:
            continue
        lines.append(LayoutLine(text=text, x=margin, y=y_pos))
        y_pos -= line_height
    return lines


# ─── Step 2: Placeholder recognition ───────────────────────────────────────

def has_placeholder(line: str) -> bool:
    return PLACEHOLDER_PATTERN.search(line) is not None


def extract_field_name(line: str) -> Optional[str]:
    """Field name when the trimmed line is exactly one token, else None."""
    match = _WHOLE_LINE_PLACEHOLDER.match(line.strip())
    return match.group(1) if match else None


def find_placeholders(content: str) -> List[str]:
    """Every token name in content, in order, repeats included."""
    return PLACEHOLDER_PATTERN.findall(content)


def classify_line(line: LayoutLine, font: Optional[TemplateFont] = None) -> TemplateElement:
    """Build the element for one laid-out line.

    A line like "Hello {{name}}, welcome" is PLACEHOLDER-typed but carries no
    field_name; field_name means the element *is* a single field.
    """
    if has_placeholder(line.text):
        return TemplateElement(
            type=ElementType.PLACEHOLDER,
            content=line.text,
            field_name=extract_field_name(line.text),
            x=line.x,
            y=line.y,
            font=font,
        )
    return TemplateElement(
        type=ElementType.TEXT,
        content=line.text,
        x=line.x,
        y=line.y,
        font=font,
    )


# ─── Step 3: Field aggregation ─────────────────────────────────────────────

class FieldAggregator:
    """Collects every placeholder occurrence into a page-indexed field list.

    Fields are emitted in first-seen order with ascending, unique page numbers.
    """

    def __init__(self):
        self._pages: Dict[str, Set[int]] = {}
        self._defaults: Dict[str, str] = {}

    def add_line(self, line: str, page_number: int) -> None:
        for name in find_placeholders(line):
            if name not in self._pages:
                self._pages[name] = set()
                self._defaults[name] = ""
            self._pages[name].add(page_number)

    def add_page(self, lines: List[str], page_number: int) -> None:
        for line in lines:
            self.add_line(line, page_number)

    def fields(self) -> List[TemplateField]:
        result = [
            TemplateField(
                name=name,
                default_value=self._defaults[name],
                pages=sorted(pages),
            )
            for name, pages in self._pages.items()
        ]
        logger.debug(f"[FIELDS] Aggregated {len(result)} field(s)")
        return result

    def __len__(self) -> int:
        return len(self._pages)
