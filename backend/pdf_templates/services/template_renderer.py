"""
Template rendering: resolves placeholder content and turns a validated
Template into per-page draw plans for the Document Engine.

Lookups cascade element → template defaults → built-in fallback, each as its
own function so the precedence can be tested in isolation.
"""

import logging
import re
from typing import Any, List, Mapping, Optional, Union

from pdf_templates.core.config import settings
from pdf_templates.schemas.template import (
    ElementType,
    MissingFieldBehavior,
    Template,
    TemplateColor,
    TemplateDefaults,
    TemplateField,
    TemplateFont,
)
from pdf_templates.services.document_engine import DrawTextCommand, PageDrawPlan
from pdf_templates.services.template_layout import PLACEHOLDER_PATTERN

logger = logging.getLogger(__name__)

FALLBACK_FONT = TemplateFont(name="Helvetica", size=12)
FALLBACK_COLOR = TemplateColor(r=0, g=0, b=0)


def coerce_behavior(value: Union[str, MissingFieldBehavior]) -> MissingFieldBehavior:
    try:
        return MissingFieldBehavior(value)
    except ValueError:
        allowed = ", ".join(b.value for b in MissingFieldBehavior)
        raise ValueError(
            f"Unknown missing field behavior '{value}'. Expected one of: {allowed}"
        ) from None


# ─── Content resolution ────────────────────────────────────────────────────

def resolve_content(
    content: str,
    data: Mapping[str, Any],
    behavior: Union[str, MissingFieldBehavior],
    fields: List[TemplateField],
) -> str:
    """Replace every {{token}} in content. Never raises for unknown tokens.

    A key present in data always wins, even with an empty value. Otherwise:
      use_default       → the field's default_value, or "" if no such field
      empty_string      → ""
      leave_placeholder → the token unchanged
    """
    behavior = coerce_behavior(behavior)

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name in data:
            value = data[name]
            return value if isinstance(value, str) else str(value)
        if behavior == MissingFieldBehavior.USE_DEFAULT:
            for f in fields:
                if f.name == name:
                    return f.default_value
            return ""
        if behavior == MissingFieldBehavior.EMPTY_STRING:
            return ""
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, content)


# ─── Cascades ──────────────────────────────────────────────────────────────

def resolve_font(
    element_font: Optional[TemplateFont],
    defaults: Optional[TemplateDefaults],
) -> TemplateFont:
    if element_font is not None:
        return element_font
    if defaults is not None and defaults.font is not None:
        return defaults.font
    return FALLBACK_FONT


def resolve_color(
    element_color: Optional[TemplateColor],
    defaults: Optional[TemplateDefaults],
) -> TemplateColor:
    if element_color is not None:
        return element_color
    if defaults is not None and defaults.color is not None:
        return defaults.color
    return FALLBACK_COLOR


def resolve_missing_field_behavior(
    override: Optional[Union[str, MissingFieldBehavior]],
    defaults: Optional[TemplateDefaults],
) -> MissingFieldBehavior:
    if override is not None:
        return coerce_behavior(override)
    if defaults is not None and defaults.missing_field_behavior is not None:
        return defaults.missing_field_behavior
    return coerce_behavior(settings.TEMPLATE_MISSING_FIELD_BEHAVIOR)


# ─── Rendering ─────────────────────────────────────────────────────────────

def render_template(
    template: Template,
    data: Optional[Mapping[str, Any]] = None,
    missing_field_behavior: Optional[Union[str, MissingFieldBehavior]] = None,
) -> List[PageDrawPlan]:
    """Walk pages and elements in order, emitting one draw command per element.

    Reads the template only. No wrapping, clipping or collision handling:
    coordinates are used as given.
    """
    data = data or {}
    behavior = resolve_missing_field_behavior(missing_field_behavior, template.defaults)

    plans: List[PageDrawPlan] = []
    for page in template.pages:
        plan = PageDrawPlan(width=page.width, height=page.height)
        for element in page.elements:
            font = resolve_font(element.font, template.defaults)
            color = resolve_color(element.color, template.defaults)

            if element.type == ElementType.PLACEHOLDER:
                text = resolve_content(element.content, data, behavior, template.fields)
            else:
                text = element.content

            plan.commands.append(
                DrawTextCommand(
                    text=text,
                    x=element.x,
                    y=element.y,
                    font_name=font.name,
                    font_size=font.size,
                    bold=font.is_bold,
                    color=color.as_tuple(),
                )
            )
        plans.append(plan)

    logger.info(
        f"[RENDER] {len(plans)} page(s), "
        f"{sum(len(p.commands) for p in plans)} element(s), policy={behavior.value}"
    )
    return plans
