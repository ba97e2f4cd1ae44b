"""
Template validation: fail-fast structural checks run before generation.

Checks run in a fixed order and stop at the first violation:
  template present → version → pages → metadata → sourcePageCount → fields
  → per page (size, elements) → per element (type, content, position)

Token/field correspondence and sourcePageCount == len(pages) are not checked.
"""

import logging
from typing import Any, Mapping, Union

from pydantic import BaseModel, ValidationError

from pdf_templates.schemas.template import ElementType, Template, TemplateVersion

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS = {v.value for v in TemplateVersion}
_ELEMENT_TYPES = {t.value for t in ElementType}


class TemplateValidationError(ValueError):
    """Template is structurally invalid. `rule` names the failed check."""

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule
        self.message = message


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return None


def _as_raw(template: Union[Template, Mapping[str, Any], None]) -> Any:
    if isinstance(template, BaseModel):
        return template.model_dump(mode="json", by_alias=True, exclude_none=True)
    return template


def validate_template(template: Union[Template, Mapping[str, Any], None]) -> None:
    """Raise TemplateValidationError on the first structural violation.

    Accepts the JSON-compatible dict form or a Template model. Has no side
    effects, so validating an already-valid template again is a no-op.
    """
    raw = _as_raw(template)

    if raw is None:
        raise TemplateValidationError("template_required", "Template is required")

    if not isinstance(raw, Mapping):
        raise TemplateValidationError(
            "template_required", f"Template must be an object, got {type(raw).__name__}"
        )

    version = raw.get("version")
    if not isinstance(version, str) or version not in _SUPPORTED_VERSIONS:
        raise TemplateValidationError("version", f"Unsupported template version: {version}")

    pages = raw.get("pages")
    if not isinstance(pages, list) or len(pages) == 0:
        raise TemplateValidationError("pages", "Template must have at least one page")

    metadata = raw.get("metadata")
    if not metadata and not isinstance(metadata, Mapping):
        raise TemplateValidationError("metadata", "Template metadata is required")

    source_page_count = _get(metadata, "sourcePageCount")
    if not _is_number(source_page_count) or source_page_count < 1:
        raise TemplateValidationError(
            "source_page_count",
            "Template metadata.sourcePageCount must be a positive number",
        )

    if not isinstance(raw.get("fields"), list):
        raise TemplateValidationError("fields", "Template fields must be an array")

    for page_idx, page in enumerate(pages):
        if not _is_number(_get(page, "width")) or not _is_number(_get(page, "height")):
            raise TemplateValidationError(
                "page_size", f"Each page must have numeric width and height (page {page_idx + 1})"
            )

        elements = _get(page, "elements")
        if not isinstance(elements, list):
            raise TemplateValidationError(
                "page_elements", f"Each page must have an elements array (page {page_idx + 1})"
            )

        for element in elements:
            element_type = _get(element, "type")
            if not isinstance(element_type, str) or element_type not in _ELEMENT_TYPES:
                raise TemplateValidationError(
                    "element_type", f"Invalid element type: {element_type}"
                )
            if not isinstance(_get(element, "content"), str):
                raise TemplateValidationError(
                    "element_content", "Element content must be a string"
                )
            if not _is_number(_get(element, "x")) or not _is_number(_get(element, "y")):
                raise TemplateValidationError(
                    "element_position", "Element x and y must be numbers"
                )


def parse_template(template: Union[Template, Mapping[str, Any], None]) -> Template:
    """Validate, then build the Template model.

    Model constraints the ordered checks do not cover (font size > 0, color
    channels in [0, 1], ...) are reported with rule "schema".
    """
    validate_template(template)
    if isinstance(template, Template):
        return template

    try:
        return Template.model_validate(template)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        logger.warning(f"[VALIDATE] Schema check failed at {location}: {first['msg']}")
        raise TemplateValidationError(
            "schema", f"Template field '{location}' is invalid: {first['msg']}"
        ) from e
