# File: backend/pdf_templates/schemas/template.py
import json
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class TemplateVersion(str, Enum):
    """Closed set of template formats. Add a member per new format."""
    V1_0 = "1.0"


class ElementType(str, Enum):
    TEXT = "text"
    PLACEHOLDER = "placeholder"


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class MissingFieldBehavior(str, Enum):
    LEAVE_PLACEHOLDER = "leave_placeholder"
    USE_DEFAULT = "use_default"
    EMPTY_STRING = "empty_string"


class _TemplateModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TemplateColor(_TemplateModel):
    r: float = Field(ge=0, le=1)
    g: float = Field(ge=0, le=1)
    b: float = Field(ge=0, le=1)

    def as_tuple(self):
        return (self.r, self.g, self.b)


class TemplateFont(_TemplateModel):
    name: str
    size: float = Field(gt=0)
    weight: Optional[FontWeight] = None

    @property
    def is_bold(self) -> bool:
        return self.weight == FontWeight.BOLD


class TemplateElement(_TemplateModel):
    type: ElementType
    content: str
    field_name: Optional[str] = Field(default=None, alias="fieldName")
    x: float
    y: float
    font: Optional[TemplateFont] = None
    color: Optional[TemplateColor] = None


class TemplatePage(_TemplateModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    elements: List[TemplateElement] = Field(default_factory=list)


class TemplateField(_TemplateModel):
    name: str
    default_value: str = Field(default="", alias="defaultValue")
    pages: List[int] = Field(default_factory=list)


class TemplateMetadata(_TemplateModel):
    name: Optional[str] = None
    description: Optional[str] = None
    # Extraction always stamps this; externally built templates may omit it.
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    source_page_count: int = Field(ge=1, alias="sourcePageCount")


class TemplateDefaults(_TemplateModel):
    font: Optional[TemplateFont] = None
    color: Optional[TemplateColor] = None
    missing_field_behavior: Optional[MissingFieldBehavior] = Field(
        default=None, alias="missingFieldBehavior"
    )


class Template(_TemplateModel):
    """A serializable multi-page document layout with placeholder fields."""

    version: TemplateVersion = TemplateVersion.V1_0
    metadata: TemplateMetadata
    pages: List[TemplatePage] = Field(min_length=1)
    fields: List[TemplateField] = Field(default_factory=list)
    fonts: Dict[str, TemplateFont] = Field(default_factory=dict)
    defaults: Optional[TemplateDefaults] = None

    def field_by_name(self, name: str) -> Optional[TemplateField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict using the camelCase wire keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Template":
        # Imported lazily: the validator depends on this module's enums.
        from pdf_templates.services.template_validator import parse_template
        return parse_template(data)

    @classmethod
    def from_json(cls, raw: str) -> "Template":
        return cls.from_dict(json.loads(raw))
