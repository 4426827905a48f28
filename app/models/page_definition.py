"""Declarative page definitions: plain-data selector maps for known pages.

A :class:`PageDefinition` ties CSS selectors to content-model metadata and
sections.  It is configuration only and can be validated without parsing any
HTML.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.content import SectionType

FieldPrimitiveType = Literal[
    "text",
    "longtext",
    "url",
    "email",
    "number",
    "boolean",
    "image",
    "html",
    "json",
    "list",
    "faq",
]

MetadataGroup = Literal["seo", "branding", "contact", "social", "cta", "technical"]


class FieldConstraint(BaseModel):
    """Editor hints; not enforced during extraction."""

    required: bool = False
    max_length: Optional[int] = Field(default=None, ge=1)
    pattern: Optional[str] = None
    min_items: Optional[int] = Field(default=None, ge=0)
    max_items: Optional[int] = Field(default=None, ge=0)


class FieldDefinition(BaseModel):
    """One editable field; *key* maps into ``Section.content[key]``."""

    key: str = Field(min_length=1)
    label: str
    type: FieldPrimitiveType = "text"
    description: Optional[str] = None
    attribute_name: Optional[str] = None
    absolute_selector: Optional[str] = None
    relative_selector: Optional[str] = None
    constraints: Optional[FieldConstraint] = None

    @model_validator(mode="after")
    def _exactly_one_selector(self) -> "FieldDefinition":
        if bool(self.absolute_selector) == bool(self.relative_selector):
            raise ValueError(
                f"Field '{self.key}' needs exactly one of absolute_selector or relative_selector."
            )
        return self


class MetadataFieldDefinition(BaseModel):
    """Maps into ``WebsiteMetadata``; entries without a selector are auto-managed."""

    metadata_key: str
    label: str
    description: Optional[str] = None
    group: Optional[MetadataGroup] = None
    type: FieldPrimitiveType = "text"
    attribute_name: Optional[str] = None
    absolute_selector: Optional[str] = None


class SectionDefinition(BaseModel):
    id: str = Field(min_length=1)
    label: str
    type: SectionType = "content"
    absolute_selector: str = Field(min_length=1)
    fields: List[FieldDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_field_keys(self) -> "SectionDefinition":
        keys = [f.key for f in self.fields]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"Section '{self.id}' repeats field keys: {', '.join(duplicates)}")
        return self

    def field(self, key: str) -> Optional[FieldDefinition]:
        for field in self.fields:
            if field.key == key:
                return field
        return None


class PageDefinition(BaseModel):
    id: str = Field(min_length=1)
    label: str
    description: Optional[str] = None
    html_path: Optional[str] = None
    metadata: List[MetadataFieldDefinition] = Field(default_factory=list)
    sections: List[SectionDefinition] = Field(default_factory=list)
    enable_heuristic_fallback: bool = True
    """When true, heuristic extraction runs after the configured sections and
    may append sections the definition does not cover."""

    @model_validator(mode="after")
    def _unique_section_ids(self) -> "PageDefinition":
        ids = [s.id for s in self.sections]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Page '{self.id}' repeats section ids: {', '.join(duplicates)}")
        return self

    def section(self, section_id: str) -> Optional[SectionDefinition]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


class SiteDefinitionConfig(BaseModel):
    pages: Dict[str, PageDefinition] = Field(default_factory=dict)
    default_page_id: Optional[str] = None

    @model_validator(mode="after")
    def _default_is_registered(self) -> "SiteDefinitionConfig":
        if self.default_page_id and self.default_page_id not in self.pages:
            raise ValueError(f"default_page_id '{self.default_page_id}' is not a registered page.")
        return self
