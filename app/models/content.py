"""Content model shared by the extractor, differ, generator and preview."""

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "2.0"

SectionType = Literal[
    "hero",
    "content",
    "list",
    "contact",
    "navigation",
    "footer",
    "article",
    "sidebar",
    "main",
    "orphan",
    "custom",
]
SECTION_TYPES = frozenset(get_args(SectionType))

ChangeType = Literal["add", "remove", "update"]
ChangeSource = Literal["manual", "ai"]

# Pseudo section id used by the differ for site-level metadata changes
METADATA_SECTION_ID = "metadata"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _CamelModel(BaseModel):
    """Base model serialised with camelCase keys; accepts snake_case on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WebsiteMetadata(_CamelModel):
    """Site-level fields; page definitions may contribute extra keys."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    description: str = ""
    last_modified: str = Field(default_factory=_utc_now)
    schema_version: str = SCHEMA_VERSION


class Section(_CamelModel):
    """One editable region of a page."""

    id: str
    type: SectionType = "content"
    label: str = ""
    content: Dict[str, Any] = Field(default_factory=dict)
    selector: Optional[str] = None


class AssetLink(_CamelModel):
    text: str = ""
    url: str


class Assets(_CamelModel):
    """Read-only summary regenerated on every extraction."""

    images: List[str] = Field(default_factory=list)
    links: List[AssetLink] = Field(default_factory=list)


class WebsiteContent(_CamelModel):
    metadata: WebsiteMetadata = Field(default_factory=WebsiteMetadata)
    sections: List[Section] = Field(default_factory=list)
    assets: Assets = Field(default_factory=Assets)

    def section(self, section_id: str) -> Optional[Section]:
        """Return the first section with *section_id*, or *None*."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def with_field(self, section_id: str, field: str, value: Any) -> "WebsiteContent":
        """Return a copy of this model with one section field replaced.

        A *value* of ``None`` removes the field.  The receiver is never mutated.

        Raises:
            ValueError: if no section has *section_id*.
        """
        updated = self.model_copy(deep=True)
        target = updated.section(section_id)
        if target is None:
            raise ValueError(f"Unknown section '{section_id}'.")
        if value is None:
            target.content.pop(field, None)
        else:
            target.content[field] = deepcopy(value)
        return updated


class PreviewChange(_CamelModel):
    """One field-level difference between two content snapshots."""

    section_id: str
    section_label: str = ""
    field: str
    change_type: ChangeType
    current_value: Any = None
    proposed_value: Any = None
    source: Optional[ChangeSource] = None
    timestamp: Optional[str] = None

    @property
    def change_id(self) -> str:
        return f"{self.section_id}-{self.field}"
