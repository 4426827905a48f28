from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.content import PreviewChange, Section
from app.models.content_request import MAX_HTML_SIZE


class PreviewRequest(BaseModel):
    html: str = Field(min_length=1, max_length=MAX_HTML_SIZE)
    changes: List[PreviewChange]
    section_hints: Optional[List[Section]] = Field(
        default=None,
        description="Sections of the current content model; their stored selectors are tried first.",
    )
    highlight: bool = True
