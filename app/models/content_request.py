from typing import Optional

from pydantic import BaseModel, Field

from app.models.content import WebsiteContent
from app.models.page_definition import PageDefinition

# Largest HTML document accepted by any endpoint (characters)
MAX_HTML_SIZE = 5 * 1024 * 1024


class ExtractContentRequest(BaseModel):
    html: str = Field(min_length=1, max_length=MAX_HTML_SIZE)
    html_path: Optional[str] = Field(
        default=None,
        description="Repository path of the document, used to match a registered page definition.",
        examples=["index.html"],
    )
    page_definition_id: Optional[str] = None
    page_definition: Optional[PageDefinition] = None
    """Inline definition; takes precedence over *page_definition_id* and *html_path*."""


class DiffRequest(BaseModel):
    previous: WebsiteContent
    updated: WebsiteContent
