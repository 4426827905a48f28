from typing import Optional

from pydantic import BaseModel, Field

from app.models.content import WebsiteContent
from app.models.content_request import MAX_HTML_SIZE


class PublishRenderRequest(BaseModel):
    content: WebsiteContent
    html: Optional[str] = Field(
        default=None,
        max_length=MAX_HTML_SIZE,
        description="Pre-edited HTML; highlights are stripped and the content model is ignored.",
    )
    base_html: Optional[str] = Field(
        default=None,
        max_length=MAX_HTML_SIZE,
        description="Original HTML the content model is generated onto when no pre-edited HTML is given.",
    )
    page_definition_id: Optional[str] = None
