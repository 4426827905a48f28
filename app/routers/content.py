"""Content model endpoints: extraction and diffing."""

import logging

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.content import WebsiteContent
from app.models.content_request import DiffRequest, ExtractContentRequest
from app.models.content_response import DiffResponse
from app.services.differ import diff_content
from app.services.extractor import extract
from app.services.page_definitions import resolve_page_definition

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/content", tags=["Content"])


@router.post(
    "/extract",
    response_model=WebsiteContent,
    summary="Extract an editable content model from HTML",
    description=(
        "Parses the HTML document and returns its metadata, sections and "
        "assets.  A page definition is used when one resolves (inline "
        "definition → `page_definition_id` → `html_path` match); otherwise "
        "sections are inferred heuristically.\n\n"
        "Extraction never fails: an unusable document yields a placeholder "
        "model titled *Extraction Failed*."
    ),
)
@limiter.limit("10/minute")
async def extract_content(request: Request, body: ExtractContentRequest) -> WebsiteContent:
    page_definition = resolve_page_definition(
        html_path=body.html_path,
        page_definition_id=body.page_definition_id,
        page_definition=body.page_definition,
    )
    logger.info(
        "Extract request received",
        extra={
            "html_length": len(body.html),
            "page_definition": page_definition.id if page_definition else None,
        },
    )
    return extract(body.html, page_definition)


@router.post(
    "/diff",
    response_model=DiffResponse,
    summary="Diff two content models",
    description=(
        "Returns the ordered field-level changes that turn `previous` into "
        "`updated`: metadata title and description first, then sections in "
        "`previous` order followed by newly added sections."
    ),
)
@limiter.limit("30/minute")
async def diff(request: Request, body: DiffRequest) -> DiffResponse:
    changes = diff_content(body.previous, body.updated)
    return DiffResponse(changes=changes, count=len(changes))
