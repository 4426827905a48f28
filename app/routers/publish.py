"""Publish endpoint: produce the HTML that is committed back to the site."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.html_response import HtmlResponse
from app.models.publish_request import PublishRenderRequest
from app.services.page_definitions import get_page_definition
from app.services.preview import render_for_publish

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/publish", tags=["Publish"])


@router.post(
    "/render",
    response_model=HtmlResponse,
    summary="Render publish-ready HTML",
    description=(
        "Returns `html` with every highlight removed when pre-edited HTML is "
        "supplied; otherwise generates `content` onto `base_html`.  One of "
        "the two is required."
    ),
)
@limiter.limit("10/minute")
async def render(request: Request, body: PublishRenderRequest) -> HtmlResponse:
    page_definition = None
    if body.page_definition_id:
        page_definition = get_page_definition(body.page_definition_id)
        if page_definition is None:
            raise HTTPException(
                status_code=404,
                detail=f"Unknown page definition '{body.page_definition_id}'.",
            )

    try:
        html = render_for_publish(
            body.content,
            html=body.html,
            base_html=body.base_html,
            page_definition=page_definition,
        )
    except ValueError as exc:
        logger.warning("Invalid publish request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return HtmlResponse(html=html)
