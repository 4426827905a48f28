"""Preview endpoint: patch HTML with pending changes for a live preview."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.html_response import HtmlResponse
from app.models.preview_request import PreviewRequest
from app.services.preview import add_highlights, apply_changes

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(tags=["Preview"])


@router.post(
    "/preview",
    response_model=HtmlResponse,
    summary="Render a preview with pending changes applied",
    description=(
        "Applies each change to the element it resolves to and, unless "
        "`highlight` is false, marks the changed elements with a removable "
        "overlay.  Changes that cannot be resolved are skipped.\n\n"
        "**Note:** highlighted HTML is for display only; use "
        "`POST /publish/render` to obtain publishable HTML."
    ),
)
@limiter.limit("30/minute")
async def preview(request: Request, body: PreviewRequest) -> HtmlResponse:
    logger.info(
        "Preview request received",
        extra={"changes": len(body.changes), "highlight": body.highlight},
    )
    try:
        html = apply_changes(body.html, body.changes, body.section_hints)
        if body.highlight:
            html = add_highlights(html, body.changes, body.section_hints)
    except ValueError as exc:
        logger.warning("Invalid preview request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return HtmlResponse(html=html)
