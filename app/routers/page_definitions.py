"""Read-only access to the page definition registry."""

from typing import List

from fastapi import APIRouter, HTTPException

from app.models.page_definition import PageDefinition
from app.services.page_definitions import get_page_definition, list_page_definitions

router = APIRouter(prefix="/page-definitions", tags=["Page definitions"])


@router.get("", response_model=List[PageDefinition], summary="List registered page definitions")
async def list_definitions() -> List[PageDefinition]:
    return list_page_definitions()


@router.get("/{page_definition_id}", response_model=PageDefinition, summary="Get a page definition")
async def get_definition(page_definition_id: str) -> PageDefinition:
    definition = get_page_definition(page_definition_id)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown page definition '{page_definition_id}'.")
    return definition
