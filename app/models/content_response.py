from typing import List

from pydantic import BaseModel

from app.models.content import PreviewChange


class DiffResponse(BaseModel):
    changes: List[PreviewChange]
    count: int
