from pydantic import BaseModel


class HtmlResponse(BaseModel):
    html: str
