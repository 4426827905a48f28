import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.routers.content import limiter, router as content_router
from app.routers.page_definitions import router as page_definitions_router
from app.routers.preview import router as preview_router
from app.routers.publish import router as publish_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Contentsmith – HTML Content Engine",
    description=(
        "Extracts an editable content model from static HTML, diffs content "
        "models, and writes edits back into the HTML for preview and publishing."
    ),
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(content_router)
app.include_router(preview_router)
app.include_router(publish_router)
app.include_router(page_definitions_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Contentsmith"}
