"""FastAPI application with lifespan, health, and extraction endpoints."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from news_curator.config import get_settings
from news_curator.extraction import ExtractionError, extract, extract_listing
from news_curator.logging_config import configure_logging
from news_curator.models.content import ErrorKind, Success
from news_curator.models.request import ExtractBody, ListingBody

ERROR_STATUS = {
    ErrorKind.INVALID_URL: 400,
    ErrorKind.UPSTREAM_HTTP_ERROR: 502,
    ErrorKind.TIMEOUT: 408,
    ErrorKind.NO_CONTENT_FOUND: 404,
    ErrorKind.AUTOMATION_UNAVAILABLE: 503,
    ErrorKind.TOOL_UNAVAILABLE: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    yield


app = FastAPI(
    title="News Curator",
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run and local development."""
    return {
        "status": "ok",
        "service": "news-curator",
        "version": "0.1.0",
    }


@app.post("/extract")
async def extract_endpoint(body: ExtractBody):
    """Extract one resource. Failures keep their JSON shape with a mapped status code."""
    outcome = await extract(
        body.url,
        body.type,
        limit=body.limit,
        require_transcript=body.require_transcript,
    )
    if isinstance(outcome, Success):
        return outcome.model_dump(mode="json")
    return JSONResponse(
        status_code=ERROR_STATUS[outcome.error],
        content=outcome.model_dump(mode="json"),
    )


@app.post("/extract/listing")
async def extract_listing_endpoint(body: ListingBody):
    """Scrape a listing page for article entries."""
    try:
        entries = await extract_listing(body.url, body.scrape_config)
    except ExtractionError as exc:
        return JSONResponse(
            status_code=ERROR_STATUS[exc.kind],
            content={"error": exc.kind.value, "message": exc.message},
        )
    return {
        "articles": [entry.model_dump(mode="json") for entry in entries],
        "count": len(entries),
        "url": body.url,
    }


def main() -> None:
    """Run the service under uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("news_curator.app:app", host="0.0.0.0", port=get_settings().port)
