"""Tests for the extraction endpoints and their status-code mapping."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from news_curator.app import app
from news_curator.extraction.errors import ExtractionTimeout, InvalidUrl
from news_curator.models.content import ErrorKind, ExtractedRecord, Failure, Success


@pytest.fixture
def client():
    """Create a TestClient scoped to this module (not session-scoped conftest)."""
    return TestClient(app)


def _record(**overrides) -> ExtractedRecord:
    fields = {"title": "T", "body": "hello", "source_url": "https://x.com/alice/status/1"}
    fields.update(overrides)
    return ExtractedRecord(**fields)


def test_extract_success(client: TestClient):
    """POST /extract returns 200 with the Success JSON."""
    mock_extract = AsyncMock(return_value=Success(record=_record(author="@alice")))
    with patch("news_curator.app.extract", mock_extract):
        response = client.post("/extract", json={"url": "https://x.com/alice/status/1", "type": "twitter"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["record"]["author"] == "@alice"
    assert body["record"]["body"] == "hello"


def test_extract_passes_camel_case_fields(client: TestClient):
    """limit and requireTranscript are forwarded to the orchestrator."""
    mock_extract = AsyncMock(return_value=Success(record=_record()))
    with patch("news_curator.app.extract", mock_extract):
        client.post(
            "/extract",
            json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "limit": 5, "requireTranscript": True},
        )

    mock_extract.assert_awaited_once_with(
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        None,
        limit=5,
        require_transcript=True,
    )


@pytest.mark.parametrize(
    "kind,status",
    [
        (ErrorKind.INVALID_URL, 400),
        (ErrorKind.UPSTREAM_HTTP_ERROR, 502),
        (ErrorKind.TIMEOUT, 408),
        (ErrorKind.NO_CONTENT_FOUND, 404),
        (ErrorKind.AUTOMATION_UNAVAILABLE, 503),
        (ErrorKind.TOOL_UNAVAILABLE, 503),
    ],
)
def test_extract_failure_status_mapping(client: TestClient, kind: ErrorKind, status: int):
    """Each failure kind maps to its HTTP status with the Failure JSON body."""
    mock_extract = AsyncMock(return_value=Failure(error=kind, message="boom"))
    with patch("news_curator.app.extract", mock_extract):
        response = client.post("/extract", json={"url": "https://example.com/a"})

    assert response.status_code == status
    body = response.json()
    assert body["status"] == "failure"
    assert body["error"] == kind.value
    assert body["message"] == "boom"


def test_extract_failure_keeps_partial_record(client: TestClient):
    """A no_content_found failure still exposes the partial record."""
    partial = _record(body="", display_name="Alice", title="Alice")
    mock_extract = AsyncMock(
        return_value=Failure(error=ErrorKind.NO_CONTENT_FOUND, message="no posts", partial_record=partial)
    )
    with patch("news_curator.app.extract", mock_extract):
        response = client.post("/extract", json={"url": "https://www.threads.net/@alice"})

    assert response.status_code == 404
    assert response.json()["partial_record"]["display_name"] == "Alice"


def test_extract_invalid_url_end_to_end(client: TestClient):
    """A relative URL fails validation before any network call."""
    response = client.post("/extract", json={"url": "/not/absolute"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_url"


def test_extract_missing_url_is_rejected(client: TestClient):
    """A body without url is rejected by request validation."""
    response = client.post("/extract", json={})
    assert response.status_code == 422


def test_listing_success(client: TestClient):
    """POST /extract/listing returns articles, count and url."""
    entries = [
        ExtractedRecord(title="First article", source_url="https://example.com/blog/1"),
        ExtractedRecord(title="Second article", body="desc", source_url="https://example.com/blog/2"),
    ]
    mock_listing = AsyncMock(return_value=entries)
    with patch("news_curator.app.extract_listing", mock_listing):
        response = client.post(
            "/extract/listing",
            json={
                "url": "https://example.com/blog",
                "scrapeConfig": {"articleSelector": ".card", "titleSelector": "h2"},
            },
        )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["url"] == "https://example.com/blog"
    assert [a["source_url"] for a in body["articles"]] == [
        "https://example.com/blog/1",
        "https://example.com/blog/2",
    ]
    config = mock_listing.await_args.args[1]
    assert config.article_selector == ".card"
    assert config.link_selector == "a[href]"


def test_listing_timeout_maps_to_408(client: TestClient):
    mock_listing = AsyncMock(side_effect=ExtractionTimeout("listing page exceeded its 10.0s budget"))
    with patch("news_curator.app.extract_listing", mock_listing):
        response = client.post("/extract/listing", json={"url": "https://example.com/blog"})

    assert response.status_code == 408
    assert response.json() == {"error": "timeout", "message": "listing page exceeded its 10.0s budget"}


def test_listing_invalid_url_maps_to_400(client: TestClient):
    mock_listing = AsyncMock(side_effect=InvalidUrl("not an absolute http(s) URL"))
    with patch("news_curator.app.extract_listing", mock_listing):
        response = client.post("/extract/listing", json={"url": "nope"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_url"
