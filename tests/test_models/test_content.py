"""Tests for the record, outcome and request models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from news_curator.models.content import (
    ErrorKind,
    ExtractedRecord,
    ExtractionOutcome,
    Failure,
    Platform,
    ResourceIdentity,
    ResourceKind,
    Success,
)
from news_curator.models.request import ExtractionRequest, ListingRequest, SelectorConfig


def test_extracted_record_minimal():
    """Only source_url is required; collections default to empty."""
    record = ExtractedRecord(source_url="https://example.com")
    assert record.title == ""
    assert record.body == ""
    assert record.author is None
    assert record.media_urls == []
    assert record.posts == []
    assert record.warnings == []
    assert record.engagement is None


def test_extracted_record_is_empty():
    assert ExtractedRecord(source_url="https://example.com", body="   ").is_empty()
    assert not ExtractedRecord(source_url="https://example.com", body="text").is_empty()
    assert not ExtractedRecord(source_url="https://example.com", media_urls=["https://img/1.jpg"]).is_empty()


def test_extracted_record_default_lists_not_shared():
    first = ExtractedRecord(source_url="https://a.com")
    second = ExtractedRecord(source_url="https://b.com")
    first.warnings.append("subtitles_failed: x")
    assert second.warnings == []


def test_resource_identity_is_frozen():
    identity = ResourceIdentity(
        platform=Platform.MICROBLOG, resource_kind=ResourceKind.POST, identifiers=("alice", "1")
    )
    with pytest.raises(ValidationError):
        identity.platform = Platform.VIDEO


def test_outcome_discriminates_on_status():
    adapter = TypeAdapter(ExtractionOutcome)
    success = adapter.validate_python(
        {"status": "success", "record": {"source_url": "https://example.com", "body": "x"}}
    )
    failure = adapter.validate_python({"status": "failure", "error": "timeout", "message": "slow"})
    assert isinstance(success, Success)
    assert isinstance(failure, Failure)
    assert failure.error == ErrorKind.TIMEOUT
    assert failure.partial_record is None


def test_error_kind_values():
    assert {kind.value for kind in ErrorKind} == {
        "invalid_url",
        "upstream_http_error",
        "timeout",
        "no_content_found",
        "automation_unavailable",
        "tool_unavailable",
    }


# -- ExtractionRequest --


def test_request_accepts_absolute_url():
    request = ExtractionRequest(url="  https://example.com/post  ")
    assert request.url == "https://example.com/post"
    assert request.limit is None
    assert request.resource_type_hint is None


@pytest.mark.parametrize("url", ["", "example.com", "/relative/path", "ftp://example.com/file", "https://"])
def test_request_rejects_non_http_urls(url):
    with pytest.raises(ValidationError):
        ExtractionRequest(url=url)


def test_request_rewrites_bare_video_id():
    request = ExtractionRequest(url="dQw4w9WgXcQ")
    assert request.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_listing_request_does_not_rewrite_bare_video_id():
    with pytest.raises(ValidationError):
        ListingRequest(url="dQw4w9WgXcQ")


def test_listing_request_accepts_camel_case_config():
    request = ListingRequest(
        url=" https://example.com/blog ",
        scrape_config={"articleSelector": ".card", "titleSelector": "h2"},
    )
    assert request.url == "https://example.com/blog"
    assert request.scrape_config == SelectorConfig(article_selector=".card", title_selector="h2")


@pytest.mark.parametrize(
    "hint,expected",
    [
        ("youtube", Platform.VIDEO),
        ("twitter", Platform.MICROBLOG),
        ("X", Platform.MICROBLOG),
        ("threads", Platform.FEDERATED_MICROBLOG),
        ("generic", Platform.GENERIC),
        ("", None),
        (None, None),
    ],
)
def test_request_hint_aliases(hint, expected):
    request = ExtractionRequest(url="https://example.com", resource_type_hint=hint)
    assert request.resource_type_hint == expected


def test_request_unknown_hint_rejected():
    with pytest.raises(ValidationError):
        ExtractionRequest(url="https://example.com", resource_type_hint="myspace")


@pytest.mark.parametrize("limit,expected", [(0, 1), (-5, 1), (7, 7), (20, 20), (50, 20), (None, None)])
def test_request_limit_clamped(limit, expected):
    assert ExtractionRequest(url="https://example.com", limit=limit).limit == expected


def test_request_is_frozen():
    request = ExtractionRequest(url="https://example.com")
    with pytest.raises(ValidationError):
        request.limit = 3


# -- SelectorConfig --


def test_selector_config_accepts_camel_case():
    config = SelectorConfig.model_validate(
        {
            "articleSelector": "article",
            "titleSelector": "h2",
            "descriptionSelector": "p",
        }
    )
    assert config.article_selector == "article"
    assert config.title_selector == "h2"
    assert config.link_selector == "a[href]"
    assert config.description_selector == "p"
    assert config.date_selector is None


def test_selector_config_accepts_snake_case():
    config = SelectorConfig(article_selector=".card", title_selector="h3")
    assert config.article_selector == ".card"
