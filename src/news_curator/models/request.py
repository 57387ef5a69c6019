"""Extraction request and selector configuration models."""

import re
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from news_curator.models.content import Platform

MAX_PROFILE_POSTS = 20

BARE_VIDEO_ID = re.compile(r"^[a-zA-Z0-9_-]{11}$")

# Hint aliases accepted from the dashboard ("type": "youtube" etc.)
PLATFORM_ALIASES = {
    "youtube": Platform.VIDEO,
    "twitter": Platform.MICROBLOG,
    "x": Platform.MICROBLOG,
    "threads": Platform.FEDERATED_MICROBLOG,
}


class SelectorConfig(BaseModel):
    """CSS selectors for one listing page. camelCase keys are accepted."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    article_selector: str
    title_selector: str
    link_selector: str = "a[href]"
    description_selector: str | None = None
    date_selector: str | None = None


def absolute_http_url(value) -> str:
    """Strip and check that ``value`` is an absolute http(s) URL."""
    if not isinstance(value, str):
        raise ValueError("url must be a string")
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"not an absolute http(s) URL: {value!r}")
    return value


class ExtractionRequest(BaseModel):
    """Immutable single-resource extraction input."""

    model_config = ConfigDict(frozen=True)

    url: str
    resource_type_hint: Platform | None = None
    extraction_config: SelectorConfig | None = None
    limit: int | None = None  # None defers to the profile_post_limit setting

    @field_validator("url", mode="before")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        # A bare video id is accepted and rewritten to its watch URL
        if isinstance(value, str) and BARE_VIDEO_ID.match(value.strip()):
            return f"https://www.youtube.com/watch?v={value.strip()}"
        return absolute_http_url(value)

    @field_validator("resource_type_hint", mode="before")
    @classmethod
    def _platform_alias(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            if not lowered:
                return None
            return PLATFORM_ALIASES.get(lowered, lowered)
        return value

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value) -> int | None:
        if value is None:
            return None
        return max(1, min(int(value), MAX_PROFILE_POSTS))


class ListingRequest(BaseModel):
    """Immutable listing-page extraction input. Only absolute URLs are accepted."""

    model_config = ConfigDict(frozen=True)

    url: str
    scrape_config: SelectorConfig | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _absolute_url(cls, value) -> str:
        return absolute_http_url(value)


class ExtractBody(BaseModel):
    """POST /extract request body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    type: str | None = None
    limit: int | None = None
    require_transcript: bool = False


class ListingBody(BaseModel):
    """POST /extract/listing request body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    scrape_config: SelectorConfig | None = None
