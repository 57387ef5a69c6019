"""Extraction result models: resource identity, normalized record, tagged outcome."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Platform families recognized by the URL classifier."""

    VIDEO = "video"
    MICROBLOG = "microblog"
    FEDERATED_MICROBLOG = "federated_microblog"
    GENERIC = "generic"


class ResourceKind(str, Enum):
    """Kind of resource a classified URL points at."""

    VIDEO = "video"
    SHORTS = "shorts"
    CHANNEL = "channel"
    POST = "post"
    PROFILE = "profile"
    ARTICLE = "article"
    LISTING = "listing"


class ErrorKind(str, Enum):
    """Failure taxonomy reported in a Failure outcome."""

    INVALID_URL = "invalid_url"
    UPSTREAM_HTTP_ERROR = "upstream_http_error"
    TIMEOUT = "timeout"
    NO_CONTENT_FOUND = "no_content_found"
    AUTOMATION_UNAVAILABLE = "automation_unavailable"
    TOOL_UNAVAILABLE = "tool_unavailable"


class ResourceIdentity(BaseModel):
    """Platform, kind, and path-derived identifiers for one URL."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    resource_kind: ResourceKind
    identifiers: tuple[str, ...] = ()  # e.g. (handle, post_id) or (video_id,)


class Engagement(BaseModel):
    """Like/reply counts of a social post."""

    likes: int | None = None
    replies: int | None = None


class ExtractedRecord(BaseModel):
    """Normalized content recovered from a URL. Single model for every platform."""

    title: str = ""
    body: str = ""  # Primary textual content (post text, transcript, description, bio)
    author: str | None = None  # "@handle" for social platforms, channel/author name otherwise
    display_name: str | None = None
    published_at: str | None = None  # ISO-8601 when the source provides one
    media_urls: list[str] = []
    engagement: Engagement | None = None
    duration_seconds: int | None = None  # Video only
    source_url: str  # Original input, or the entry link for listing entries
    posts: list["ExtractedRecord"] = []  # Profile feeds only
    warnings: list[str] = []  # Soft failures absorbed during extraction

    def is_empty(self) -> bool:
        """True when neither body text nor media was recovered."""
        return not self.body.strip() and not self.media_urls


class Success(BaseModel):
    """Extraction produced a usable record."""

    status: Literal["success"] = "success"
    record: ExtractedRecord


class Failure(BaseModel):
    """Extraction failed; partial_record carries whatever was recoverable."""

    status: Literal["failure"] = "failure"
    error: ErrorKind
    message: str
    partial_record: ExtractedRecord | None = None


ExtractionOutcome = Annotated[Success | Failure, Field(discriminator="status")]
