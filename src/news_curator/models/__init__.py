"""Data models and enums for the content extraction engine."""

from news_curator.models.content import (
    Engagement,
    ErrorKind,
    ExtractedRecord,
    ExtractionOutcome,
    Failure,
    Platform,
    ResourceIdentity,
    ResourceKind,
    Success,
)
from news_curator.models.request import ExtractionRequest, SelectorConfig

__all__ = [
    "Platform",
    "ResourceKind",
    "ErrorKind",
    "ResourceIdentity",
    "Engagement",
    "ExtractedRecord",
    "Success",
    "Failure",
    "ExtractionOutcome",
    "ExtractionRequest",
    "SelectorConfig",
]
