"""Content extraction: video, microblog, federated microblog, and generic sites.

Public API:
    extract(url, platform_hint=None, ...) -> Success | Failure
        Single entry point that validates and classifies the URL, dispatches
        to the platform strategy, and reports failures as tagged outcomes.
    extract_listing(url, config=None) -> list[ExtractedRecord]
        Article entries from a blog or news index page.
    classify(url, hint=None) -> ResourceIdentity | None
"""

from news_curator.extraction.context import ExtractionContext, default_context
from news_curator.extraction.errors import ExtractionError
from news_curator.extraction.pipeline import extract, extract_listing
from news_curator.extraction.router import classify

__all__ = [
    "extract",
    "extract_listing",
    "classify",
    "ExtractionContext",
    "ExtractionError",
    "default_context",
]
