"""Extraction orchestrator: validate, classify, dispatch, and shape the outcome."""

import logging
import time

from pydantic import ValidationError

from news_curator.extraction import article, listing, microblog, rendered, youtube
from news_curator.extraction.context import ExtractionContext, default_context
from news_curator.extraction.errors import AutomationUnavailable, ExtractionError, InvalidUrl
from news_curator.extraction.router import classify
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

logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(error["msg"] for error in exc.errors()) or "invalid request"


def build_request(
    url: str,
    platform_hint: Platform | str | None = None,
    config: SelectorConfig | dict | None = None,
    limit: int | None = None,
) -> ExtractionRequest:
    """Validate raw inputs into an ExtractionRequest, raising InvalidUrl on bad input."""
    try:
        return ExtractionRequest(
            url=url,
            resource_type_hint=platform_hint,
            extraction_config=config,
            limit=limit,
        )
    except ValidationError as exc:
        raise InvalidUrl(_validation_message(exc)) from exc


def build_listing_request(url: str, config: SelectorConfig | dict | None = None) -> ListingRequest:
    """Validate listing inputs, raising InvalidUrl on bad input."""
    try:
        return ListingRequest(url=url, scrape_config=config)
    except ValidationError as exc:
        raise InvalidUrl(_validation_message(exc)) from exc


async def _dispatch_federated(
    request: ExtractionRequest, identity: ResourceIdentity, context: ExtractionContext
) -> ExtractedRecord:
    source_url = request.url
    config = request.extraction_config
    if context.browser is None:
        if not context.settings.automation_fallback_to_dom:
            raise AutomationUnavailable("Remote browser is not configured (BROWSERLESS_TOKEN missing)")
        logger.info("No remote browser configured, using DOM strategy: %s", source_url)
        if identity.resource_kind == ResourceKind.POST:
            return await microblog.extract_post(identity, source_url, context, config=config)
        return await microblog.extract_profile(identity, source_url, context)

    if identity.resource_kind == ResourceKind.POST:
        return await rendered.extract_rendered_post(identity, source_url, context, config=config)
    return await rendered.extract_rendered_profile(identity, source_url, context, request.limit)


async def _dispatch(
    request: ExtractionRequest,
    identity: ResourceIdentity | None,
    context: ExtractionContext,
    require_transcript: bool,
) -> ExtractedRecord:
    """Route a classified request to its platform strategy.

    ``extraction_config`` reaches the article extractor and the post
    strategies; videos, channels and profiles have no selector overrides.
    """
    url = request.url
    config = request.extraction_config
    if identity is None:
        return await article.extract_article(url, context, config=config)

    if identity.platform == Platform.VIDEO:
        if identity.resource_kind == ResourceKind.CHANNEL:
            return await youtube.extract_channel(identity, url, context)
        return await youtube.extract_video(identity, url, context, require_transcript)

    if identity.platform == Platform.MICROBLOG:
        if identity.resource_kind == ResourceKind.POST:
            return await microblog.extract_post(identity, url, context, config=config)
        return await microblog.extract_profile(identity, url, context)

    return await _dispatch_federated(request, identity, context)


def _failure(exc: ExtractionError, url: str) -> Failure:
    logger.warning("Extraction failed (%s): %s - %s", exc.kind.value, url, exc.message)
    return Failure(error=exc.kind, message=exc.message, partial_record=exc.partial)


async def extract(
    url: str,
    platform_hint: Platform | str | None = None,
    *,
    config: SelectorConfig | dict | None = None,
    limit: int | None = None,
    require_transcript: bool = False,
    context: ExtractionContext | None = None,
) -> ExtractionOutcome:
    """Extract a single resource (video, channel, post, profile or article).

    Never raises for extraction failures: every ExtractionError becomes a
    Failure carrying its kind, message and any partial record. A record
    with neither body text nor media is reported as no_content_found.
    """
    started = time.monotonic()
    try:
        request = build_request(url, platform_hint, config, limit)
    except InvalidUrl as exc:
        return _failure(exc, url)

    context = context or default_context()
    identity = classify(request.url, request.resource_type_hint)
    route = f"{identity.platform.value}/{identity.resource_kind.value}" if identity else "generic/article"
    logger.info("Extracting %s as %s", request.url, route)

    try:
        record = await _dispatch(request, identity, context, require_transcript)
    except ExtractionError as exc:
        return _failure(exc, request.url)

    if record.is_empty():
        logger.warning("Extraction found no content: %s", request.url)
        return Failure(
            error=ErrorKind.NO_CONTENT_FOUND,
            message="No text or media could be extracted",
            partial_record=record,
        )

    logger.info(
        "Extracted %s in %.2fs (%d chars, %d media, %d warnings)",
        request.url,
        time.monotonic() - started,
        len(record.body),
        len(record.media_urls),
        len(record.warnings),
    )
    return Success(record=record)


async def extract_listing(
    url: str,
    config: SelectorConfig | dict | None = None,
    *,
    context: ExtractionContext | None = None,
) -> list[ExtractedRecord]:
    """Extract article entries from a listing page.

    Unlike ``extract`` this raises ExtractionError (InvalidUrl included)
    since an empty list is already a valid, non-failure result.
    """
    request = build_listing_request(url, config)
    context = context or default_context()
    return await listing.extract_listing(request.url, context, request.scrape_config)
