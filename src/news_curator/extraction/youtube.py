"""YouTube extraction: oEmbed metadata, page description, optional transcript."""

import html as html_lib
import logging
import re
from dataclasses import dataclass

import httpx

from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.errors import ExtractionError, ToolUnavailable
from news_curator.extraction.fetch import fetch_json, fetch_text
from news_curator.extraction.identity import ClientIdentity
from news_curator.extraction.markup import meta_content, parse_html
from news_curator.extraction.subtitles import SubtitleError
from news_curator.extraction.timeout import with_timeout
from news_curator.models.content import ExtractedRecord, ResourceIdentity, ResourceKind

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"

DESCRIPTION_PATTERN = re.compile(r'<meta\s+name="description"\s+content="([^"]*)"')
LENGTH_PATTERN = re.compile(r'"lengthSeconds":"(\d+)"')
# itemprop meta first, then the JSON player config
PUBLISHED_PATTERNS = [
    re.compile(r'<meta\s+itemprop="datePublished"\s+content="([^"]+)"'),
    re.compile(r'<meta\s+itemprop="uploadDate"\s+content="([^"]+)"'),
    re.compile(r'"uploadDate":"([^"]+)"'),
    re.compile(r'"publishDate":"([^"]+)"'),
]


@dataclass
class VideoPageDetails:
    description: str | None = None
    duration_seconds: int | None = None
    published_at: str | None = None


def canonical_video_url(identity: ResourceIdentity) -> str:
    video_id = identity.identifiers[0]
    if identity.resource_kind == ResourceKind.SHORTS:
        return f"https://www.youtube.com/shorts/{video_id}"
    return f"https://www.youtube.com/watch?v={video_id}"


def canonical_channel_url(identity: ResourceIdentity) -> str:
    channel = identity.identifiers[0]
    if channel.startswith("@") or "/" in channel:
        return f"https://www.youtube.com/{channel}"
    return f"https://www.youtube.com/channel/{channel}"


def parse_video_page(html: str) -> VideoPageDetails:
    """Pull description, duration and publish date out of raw watch-page HTML."""
    details = VideoPageDetails()

    m = DESCRIPTION_PATTERN.search(html)
    if m and m.group(1).strip():
        details.description = html_lib.unescape(m.group(1)).strip()

    m = LENGTH_PATTERN.search(html)
    if m:
        details.duration_seconds = int(m.group(1))

    for pattern in PUBLISHED_PATTERNS:
        m = pattern.search(html)
        if m:
            details.published_at = m.group(1)
            break

    return details


async def _fetch_page_details(
    page_url: str, context: ExtractionContext, client: ClientIdentity
) -> VideoPageDetails:
    """Best effort: any failure leaves the details empty."""
    try:
        html = await fetch_text(
            page_url,
            context,
            budget=context.settings.video_timeout_seconds,
            step="video page",
            identity=client,
        )
    except (ExtractionError, httpx.HTTPError):
        logger.debug("Failed to fetch YouTube page details for %s", page_url, exc_info=True)
        return VideoPageDetails()
    return parse_video_page(html)


async def _fetch_transcript(
    video_id: str,
    context: ExtractionContext,
    warnings: list[str],
    require_transcript: bool,
) -> str | None:
    """Run the subtitle tool if one is configured. Soft-fails unless a transcript is required."""
    settings = context.settings
    tool = context.subtitles
    if tool is None:
        if require_transcript:
            raise ToolUnavailable("Subtitle extraction is not configured")
        return None

    try:
        return await with_timeout(
            tool.fetch_transcript(
                video_id,
                settings.subtitle_primary_language,
                settings.subtitle_fallback_language,
            ),
            settings.subtitle_timeout_seconds,
            step="subtitles",
        )
    except ToolUnavailable as exc:
        if require_transcript:
            raise
        logger.warning("Subtitle tool unavailable, using metadata only: %s (%s)", video_id, exc)
        warnings.append(f"tool_unavailable: {exc.message}")
    except (SubtitleError, ExtractionError, ValueError, OSError) as exc:
        logger.warning("Subtitle extraction failed: %s (%s)", video_id, exc)
        warnings.append(f"subtitles_failed: {exc}")
    return None


async def extract_video(
    identity: ResourceIdentity,
    source_url: str,
    context: ExtractionContext,
    require_transcript: bool = False,
) -> ExtractedRecord:
    """Extract a video or Shorts record.

    The oEmbed call is the primary source and its failure fails the call.
    The watch-page description and the transcript are best effort. Body
    precedence: transcript, page description, then "{Video|Shorts} by {author}".
    """
    video_id = identity.identifiers[0]
    page_url = canonical_video_url(identity)
    client = context.pick_identity()

    oembed = await fetch_json(
        OEMBED_URL,
        context,
        budget=context.settings.video_timeout_seconds,
        step="oembed",
        identity=client,
        params={"url": page_url, "format": "json"},
    )
    title = oembed.get("title") or ""
    author = oembed.get("author_name") or None
    thumbnail = oembed.get("thumbnail_url") or f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

    details = await _fetch_page_details(page_url, context, client)

    warnings: list[str] = []
    transcript = await _fetch_transcript(video_id, context, warnings, require_transcript)

    label = "Shorts" if identity.resource_kind == ResourceKind.SHORTS else "Video"
    synthesized = f"{label} by {author}" if author else ""
    body = transcript or details.description or synthesized

    return ExtractedRecord(
        title=title,
        body=body,
        author=author,
        display_name=author,
        published_at=details.published_at,
        media_urls=[thumbnail],
        duration_seconds=details.duration_seconds,
        source_url=source_url,
        warnings=warnings,
    )


async def extract_channel(
    identity: ResourceIdentity, source_url: str, context: ExtractionContext
) -> ExtractedRecord:
    """Channel name, description and avatar from the channel page meta tags. No video listing."""
    html = await fetch_text(
        canonical_channel_url(identity),
        context,
        budget=context.settings.video_timeout_seconds,
        step="channel page",
    )
    soup = parse_html(html)

    name = meta_content(soup, "og:title") or identity.identifiers[0].rsplit("/", 1)[-1]
    description = meta_content(soup, "description") or meta_content(soup, "og:description") or ""
    image = meta_content(soup, "og:image")

    return ExtractedRecord(
        title=name,
        body=description,
        author=name,
        display_name=name,
        media_urls=[image] if image else [],
        source_url=source_url,
    )
