"""Single-article extraction for URLs no platform pattern matches."""

import asyncio
import logging

from bs4 import BeautifulSoup, Tag
from trafilatura import bare_extraction

from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.fetch import fetch_text
from news_curator.extraction.markup import element_text, meta_content, page_title, parse_html
from news_curator.extraction.normalize import collapse_whitespace, truncate
from news_curator.models.content import ExtractedRecord
from news_curator.models.request import SelectorConfig

logger = logging.getLogger(__name__)

BODY_LIMIT = 8000
RAW_TEXT_LIMIT = 5000
MIN_CONTAINER_TEXT = 200
MIN_PARAGRAPH_TEXT = 30

BOILERPLATE_SELECTOR = (
    "script, style, nav, header, footer, aside, .sidebar, .menu, .navigation, "
    ".ads, .advertisement, .social-share, .comments"
)
CONTENT_SELECTORS = [
    "article",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".article-body",
    ".entry-content",
    ".post-body",
    ".content-body",
    "main article",
    "main",
    ".content",
]


def fallback_body(soup: BeautifulSoup) -> str:
    """Readable text without trafilatura: content container, body paragraphs, then raw text."""
    for element in soup.select(BOILERPLATE_SELECTOR):
        element.decompose()

    for selector in CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container is None or len(container.get_text().strip()) <= MIN_CONTAINER_TEXT:
            continue
        blocks = [element_text(el) for el in container.select("p, h1, h2, h3, h4, h5, h6, li")]
        text = "\n\n".join(block for block in blocks if block)
        if len(text) >= MIN_CONTAINER_TEXT:
            return text
        break

    paragraphs = [element_text(p) for p in soup.select("body p")]
    text = "\n\n".join(p for p in paragraphs if len(p) > MIN_PARAGRAPH_TEXT)
    if text:
        return text

    return truncate(element_text(soup.body), RAW_TEXT_LIMIT) if soup.body else ""


def _container_text(container: Tag) -> str:
    blocks = [element_text(el) for el in container.select("p, h1, h2, h3, h4, h5, h6, li")]
    return "\n\n".join(block for block in blocks if block) or element_text(container)


def selector_overrides(soup: BeautifulSoup, config: SelectorConfig) -> dict:
    """Caller-supplied selectors for body, title and date. Missing matches are left out."""
    fields = {}
    container = soup.select_one(config.article_selector)
    body = _container_text(container) if container is not None else ""
    if body:
        fields["body"] = body
    title = element_text(soup.select_one(config.title_selector))
    if title:
        fields["title"] = title
    date = soup.select_one(config.date_selector) if config.date_selector else None
    if date is not None:
        published_at = date.get("datetime") or element_text(date)
        if published_at:
            fields["published_at"] = published_at
    return fields


def _fallback_title(soup: BeautifulSoup) -> str:
    heading = soup.find("h1")
    return page_title(soup) or (element_text(heading) if heading else "") or meta_content(soup, "og:title") or ""


async def extract_article(
    url: str, context: ExtractionContext, config: SelectorConfig | None = None
) -> ExtractedRecord:
    """Extract an article via trafilatura, with a BeautifulSoup fallback for the body.

    The sync trafilatura call runs in asyncio.to_thread() to avoid blocking
    the event loop. When ``config`` is given, whatever its selectors match
    (body container, title, date) takes precedence over trafilatura.
    """
    await context.polite_delay()
    html = await fetch_text(
        url,
        context,
        budget=context.settings.generic_timeout_seconds,
        step="article page",
    )

    doc = await asyncio.to_thread(bare_extraction, html, url=url)

    title = author = published_at = image = None
    text = ""
    if doc is not None:
        title = doc.title or None
        author = doc.author or None
        published_at = doc.date or None
        image = doc.image or None
        text = doc.text or ""

    soup = parse_html(html)
    if config is not None:
        overrides = selector_overrides(soup, config)
        logger.debug("Selector overrides matched %s: %s", sorted(overrides), url)
        title = overrides.get("title", title)
        text = overrides.get("body", text)
        published_at = overrides.get("published_at", published_at)

    if not text.strip():
        logger.debug("trafilatura found no text, using DOM fallback: %s", url)
        text = fallback_body(parse_html(html))

    return ExtractedRecord(
        title=collapse_whitespace(title) or _fallback_title(soup),
        body=truncate(text.strip(), BODY_LIMIT),
        author=author,
        published_at=published_at,
        media_urls=[image] if image else [],
        source_url=url,
    )
