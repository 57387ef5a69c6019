"""Generic listing-page extraction: article entries from a blog or news index."""

import functools
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from urllib.parse import urlparse

import yaml
from bs4 import BeautifulSoup, Tag

from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.fetch import fetch_text
from news_curator.extraction.markup import element_text, parse_html
from news_curator.extraction.normalize import resolve_url, truncate
from news_curator.models.content import ExtractedRecord
from news_curator.models.request import SelectorConfig

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).resolve().parent / "site_configs.yaml"

MAX_ENTRIES = 20
MIN_TITLE_LENGTH = 5
DESCRIPTION_LIMIT = 300
ANCHOR_TITLE_RANGE = (10, 200)
ARTICLE_LINK_PATTERN = re.compile(r"blog|news|post|article|announcement", re.IGNORECASE)

GENERIC_CONFIG = SelectorConfig(
    article_selector='article, .post, .card, [class*="article"], [class*="post"], [class*="card"], li > a',
    title_selector='h1, h2, h3, .title, [class*="title"], [class*="heading"]',
    link_selector="a[href]",
    description_selector="p, .description, .excerpt, .summary",
    date_selector="time, .date, [datetime]",
)


@functools.lru_cache
def load_site_configs() -> Mapping[str, SelectorConfig]:
    """Load known-site selector configs from YAML. Result is cached."""
    with open(_CONFIG_PATH) as f:
        data = yaml.safe_load(f)
    return {domain: SelectorConfig.model_validate(config) for domain, config in (data.get("sites") or {}).items()}


def resolve_config(
    url: str,
    explicit: SelectorConfig | None = None,
    site_configs: Mapping[str, SelectorConfig] | None = None,
) -> SelectorConfig:
    """Explicit config, else the known-site entry for the hostname, else the generic config.

    Handles subdomains: www.anthropic.com matches anthropic.com.
    """
    if explicit is not None:
        return explicit

    hostname = urlparse(url).hostname
    if hostname:
        configs = load_site_configs() if site_configs is None else site_configs
        parts = hostname.split(".")
        for i in range(len(parts)):
            candidate = ".".join(parts[i:])
            if candidate in configs:
                return configs[candidate]
    return GENERIC_CONFIG


def _is_skippable(href: str, link: str) -> bool:
    lowered = link.lower()
    return (
        href.startswith("#")
        or "#" in link
        or lowered.endswith(".pdf")
        or lowered.startswith(("mailto:", "javascript:"))
    )


def _first(container: Tag, selector: str | None) -> Tag | None:
    if not selector:
        return None
    return container.select_one(selector)


def _entries_from_containers(
    soup: BeautifulSoup, page_url: str, config: SelectorConfig, seen: set[str]
) -> list[ExtractedRecord]:
    entries = []
    for container in soup.select(config.article_selector):
        anchor = container if container.name == "a" else _first(container, config.link_selector)
        href = (anchor.get("href") or "").strip() if anchor is not None else ""
        if not href:
            continue
        link = resolve_url(page_url, href)
        if link in seen or _is_skippable(href, link):
            continue
        seen.add(link)

        title_element = _first(container, config.title_selector)
        if title_element is not None:
            title = element_text(title_element)
        elif container.name == "a":
            title = element_text(container)
        else:
            title = ""
        if len(title) < MIN_TITLE_LENGTH:
            continue

        description = element_text(_first(container, config.description_selector))
        date_element = _first(container, config.date_selector)
        published_at = None
        if date_element is not None:
            published_at = date_element.get("datetime") or element_text(date_element) or None

        entries.append(
            ExtractedRecord(
                title=title,
                body=truncate(description, DESCRIPTION_LIMIT),
                published_at=published_at,
                source_url=link,
            )
        )
    return entries


def _entries_from_anchors(soup: BeautifulSoup, page_url: str, seen: set[str]) -> list[ExtractedRecord]:
    """Fallback: any anchor whose link looks like an article and whose text looks like a headline."""
    low, high = ANCHOR_TITLE_RANGE
    entries = []
    for anchor in soup.select("a[href]"):
        href = anchor["href"].strip()
        if not href:
            continue
        link = resolve_url(page_url, href)
        if link in seen or _is_skippable(href, link) or not ARTICLE_LINK_PATTERN.search(link):
            continue
        seen.add(link)

        title = element_text(anchor)
        if low <= len(title) <= high:
            entries.append(ExtractedRecord(title=title, source_url=link))
    return entries


def parse_listing(html: str, page_url: str, config: SelectorConfig) -> list[ExtractedRecord]:
    """Container pass first; anchor scan only when containers yield nothing. Capped at 20."""
    soup = parse_html(html)
    seen: set[str] = set()
    entries = _entries_from_containers(soup, page_url, config, seen)
    if not entries:
        entries = _entries_from_anchors(soup, page_url, seen)
    return entries[:MAX_ENTRIES]


async def extract_listing(
    url: str, context: ExtractionContext, config: SelectorConfig | None = None
) -> list[ExtractedRecord]:
    """Fetch a listing page and return its article entries. An empty list is a valid result."""
    resolved = resolve_config(url, config, context.site_configs)
    await context.polite_delay()
    html = await fetch_text(
        url,
        context,
        budget=context.settings.generic_timeout_seconds,
        step="listing page",
    )
    logger.debug("Listing page fetched: %s (%d chars)", url, len(html))

    entries = parse_listing(html, url, resolved)
    logger.info("Found %d listing entries: %s", len(entries), url)
    return entries
