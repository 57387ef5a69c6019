"""Lightweight DOM extraction for microblog posts and profiles.

One GET of the canonical page, then selector cascades over the initial HTML
payload. Used for X/Twitter, and for Threads when no remote browser is
configured.
"""

import logging
import re
from dataclasses import dataclass, replace

from bs4 import BeautifulSoup

from news_curator.extraction.cascade import CascadeStep, always, run_cascade
from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.fetch import fetch_text
from news_curator.extraction.markup import element_text, meta_content, page_title, parse_html
from news_curator.extraction.normalize import collapse_whitespace, dedupe_urls, parse_engagement, resolve_url
from news_curator.extraction.router import RESERVED_MICROBLOG_PATHS
from news_curator.models.content import Engagement, ExtractedRecord, Platform, ResourceIdentity
from news_curator.models.request import SelectorConfig

logger = logging.getLogger(__name__)

# "@alice: hello" -> "hello"
HANDLE_PREFIX = re.compile(r"^@[\w.]+:\s*")
HANDLE_MENTION = re.compile(r"@([\w.]+)")
WRAPPING_QUOTES = "\"'“”"
# "12 likes", "1.2K replies", "3M Likes. Like"
ENGAGEMENT_TEXT = re.compile(r"^(\d[\d.,]*\s*[KkMm]?)\s*(likes?|repl(?:y|ies)|comments?)\b", re.IGNORECASE)
FOLLOWER_COUNT = re.compile(r"^\d[\d.,]*\s*[KkMm]?\s*(?:followers?|팔로워)", re.IGNORECASE)


@dataclass(frozen=True)
class PlatformMarkup:
    """Static markup hints for one platform."""

    site_name: str
    post_url: str  # format string with {handle} and {post_id}
    profile_url: str  # format string with {handle}
    content_selector: str
    title_markers: tuple[str, ...]
    profile_link_selector: str
    profile_link_pattern: re.Pattern
    cdn_hosts: tuple[str, ...]
    default_icons: tuple[str, ...]

    @property
    def title_pattern(self) -> re.Pattern:
        markers = "|".join(re.escape(m) for m in self.title_markers)
        return re.compile(r"\bon\s+(?:" + markers + r")\s*:\s*(.+)$", re.DOTALL)

    def is_content_media(self, url: str) -> bool:
        lowered = url.lower()
        if "profile" in lowered or "avatar" in lowered:
            return False
        return any(host in lowered for host in self.cdn_hosts)

    def is_default_icon(self, url: str) -> bool:
        return any(icon in url for icon in self.default_icons)


MARKUP: dict[Platform, PlatformMarkup] = {
    Platform.MICROBLOG: PlatformMarkup(
        site_name="X",
        post_url="https://x.com/{handle}/status/{post_id}",
        profile_url="https://x.com/{handle}",
        content_selector='[data-testid="tweetText"]',
        title_markers=("X", "Twitter"),
        profile_link_selector='[data-testid="User-Name"] a[href], a[href^="/"]',
        profile_link_pattern=re.compile(r"^(?:https?://(?:www\.)?(?:x|twitter)\.com)?/([A-Za-z0-9_]{1,15})/?$"),
        cdn_hosts=("pbs.twimg.com", "video.twimg.com"),
        default_icons=("default_profile", "/og/image.png", "twitter-logo"),
    ),
    Platform.FEDERATED_MICROBLOG: PlatformMarkup(
        site_name="Threads",
        post_url="https://www.threads.net/@{handle}/post/{post_id}",
        profile_url="https://www.threads.net/@{handle}",
        content_selector='[data-pressable-container="true"] span[dir="auto"]',
        title_markers=("Threads",),
        profile_link_selector='a[href*="/@"]',
        profile_link_pattern=re.compile(r"/@([\w.]+)"),
        cdn_hosts=("cdninstagram", "fbcdn"),
        default_icons=("threads-app-icon",),
    ),
}


def markup_for(identity: ResourceIdentity, config: SelectorConfig | None = None) -> PlatformMarkup:
    """Platform markup, with the post content selector taken from ``config.article_selector`` when given."""
    markup = MARKUP[identity.platform]
    if config is None:
        return markup
    return replace(markup, content_selector=config.article_selector)


@dataclass(frozen=True)
class PostPage:
    """Parsed post page plus what the URL already told us."""

    soup: BeautifulSoup
    markup: PlatformMarkup
    identity: ResourceIdentity
    page_url: str


def _strip_quotes(text: str) -> str:
    return text.strip().strip(WRAPPING_QUOTES).strip()


# -- content cascade --


def _content_from_marker(page: PostPage) -> str | None:
    return element_text(page.soup.select_one(page.markup.content_selector)) or None


def _content_from_og_description(page: PostPage) -> str | None:
    description = meta_content(page.soup, "og:description")
    if not description:
        return None
    return _strip_quotes(HANDLE_PREFIX.sub("", description, count=1)) or None


def _content_from_title(page: PostPage) -> str | None:
    match = page.markup.title_pattern.search(page_title(page.soup))
    if not match:
        return None
    text = re.sub(r"\s*/\s*(?:X|Twitter)\s*$", "", match.group(1))
    return _strip_quotes(text) or None


POST_CONTENT_CASCADE: list[CascadeStep[PostPage, str]] = [
    CascadeStep("content-marker", lambda page: bool(page.markup.content_selector), _content_from_marker),
    CascadeStep("og:description", always, _content_from_og_description),
    CascadeStep("title", always, _content_from_title),
]


# -- author cascade --


def _author_from_url(page: PostPage) -> str | None:
    return page.identity.identifiers[0] if page.identity.identifiers else None


def _author_from_profile_link(page: PostPage) -> str | None:
    for anchor in page.soup.select(page.markup.profile_link_selector):
        match = page.markup.profile_link_pattern.search(anchor.get("href", ""))
        if match and match.group(1).lower() not in RESERVED_MICROBLOG_PATHS:
            return match.group(1)
    return None


def _author_from_og_description(page: PostPage) -> str | None:
    match = HANDLE_MENTION.search(meta_content(page.soup, "og:description") or "")
    return match.group(1) if match else None


AUTHOR_CASCADE: list[CascadeStep[PostPage, str]] = [
    CascadeStep("url", always, _author_from_url),
    CascadeStep("profile-link", always, _author_from_profile_link),
    CascadeStep("og:description", always, _author_from_og_description),
]


# -- shared field extractors --


def collect_media(soup: BeautifulSoup, markup: PlatformMarkup, page_url: str) -> list[str]:
    """Content images/videos on known CDN hosts, avatars excluded; og:image as fallback."""
    candidates = []
    for element in soup.select("img[src], video[src], video source[src], video[poster]"):
        for attr in ("src", "poster"):
            src = element.get(attr)
            if not src or src.startswith(("blob:", "data:")):
                continue
            src = resolve_url(page_url, src)
            if markup.is_content_media(src):
                candidates.append(src)
    media = dedupe_urls(candidates)
    if media:
        return media

    og_image = meta_content(soup, "og:image")
    if og_image and not markup.is_default_icon(og_image):
        return [og_image]
    return []


def scan_engagement(soup: BeautifulSoup) -> Engagement | None:
    """First like/reply counts found in text nodes or aria-labels."""
    likes = replies = None
    texts = [
        str(node)
        for node in soup.find_all(string=True)
        if node.parent is not None and node.parent.name not in ("script", "style")
    ]
    texts += [element["aria-label"] for element in soup.select("[aria-label]")]

    for raw in texts:
        match = ENGAGEMENT_TEXT.match(collapse_whitespace(raw))
        if not match:
            continue
        count = parse_engagement(match.group(1))
        if match.group(2).lower().startswith("like"):
            likes = count if likes is None else likes
        else:
            replies = count if replies is None else replies

    if likes is None and replies is None:
        return None
    return Engagement(likes=likes, replies=replies)


def first_timestamp(soup: BeautifulSoup) -> str | None:
    element = soup.select_one("time[datetime]")
    return element.get("datetime") if element else None


def display_name_from_title(title: str, markup: PlatformMarkup) -> str | None:
    """Display name from an og:title such as "Alice (@alice) on X"."""
    markers = "|".join(map(re.escape, markup.title_markers))
    title = re.sub(r"(?:\s*/\s*|\s+on\s+|\s*•\s*)(?:" + markers + r")\b.*$", "", title)
    match = re.match(r"^([^(@]+)", title)
    if not match:
        return None
    return match.group(1).strip() or None


# -- page parsers --


def parse_post_page(
    html: str,
    identity: ResourceIdentity,
    source_url: str,
    page_url: str | None = None,
    config: SelectorConfig | None = None,
) -> ExtractedRecord:
    """Build a post record from raw HTML."""
    markup = markup_for(identity, config)
    page = PostPage(parse_html(html), markup, identity, page_url or source_url)

    content, step = run_cascade(POST_CONTENT_CASCADE, page)
    handle, _ = run_cascade(AUTHOR_CASCADE, page)
    author = f"@{handle}" if handle else None
    logger.debug("Post content from %s: %s", step, source_url)

    title = meta_content(page.soup, "og:title") or (f"Post by {author}" if author else "")
    return ExtractedRecord(
        title=title,
        body=content or "",
        author=author,
        published_at=first_timestamp(page.soup),
        media_urls=collect_media(page.soup, markup, page.page_url),
        engagement=scan_engagement(page.soup),
        source_url=source_url,
    )


def parse_profile_page(html: str, identity: ResourceIdentity, source_url: str) -> ExtractedRecord:
    """Build a profile record (display name, bio, avatar) from raw HTML."""
    markup = MARKUP[identity.platform]
    soup = parse_html(html)
    handle = identity.identifiers[0]

    title = meta_content(soup, "og:title") or page_title(soup)
    display_name = display_name_from_title(title, markup) or handle

    description = meta_content(soup, "og:description") or ""
    bio = "" if FOLLOWER_COUNT.match(description) else description

    avatar = meta_content(soup, "og:image")
    media = [avatar] if avatar and not markup.is_default_icon(avatar) else []

    return ExtractedRecord(
        title=display_name,
        body=bio,
        author=f"@{handle}",
        display_name=display_name,
        media_urls=media,
        source_url=source_url,
    )


# -- strategy entry points --


async def extract_post(
    identity: ResourceIdentity,
    source_url: str,
    context: ExtractionContext,
    config: SelectorConfig | None = None,
) -> ExtractedRecord:
    markup = MARKUP[identity.platform]
    handle, post_id = identity.identifiers[:2]
    page_url = markup.post_url.format(handle=handle, post_id=post_id)
    html = await fetch_text(
        page_url,
        context,
        budget=context.settings.generic_timeout_seconds,
        step=f"{markup.site_name} post page",
    )
    return parse_post_page(html, identity, source_url, page_url, config)


async def extract_profile(identity: ResourceIdentity, source_url: str, context: ExtractionContext) -> ExtractedRecord:
    markup = MARKUP[identity.platform]
    page_url = markup.profile_url.format(handle=identity.identifiers[0])
    html = await fetch_text(
        page_url,
        context,
        budget=context.settings.generic_timeout_seconds,
        step=f"{markup.site_name} profile page",
    )
    return parse_profile_page(html, identity, source_url)
