"""Browser-automation extraction for client-rendered federated microblog pages.

Navigates a remote browser to the canonical page, waits for hydration, and
runs one of the packaged in-page scripts under ``scripts/``.
"""

import logging
from functools import lru_cache
from pathlib import Path

from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.errors import AutomationUnavailable, NoContentFound
from news_curator.extraction.microblog import MARKUP, markup_for
from news_curator.extraction.normalize import dedupe_urls, parse_engagement
from news_curator.extraction.timeout import with_timeout
from news_curator.models.content import Engagement, ExtractedRecord, ResourceIdentity
from news_curator.models.request import MAX_PROFILE_POSTS, SelectorConfig

logger = logging.getLogger(__name__)

_SCRIPTS_DIR = Path(__file__).resolve().parent / "scripts"


@lru_cache
def load_script(name: str) -> str:
    """Read an in-page script from the package. Result is cached."""
    return (_SCRIPTS_DIR / name).read_text(encoding="utf-8")


def _require_browser(context: ExtractionContext):
    if context.browser is None:
        raise AutomationUnavailable("Remote browser is not configured (BROWSERLESS_TOKEN missing)")
    return context.browser


def _engagement(raw: dict) -> Engagement | None:
    likes = parse_engagement(raw.get("likes"))
    replies = parse_engagement(raw.get("replies"))
    if likes is None and replies is None:
        return None
    return Engagement(likes=likes, replies=replies)


def _post_record(raw: dict, source_url: str, author: str | None) -> ExtractedRecord:
    return ExtractedRecord(
        title=f"Post by {author}" if author else "",
        body=(raw.get("content") or "").strip(),
        author=author,
        published_at=raw.get("timestamp") or None,
        media_urls=dedupe_urls(raw.get("mediaUrls") or []),
        engagement=_engagement(raw),
        source_url=source_url,
    )


async def extract_rendered_post(
    identity: ResourceIdentity,
    source_url: str,
    context: ExtractionContext,
    config: SelectorConfig | None = None,
) -> ExtractedRecord:
    """Render a single post and read it from the live DOM."""
    provider = _require_browser(context)
    markup = markup_for(identity, config)
    settings = context.settings
    handle, post_id = identity.identifiers[:2]
    page_url = markup.post_url.format(handle=handle, post_id=post_id)
    budget = settings.automation_post_timeout_seconds

    async def run() -> dict:
        client = context.pick_identity()
        async with provider.open(page_url, timeout_ms=int(budget * 1000), user_agent=client.user_agent) as page:
            await page.wait(settings.post_settle_ms)
            return await page.run_in_page(
                load_script("post.js"),
                {
                    "contentSelector": markup.content_selector,
                    "titleMarkers": list(markup.title_markers),
                    "cdnHosts": list(markup.cdn_hosts),
                    "defaultIcons": list(markup.default_icons),
                },
            )

    raw = await with_timeout(run(), budget, step=f"{markup.site_name} rendered post")
    raw = raw or {}

    author = raw.get("author") or f"@{handle}"
    record = _post_record(raw, source_url, author)
    if raw.get("authorName"):
        record.display_name = raw["authorName"]
    if not record.body:
        raise NoContentFound(f"No post content rendered at {page_url}", partial=record)
    return record


async def extract_rendered_profile(
    identity: ResourceIdentity,
    source_url: str,
    context: ExtractionContext,
    limit: int | None = None,
) -> ExtractedRecord:
    """Render a profile and collect its recent posts.

    Zero posts raises ``NoContentFound`` carrying the profile header
    (display name, bio, avatar) as the partial record.
    """
    provider = _require_browser(context)
    markup = MARKUP[identity.platform]
    settings = context.settings
    handle = identity.identifiers[0]
    page_url = markup.profile_url.format(handle=handle)
    budget = settings.automation_profile_timeout_seconds
    limit = max(1, min(limit or settings.profile_post_limit, MAX_PROFILE_POSTS))

    async def run() -> dict:
        client = context.pick_identity()
        async with provider.open(page_url, timeout_ms=int(budget * 1000), user_agent=client.user_agent) as page:
            await page.wait(settings.profile_settle_ms)
            if settings.profile_scroll_enabled:
                await page.scroll_to_midpoint()
                await page.wait(settings.scroll_settle_ms)
            return await page.run_in_page(
                load_script("profile_feed.js"),
                {"limit": limit, "cdnHosts": list(markup.cdn_hosts)},
            )

    raw = await with_timeout(run(), budget, step=f"{markup.site_name} rendered profile")
    raw = raw or {}

    author = f"@{handle}"
    display_name = (raw.get("displayName") or "").strip() or handle
    avatar = raw.get("avatar")
    profile = ExtractedRecord(
        title=display_name,
        body=(raw.get("bio") or "").strip(),
        author=author,
        display_name=display_name,
        media_urls=[avatar] if avatar else [],
        source_url=source_url,
    )

    posts = [
        _post_record(item, item.get("postUrl") or source_url, author)
        for item in (raw.get("posts") or [])[:limit]
    ]
    if not posts:
        raise NoContentFound(f"No posts rendered on profile {author}", partial=profile)

    logger.info("Rendered %d posts from %s", len(posts), page_url)
    profile.posts = posts
    if not profile.body:
        profile.body = "\n\n".join(post.body for post in posts if post.body)
    return profile
