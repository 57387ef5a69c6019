"""Tests for the lightweight DOM strategy (X/Twitter and Threads without a browser)."""

import httpx
import pytest

from news_curator.extraction.errors import UpstreamHttpError
from news_curator.extraction.microblog import (
    MARKUP,
    collect_media,
    display_name_from_title,
    extract_post,
    extract_profile,
    parse_post_page,
    parse_profile_page,
    scan_engagement,
)
from news_curator.extraction.markup import parse_html
from news_curator.extraction.router import classify
from news_curator.models.content import Platform, ResourceIdentity, ResourceKind
from news_curator.models.request import SelectorConfig

POST_URL = "https://x.com/alice/status/1234567890"
X_MARKUP = MARKUP[Platform.MICROBLOG]
THREADS_MARKUP = MARKUP[Platform.FEDERATED_MICROBLOG]


def _html(head="", body=""):
    return f"<html><head>{head}</head><body>{body}</body></html>"


# --- post content cascade ---


def test_og_description_with_handle_prefix():
    """og:description "@alice: hello world" yields author @alice and body "hello world"."""
    html = _html('<meta property="og:description" content="@alice: hello world">')
    record = parse_post_page(html, classify(POST_URL), POST_URL)

    assert record.author == "@alice"
    assert record.body == "hello world"
    assert record.source_url == POST_URL


def test_content_marker_beats_og_description():
    html = _html(
        '<meta property="og:description" content="@alice: summary">',
        '<div data-testid="tweetText">Full <span>post</span> text</div>',
    )
    record = parse_post_page(html, classify(POST_URL), POST_URL)
    assert record.body == "Full post text"


def test_content_selector_override():
    html = _html(
        '<meta property="og:description" content="@alice: summary">',
        '<div data-testid="tweetText">Default marker</div><section class="post-body">Overridden text</section>',
    )
    config = SelectorConfig(article_selector="section.post-body", title_selector="h1")
    record = parse_post_page(html, classify(POST_URL), POST_URL, config=config)
    assert record.body == "Overridden text"


def test_og_description_quotes_stripped():
    html = _html('<meta property="og:description" content="“quoted post”">')
    record = parse_post_page(html, classify(POST_URL), POST_URL)
    assert record.body == "quoted post"


def test_title_fallback_strips_platform_marker():
    html = "<html><head><title>Alice on X: \"from the title\" / X</title></head></html>"
    record = parse_post_page(html, classify(POST_URL), POST_URL)
    assert record.body == "from the title"


def test_empty_page_yields_empty_body():
    record = parse_post_page(_html(), classify(POST_URL), POST_URL)
    assert record.body == ""
    assert record.author == "@alice"
    assert record.title == "Post by @alice"


def test_author_from_profile_link_when_url_has_none():
    identity = ResourceIdentity(platform=Platform.MICROBLOG, resource_kind=ResourceKind.POST, identifiers=())
    html = _html(
        '<meta property="og:description" content="text">',
        '<a href="/home">Home</a><a href="/bob">Bob</a>',
    )
    record = parse_post_page(html, identity, POST_URL)
    assert record.author == "@bob"


def test_author_from_og_description_mention():
    identity = ResourceIdentity(platform=Platform.MICROBLOG, resource_kind=ResourceKind.POST, identifiers=())
    html = _html('<meta property="og:description" content="reposted by @carol.dev today">')
    record = parse_post_page(html, identity, POST_URL)
    assert record.author == "@carol.dev"


# --- media and engagement ---


def test_collect_media_filters_avatars_and_dedupes():
    soup = parse_html(
        _html(
            body=(
                '<img src="https://pbs.twimg.com/profile_images/1/me.jpg">'
                '<img src="https://pbs.twimg.com/media/A.jpg?name=large">'
                '<img src="https://pbs.twimg.com/media/A.jpg?name=LARGE">'
                '<img src="https://other-cdn.com/pic.jpg">'
                '<video poster="https://pbs.twimg.com/ext_tw_video_thumb/1/pu/img/v.jpg"></video>'
            )
        )
    )
    assert collect_media(soup, X_MARKUP, POST_URL) == [
        "https://pbs.twimg.com/media/A.jpg?name=large",
        "https://pbs.twimg.com/ext_tw_video_thumb/1/pu/img/v.jpg",
    ]


def test_collect_media_og_image_fallback():
    soup = parse_html(_html('<meta property="og:image" content="https://pbs.twimg.com/media/og.jpg">'))
    assert collect_media(soup, X_MARKUP, POST_URL) == ["https://pbs.twimg.com/media/og.jpg"]


def test_collect_media_skips_default_icon():
    soup = parse_html(
        _html('<meta property="og:image" content="https://static.cdninstagram.com/threads-app-icon.png">')
    )
    assert collect_media(soup, THREADS_MARKUP, "https://www.threads.net/@alice/post/1") == []


def test_scan_engagement_text_and_aria_label():
    soup = parse_html(
        _html(body='<span>1.2K likes</span><button aria-label="34 replies. Reply"></button><span>5 likes</span>')
    )
    engagement = scan_engagement(soup)
    assert engagement.likes == 1200
    assert engagement.replies == 34


def test_scan_engagement_none_found():
    assert scan_engagement(parse_html(_html(body="<p>no counts here</p>"))) is None


# --- profile ---


def test_display_name_from_title():
    assert display_name_from_title("Alice Smith (@alice) / X", X_MARKUP) == "Alice Smith"
    assert display_name_from_title("Alice (@alice) • Threads, Say more", THREADS_MARKUP) == "Alice"
    assert display_name_from_title("@alice", X_MARKUP) is None


def test_parse_profile_page():
    url = "https://x.com/alice"
    html = _html(
        '<meta property="og:title" content="Alice Smith (@alice) / X">'
        '<meta property="og:description" content="Writing about tools.">'
        '<meta property="og:image" content="https://pbs.twimg.com/profile_images/1/a.jpg">'
    )
    record = parse_profile_page(html, classify(url), url)

    assert record.display_name == "Alice Smith"
    assert record.title == "Alice Smith"
    assert record.author == "@alice"
    assert record.body == "Writing about tools."
    assert record.media_urls == ["https://pbs.twimg.com/profile_images/1/a.jpg"]


def test_profile_rejects_follower_count_bio():
    url = "https://www.threads.net/@alice"
    html = _html('<meta property="og:description" content="1.2K Followers • 30 Threads • See the latest">')
    record = parse_profile_page(html, classify(url), url)

    assert record.body == ""
    assert record.display_name == "alice"


# --- async entry points ---


@pytest.mark.asyncio
async def test_extract_post_fetches_canonical_page(make_context):
    seen = []

    def handle(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=_html('<meta property="og:description" content="@alice: hello world">'))

    url = "https://twitter.com/alice/status/1234567890?s=20"
    record = await extract_post(classify(url), url, make_context(handle))

    assert seen == ["https://x.com/alice/status/1234567890"]
    assert record.body == "hello world"
    assert record.source_url == url


@pytest.mark.asyncio
async def test_extract_threads_profile_without_browser(make_context):
    def handle(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "www.threads.net"
        return httpx.Response(
            200,
            text=_html(
                '<meta property="og:title" content="Alice (@alice) • Threads">'
                '<meta property="og:description" content="Bio here">'
            ),
        )

    url = "https://www.threads.net/@alice"
    record = await extract_profile(classify(url), url, make_context(handle))
    assert record.display_name == "Alice"
    assert record.body == "Bio here"


@pytest.mark.asyncio
async def test_extract_post_http_error(make_context):
    context = make_context(lambda request: httpx.Response(403, text="blocked"))
    with pytest.raises(UpstreamHttpError) as exc_info:
        await extract_post(classify(POST_URL), POST_URL, context)
    assert exc_info.value.status_code == 403
