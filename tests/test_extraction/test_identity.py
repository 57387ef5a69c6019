"""Tests for client identities and polite delay."""

from unittest.mock import AsyncMock, patch

import pytest

from news_curator.extraction.identity import IDENTITY_POOL, pick_identity, polite_delay


def test_pool_covers_common_desktop_browsers():
    assert {identity.name for identity in IDENTITY_POOL} == {
        "chrome-windows",
        "chrome-macos",
        "firefox-windows",
        "safari-macos",
        "edge-windows",
    }


def test_pick_identity_returns_pool_member():
    for _ in range(20):
        assert pick_identity() in IDENTITY_POOL


def test_pick_identity_from_single_entry_pool():
    assert pick_identity((IDENTITY_POOL[2],)) is IDENTITY_POOL[2]


@pytest.mark.parametrize("identity", [i for i in IDENTITY_POOL if i.engine == "chromium"], ids=lambda i: i.name)
def test_chromium_headers_carry_client_hints(identity):
    headers = identity.headers
    assert headers["User-Agent"] == identity.user_agent
    assert headers["Sec-Ch-Ua"] == identity.brand
    assert headers["Sec-Ch-Ua-Mobile"] == "?0"
    assert headers["Sec-Ch-Ua-Platform"] == f'"{identity.os_platform}"'
    assert headers["Sec-Fetch-Mode"] == "navigate"


@pytest.mark.parametrize("identity", [i for i in IDENTITY_POOL if i.engine != "chromium"], ids=lambda i: i.name)
def test_non_chromium_headers_have_no_client_hints(identity):
    headers = identity.headers
    assert not any(name.startswith("Sec-Ch-Ua") for name in headers)
    assert headers["Sec-Fetch-Dest"] == "document"
    assert headers["User-Agent"] == identity.user_agent


def test_platform_hint_matches_user_agent():
    for identity in IDENTITY_POOL:
        if identity.os_platform == "Windows":
            assert "Windows NT" in identity.user_agent
        else:
            assert "Macintosh" in identity.user_agent


def test_edge_brand_is_edge():
    edge = next(i for i in IDENTITY_POOL if i.name == "edge-windows")
    assert "Edg/" in edge.user_agent
    assert "Microsoft Edge" in edge.headers["Sec-Ch-Ua"]


@pytest.mark.asyncio
async def test_polite_delay_within_bounds():
    with patch("news_curator.extraction.identity.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        delay = await polite_delay(500, 2000)

    assert 0.5 <= delay <= 2.0
    mock_sleep.assert_awaited_once_with(delay)


@pytest.mark.asyncio
async def test_context_polite_delay_can_be_disabled(make_context):
    context = make_context()
    with patch("news_curator.extraction.context.polite_delay", new_callable=AsyncMock) as mock_delay:
        await context.polite_delay()
    mock_delay.assert_not_awaited()
