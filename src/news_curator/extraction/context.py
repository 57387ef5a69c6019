"""Immutable dependency bundle handed to every extraction strategy."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from news_curator.config import Settings, get_settings
from news_curator.extraction.browser import BrowserSessionProvider, get_session_provider
from news_curator.extraction.identity import IDENTITY_POOL, ClientIdentity, pick_identity, polite_delay
from news_curator.extraction.subtitles import SubtitleTool, get_subtitle_tool
from news_curator.models.request import SelectorConfig


@dataclass(frozen=True)
class ExtractionContext:
    """Settings and collaborators for one or more extraction calls.

    Tests substitute a single deterministic identity, a mock httpx
    transport, a fake browser provider, or a stub subtitle tool here.
    ``site_configs`` of None means the packaged known-site table.
    """

    settings: Settings
    identities: tuple[ClientIdentity, ...] = IDENTITY_POOL
    browser: BrowserSessionProvider | None = None
    subtitles: SubtitleTool | None = None
    site_configs: Mapping[str, SelectorConfig] | None = None
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def pick_identity(self) -> ClientIdentity:
        return pick_identity(self.identities)

    async def polite_delay(self) -> None:
        if self.settings.polite_delay_enabled:
            await polite_delay(self.settings.polite_delay_min_ms, self.settings.polite_delay_max_ms)


def default_context() -> ExtractionContext:
    """Build the production context from cached settings."""
    settings = get_settings()
    return ExtractionContext(
        settings=settings,
        browser=get_session_provider(settings),
        subtitles=get_subtitle_tool(settings),
    )
