"""Remote headless-browser sessions behind a narrow page interface.

Strategies only see ``BrowserPage.run_in_page(script, arg)`` plus wait and
scroll, so nothing outside this module depends on the automation vendor.
The default provider drives a browserless-hosted Chromium via Playwright.
"""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager, contextmanager
from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from news_curator.config import Settings
from news_curator.extraction.errors import AutomationUnavailable, ExtractionTimeout, UpstreamHttpError

logger = logging.getLogger(__name__)

_SCROLL_TO_MIDPOINT = "() => window.scrollTo(0, document.body.scrollHeight / 2)"


class BrowserPage(Protocol):
    """A navigated, live page."""

    async def run_in_page(self, script: str, arg: Any = None) -> Any: ...

    async def wait(self, ms: int) -> None: ...

    async def scroll_to_midpoint(self) -> None: ...


class BrowserSessionProvider(Protocol):
    """Opens a page on ``url`` and closes the whole session on exit."""

    def open(
        self, url: str, *, timeout_ms: int, user_agent: str
    ) -> AbstractAsyncContextManager[BrowserPage]: ...


@contextmanager
def _playwright_errors(action: str) -> Iterator[None]:
    """Translate playwright failures into extraction errors."""
    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise ExtractionTimeout(f"{action} timed out: {exc}") from exc
    except PlaywrightError as exc:
        raise UpstreamHttpError(f"{action} failed: {exc}") from exc


class PlaywrightPage:
    """BrowserPage backed by a playwright Page."""

    def __init__(self, page):
        self._page = page

    async def run_in_page(self, script: str, arg: Any = None) -> Any:
        with _playwright_errors("In-page script"):
            return await self._page.evaluate(script, arg)

    async def wait(self, ms: int) -> None:
        with _playwright_errors("Page wait"):
            await self._page.wait_for_timeout(ms)

    async def scroll_to_midpoint(self) -> None:
        await self.run_in_page(_SCROLL_TO_MIDPOINT)


class PlaywrightSessionProvider:
    """Connects to a remote Chromium (browserless) over its websocket endpoint."""

    def __init__(self, endpoint: str, token: str, locale: str = "en-US"):
        self.endpoint = endpoint
        self.token = token
        self.locale = locale

    @property
    def ws_url(self) -> str:
        separator = "&" if "?" in self.endpoint else "?"
        return f"{self.endpoint}{separator}token={self.token}"

    @asynccontextmanager
    async def open(self, url: str, *, timeout_ms: int, user_agent: str) -> AsyncIterator[BrowserPage]:
        """Connect, open a fresh context, navigate, and yield the page.

        The remote browser is closed on exit, including when the calling
        task is cancelled, so sessions are never leaked.
        """
        async with async_playwright() as playwright:
            try:
                browser = await playwright.chromium.connect(self.ws_url, timeout=timeout_ms)
            except PlaywrightError as exc:
                raise AutomationUnavailable(f"Could not connect to remote browser: {exc}") from exc

            try:
                with _playwright_errors("Browser session setup"):
                    context = await browser.new_context(
                        user_agent=user_agent,
                        viewport={"width": 1920, "height": 1080},
                        locale=self.locale,
                    )
                    page = await context.new_page()
                    page.set_default_timeout(timeout_ms)
                with _playwright_errors(f"Navigation to {url}"):
                    await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                logger.debug("Browser session opened: %s", url)
                yield PlaywrightPage(page)
            finally:
                try:
                    await browser.close()
                except PlaywrightError as exc:
                    logger.warning("Remote browser close failed: %s (%s)", url, exc)
                logger.debug("Browser session closed: %s", url)


def get_session_provider(settings: Settings) -> BrowserSessionProvider | None:
    """Return the configured provider, or None when no browserless token is set."""
    if not settings.browserless_token:
        return None
    return PlaywrightSessionProvider(
        endpoint=settings.browserless_endpoint,
        token=settings.browserless_token,
        locale=settings.browser_locale,
    )
