"""Client identity rotation and polite request pacing.

Each request goes out under one browser signature picked from a fixed pool.
The header set is derived from that signature alone, so a Firefox user agent
never travels with Chromium client hints.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

Engine = Literal["chromium", "gecko", "webkit"]

_CHROMIUM_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)
_GECKO_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
_WEBKIT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class ClientIdentity:
    """One desktop browser signature."""

    name: str
    user_agent: str
    engine: Engine
    os_platform: str  # "Windows" or "macOS"
    brand: str = ""  # Sec-Ch-Ua brand list, Chromium engines only
    accept_language: str = "en-US,en;q=0.9,ko;q=0.8"

    @property
    def headers(self) -> dict[str, str]:
        """Request headers consistent with this identity's engine."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
            # No "br": httpx only decodes brotli when the optional package is installed
            "Accept-Encoding": "gzip, deflate",
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
        }
        if self.engine == "chromium":
            headers["Accept"] = _CHROMIUM_ACCEPT
            headers["Cache-Control"] = "max-age=0"
            headers["Sec-Ch-Ua"] = self.brand
            headers["Sec-Ch-Ua-Mobile"] = "?0"
            headers["Sec-Ch-Ua-Platform"] = f'"{self.os_platform}"'
        elif self.engine == "gecko":
            headers["Accept"] = _GECKO_ACCEPT
        else:
            headers["Accept"] = _WEBKIT_ACCEPT
        return headers


_CHROME_BRAND = '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"'
_EDGE_BRAND = '"Microsoft Edge";v="131", "Chromium";v="131", "Not_A Brand";v="24"'

IDENTITY_POOL: tuple[ClientIdentity, ...] = (
    ClientIdentity(
        name="chrome-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
        ),
        engine="chromium",
        os_platform="Windows",
        brand=_CHROME_BRAND,
    ),
    ClientIdentity(
        name="chrome-macos",
        user_agent=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
        ),
        engine="chromium",
        os_platform="macOS",
        brand=_CHROME_BRAND,
    ),
    ClientIdentity(
        name="firefox-windows",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
        engine="gecko",
        os_platform="Windows",
        accept_language="en-US,en;q=0.5",
    ),
    ClientIdentity(
        name="safari-macos",
        user_agent=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.2 Safari/605.1.15"
        ),
        engine="webkit",
        os_platform="macOS",
        accept_language="en-US,en;q=0.9",
    ),
    ClientIdentity(
        name="edge-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0"
        ),
        engine="chromium",
        os_platform="Windows",
        brand=_EDGE_BRAND,
    ),
)


def pick_identity(pool: tuple[ClientIdentity, ...] = IDENTITY_POOL) -> ClientIdentity:
    """Pick one identity uniformly at random."""
    return random.choice(pool)


async def polite_delay(min_ms: int = 500, max_ms: int = 2000) -> float:
    """Sleep a uniformly random duration in [min_ms, max_ms]. Returns seconds slept."""
    delay = random.uniform(min_ms, max_ms) / 1000
    logger.debug("Polite delay %.2fs", delay)
    await asyncio.sleep(delay)
    return delay
