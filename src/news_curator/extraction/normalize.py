"""Shared post-processing: engagement counts, URL resolution, dedupe, text cleanup."""

import re
from collections.abc import Iterable
from urllib.parse import urljoin, urlsplit, urlunsplit

from url_normalize import url_normalize

ENGAGEMENT_PATTERN = re.compile(r"^([\d][\d.,]*)\s*([kmb])?$", re.IGNORECASE)
_MULTIPLIERS = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}
_WHITESPACE = re.compile(r"\s+")


def parse_engagement(value: str | int | float | None) -> int | None:
    """Parse a display count such as "1.2K", "3M", "1,234" or "42".

    Numeric input is returned as an int unchanged; empty or unparseable
    text returns None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)

    match = ENGAGEMENT_PATTERN.match(value.strip())
    if not match:
        return None
    number, suffix = match.groups()
    number = number.replace(",", "")
    try:
        amount = float(number)
    except ValueError:
        return None
    if suffix:
        amount *= _MULTIPLIERS[suffix.lower()]
    return round(amount)


def resolve_url(base: str, href: str) -> str:
    """Resolve ``href`` against ``base``. Returns href unchanged if it cannot be joined."""
    try:
        return urljoin(base, href.strip())
    except ValueError:
        return href


def _dedupe_key(url: str) -> str:
    """Comparison key: normalized scheme/host/path plus a lower-cased query."""
    try:
        normalized = url_normalize(url)
    except (ValueError, UnicodeError):
        normalized = url
    parts = urlsplit(normalized)
    return urlunsplit(parts._replace(query=parts.query.lower(), fragment=""))


def dedupe_urls(urls: Iterable[str]) -> list[str]:
    """Drop repeated URLs, keeping the first occurrence and the original order.

    Query strings are compared case-insensitively, so CDN variants such as
    ``?Name=Large`` and ``?name=large`` count as one URL.
    """
    seen: set[str] = set()
    result = []
    for url in urls:
        if not url:
            continue
        key = _dedupe_key(url)
        if key in seen:
            continue
        seen.add(key)
        result.append(url)
    return result


def collapse_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    """Cut text to at most ``limit`` characters."""
    return text[:limit] if len(text) > limit else text
