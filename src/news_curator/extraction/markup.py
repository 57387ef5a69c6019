"""BeautifulSoup helpers shared by the DOM-based strategies."""

from bs4 import BeautifulSoup, Tag

from news_curator.extraction.normalize import collapse_whitespace


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def meta_content(soup: BeautifulSoup, key: str) -> str | None:
    """Content of ``<meta property=key>`` or ``<meta name=key>``, stripped, or None."""
    tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def element_text(element: Tag | None) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return ""
    return collapse_whitespace(element.get_text())


def page_title(soup: BeautifulSoup) -> str:
    return element_text(soup.title) if soup.title else ""
