"""HTML to plain text for job pages."""

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def strip_html(html: str) -> str:
    """
    Strip markup from an HTML page or fragment.

    Script and style elements are dropped with their contents, tags become
    whitespace, entities are decoded and whitespace runs are collapsed.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()

    return collapse_whitespace(soup.get_text(separator=" "))
