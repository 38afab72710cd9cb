"""Content extraction: rendered page HTML to indexable plain text."""

import re
from typing import Protocol

from bs4 import BeautifulSoup

# Elements whose text never belongs in the index
NON_CONTENT_TAGS = ("script", "style", "noscript", "template", "iframe")

WHITESPACE_PATTERN = re.compile(r"\s+")


class ContentExtractor(Protocol):
    def extract(self, raw: str) -> str: ...


class HtmlContentExtractor:
    """Strips markup from rendered pages and normalizes whitespace."""

    def extract(self, raw: str) -> str:
        if not raw:
            return ""

        soup = BeautifulSoup(raw, "html.parser")
        for tag in soup.find_all(NON_CONTENT_TAGS):
            tag.decompose()

        text = soup.get_text(separator=" ")
        return WHITESPACE_PATTERN.sub(" ", text).strip()
