"""Page text extraction and normalization."""

import re

from bs4 import BeautifulSoup

from ..utils.logging import get_structured_logger
from .types import ExtractionRequest

logger = get_structured_logger(__name__)

WHITESPACE_RE = re.compile(r"\s+")

# Regions removed from the body before whole-page text is taken in a rendered page.
DEFAULT_EXCLUDE_SELECTORS = [
    "script",
    "style",
    "nav",
    "header",
    "footer",
    ".advertisement",
    ".ads",
    ".sidebar",
    ".menu",
]

# Runs inside the page. With a selector: trimmed text of each match, empties
# dropped, newline-joined. Without: cloned body minus excluded regions,
# whitespace collapsed.
PAGE_EXTRACTION_SCRIPT = """
(request) => {
    if (request.selector) {
        return Array.from(document.querySelectorAll(request.selector))
            .map((el) => (el.textContent || "").trim())
            .filter((text) => text.length > 0)
            .join("\\n");
    }
    if (!document.body) {
        return "";
    }
    const clone = document.body.cloneNode(true);
    for (const selector of request.exclude) {
        clone.querySelectorAll(selector).forEach((el) => el.remove());
    }
    return (clone.textContent || "").replace(/\\s+/g, " ").trim();
}
"""


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    if not text:
        return ""
    return WHITESPACE_RE.sub(" ", text).strip()


class ContentExtractor:
    """Turns raw markup into comparable text."""

    def __init__(self):
        self.ignore_tags = ["script", "style", "noscript", "template"]

    def strip_markup(self, html: str) -> str:
        """Drop script/style blocks and every tag, then normalize whitespace."""
        soup = BeautifulSoup(html, "html.parser")

        for tag in soup.find_all(self.ignore_tags):
            tag.decompose()

        text = normalize_text(soup.get_text(separator=" "))
        logger.debug("Stripped markup", html_length=len(html), text_length=len(text))
        return text

    def build_request(self, selector=None) -> ExtractionRequest:
        return ExtractionRequest(
            selector=selector or None,
            exclude_selectors=list(DEFAULT_EXCLUDE_SELECTORS),
        )
