"""Type definitions for the scraper module."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class ScrapingError(Exception):
    """Base exception for scraping-related errors."""

    pass


class RetrievalFailure(ScrapingError):
    """Direct retrieval failed: network error, timeout or non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RenderTimeout(ScrapingError):
    """A rendered page did not finish loading within the allotted time."""

    pass


class ExtractionFailure(ScrapingError):
    """Content could not be extracted from a page."""

    pass


@dataclass
class HttpResponse:
    """Minimal view of an HTTP response."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class ExtractionRequest:
    """Parameters for the in-page content extraction routine."""

    selector: Optional[str] = None
    exclude_selectors: list[str] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Normalized text extracted from one page by one strategy."""

    url: str
    text: str
    strategy: str
    extracted_at: datetime = field(default_factory=datetime.utcnow)
