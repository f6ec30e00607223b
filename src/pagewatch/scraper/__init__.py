"""Page content extraction and change detection.

This module provides:
- Direct HTTP retrieval (httpx) with markup stripping
- Rendered-page extraction through Playwright
- A fallback chain ordering the two strategies per target
- Content fingerprinting and change detection
"""

from .browser import ManagedBrowser, RenderContext, RenderContextProvider
from .extractor import (
    DEFAULT_EXCLUDE_SELECTORS,
    PAGE_EXTRACTION_SCRIPT,
    ContentExtractor,
    normalize_text,
)
from .hashing import (
    ChangeDetectionResult,
    ChangeDetector,
    ChangeKind,
    ContentHash,
    ContentHasher,
    fingerprint,
)
from .strategies import (
    DirectRetrievalStrategy,
    ExtractionStrategy,
    FallbackChain,
    RenderedPageStrategy,
)
from .transport import HttpTransport
from .types import (
    ExtractionFailure,
    ExtractionRequest,
    ExtractionResult,
    HttpResponse,
    RenderTimeout,
    RetrievalFailure,
    ScrapingError,
)

__all__ = [
    # Types
    "ScrapingError",
    "RetrievalFailure",
    "RenderTimeout",
    "ExtractionFailure",
    "ExtractionRequest",
    "ExtractionResult",
    "HttpResponse",
    # Browser automation
    "ManagedBrowser",
    "RenderContext",
    "RenderContextProvider",
    # Retrieval and extraction
    "HttpTransport",
    "ContentExtractor",
    "normalize_text",
    "DEFAULT_EXCLUDE_SELECTORS",
    "PAGE_EXTRACTION_SCRIPT",
    "ExtractionStrategy",
    "DirectRetrievalStrategy",
    "RenderedPageStrategy",
    "FallbackChain",
    # Change detection
    "ContentHash",
    "ContentHasher",
    "fingerprint",
    "ChangeKind",
    "ChangeDetectionResult",
    "ChangeDetector",
]
