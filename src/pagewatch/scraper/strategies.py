"""Extraction strategies and the fallback chain that orders them."""

from abc import ABC, abstractmethod

from ..storage.types import TrackedTarget
from ..utils.async_utils import run_with_timeout
from ..utils.logging import get_structured_logger
from ..utils.types import AsyncTimeoutError
from .browser import RenderContextProvider
from .extractor import ContentExtractor, normalize_text
from .transport import HttpTransport
from .types import ExtractionResult, RetrievalFailure

logger = get_structured_logger(__name__)


class ExtractionStrategy(ABC):
    """Turns a target into normalized comparable text."""

    name: str = "abstract"

    @abstractmethod
    async def extract(self, target: TrackedTarget) -> ExtractionResult:
        ...


class DirectRetrievalStrategy(ExtractionStrategy):
    """Plain HTTP GET followed by markup stripping."""

    name = "direct"

    def __init__(self, transport: HttpTransport, extractor: ContentExtractor):
        self.transport = transport
        self.extractor = extractor

    async def extract(self, target: TrackedTarget) -> ExtractionResult:
        response = await self.transport.get(target.url)
        if not response.ok:
            raise RetrievalFailure(
                f"GET {target.url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return ExtractionResult(
            url=target.url,
            text=self.extractor.strip_markup(response.text),
            strategy=self.name,
        )


class RenderedPageStrategy(ExtractionStrategy):
    """Loads the page in a real browser and extracts text in-page."""

    name = "rendered"

    def __init__(
        self,
        provider: RenderContextProvider,
        extractor: ContentExtractor,
        render_timeout: int,
    ):
        self.provider = provider
        self.extractor = extractor
        self.render_timeout = render_timeout

    async def extract(self, target: TrackedTarget) -> ExtractionResult:
        context = await self.provider.open(target.url)
        try:
            await self.provider.wait_for_load(context, self.render_timeout)
            text = await self.provider.run_in_context(
                context, self.extractor.build_request(target.selector)
            )
        finally:
            await self.provider.close(context)

        return ExtractionResult(
            url=target.url, text=normalize_text(text), strategy=self.name
        )


class FallbackChain:
    """Tries direct retrieval, then rendering; a selector or local URL renders only."""

    def __init__(
        self,
        direct: DirectRetrievalStrategy,
        rendered: RenderedPageStrategy,
        direct_timeout: float,
    ):
        self.direct = direct
        self.rendered = rendered
        self.direct_timeout = direct_timeout

    def plan(self, target: TrackedTarget) -> list[ExtractionStrategy]:
        """Strategies to attempt for ``target``, in order."""
        if target.selector or not target.is_network_url:
            return [self.rendered]
        return [self.direct, self.rendered]

    async def extract(self, target: TrackedTarget) -> ExtractionResult:
        """Extract text for ``target``.

        Direct-retrieval failures are absorbed and trigger the rendered
        strategy. Failures of the rendered strategy propagate as
        ``RenderTimeout`` or ``ExtractionFailure``.
        """
        strategies = self.plan(target)

        if strategies[0] is self.direct:
            try:
                return await run_with_timeout(
                    self.direct.extract(target),
                    self.direct_timeout,
                    f"Direct retrieval of {target.url} timed out",
                )
            except (RetrievalFailure, AsyncTimeoutError) as e:
                logger.info(
                    "Direct retrieval failed, falling back to rendering",
                    target_id=target.id,
                    url=target.url,
                    error=str(e),
                )

        return await self.rendered.extract(target)
