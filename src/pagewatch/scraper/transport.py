"""HTTP retrieval transport built on httpx."""

import random
from typing import Optional

import httpx

from ..config.settings import ScrapingSettings
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .types import HttpResponse, RetrievalFailure

logger = get_structured_logger(__name__)


class HttpTransport(AsyncContextManager):
    """Issues plain GET requests for the direct-retrieval strategy."""

    def __init__(
        self,
        settings: ScrapingSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def setup(self) -> None:
        if self.client is not None:
            return

        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.request_timeout),
            follow_redirects=True,
            headers={
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            },
            transport=self._transport,
        )

    async def cleanup(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def get(self, url: str) -> HttpResponse:
        """GET ``url``; transport-level problems raise RetrievalFailure."""
        if self.client is None:
            await self.setup()

        try:
            response = await self.client.get(
                url, headers={"User-Agent": random.choice(self.settings.user_agents)}
            )
        except httpx.HTTPError as e:
            logger.debug("HTTP retrieval failed", url=url, error=str(e))
            raise RetrievalFailure(f"Request to {url} failed: {str(e)}") from e

        return HttpResponse(status_code=response.status_code, text=response.text)
