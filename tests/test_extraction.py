"""Tests for content extraction strategies and the fallback chain."""

import asyncio
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from conftest import make_target
from pagewatch.config.settings import ScrapingSettings
from pagewatch.scraper import (
    ContentExtractor,
    DirectRetrievalStrategy,
    ExtractionFailure,
    ExtractionResult,
    FallbackChain,
    HttpTransport,
    RenderedPageStrategy,
    RenderContextProvider,
    RenderTimeout,
    RetrievalFailure,
    normalize_text,
)


def html_transport(status_code: int, body: str) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def settings():
    return ScrapingSettings()


@pytest.fixture
def extractor():
    return ContentExtractor()


@pytest.fixture
def browser(mock_page):
    managed = Mock()
    managed.new_page = AsyncMock(return_value=mock_page)
    return managed


@pytest.fixture
def provider(browser, settings):
    return RenderContextProvider(browser, settings)


class TestContentExtractor:
    """Test markup stripping and normalization."""

    def test_normalize_text(self):
        assert normalize_text("  Hello \n\t  World  ") == "Hello World"
        assert normalize_text("") == ""

    def test_strip_markup_drops_scripts_and_styles(self, extractor):
        html = """
        <html>
            <head><style>body { color: red; }</style></head>
            <body>
                <h1>Main   Heading</h1>
                <p>This is <b>test</b> content.</p>
                <script>console.log('test');</script>
                <noscript>Enable JS</noscript>
            </body>
        </html>
        """
        text = extractor.strip_markup(html)

        assert text == "Main Heading This is test content."
        assert "console.log" not in text
        assert "color" not in text

    def test_build_request_carries_denylist(self, extractor):
        request = extractor.build_request("#main")
        assert request.selector == "#main"
        assert ".advertisement" in request.exclude_selectors

        assert extractor.build_request("").selector is None


class TestDirectRetrieval:
    """Test the direct-retrieval strategy over httpx."""

    @pytest.mark.asyncio
    async def test_success_returns_stripped_text(self, settings, extractor):
        transport = HttpTransport(
            settings, transport=html_transport(200, "<p>Hello</p><script>x()</script>")
        )
        async with transport:
            strategy = DirectRetrievalStrategy(transport, extractor)
            result = await strategy.extract(make_target())

        assert result.text == "Hello"
        assert result.strategy == "direct"

    @pytest.mark.asyncio
    async def test_error_status_raises_retrieval_failure(self, settings, extractor):
        transport = HttpTransport(settings, transport=html_transport(500, "oops"))
        async with transport:
            strategy = DirectRetrievalStrategy(transport, extractor)
            with pytest.raises(RetrievalFailure) as exc_info:
                await strategy.extract(make_target())

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_raises_retrieval_failure(self, settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with HttpTransport(settings, transport=httpx.MockTransport(handler)) as transport:
            with pytest.raises(RetrievalFailure):
                await transport.get("https://example.com/")


class TestRenderContextProvider:
    """Test render context ownership and release."""

    @pytest.mark.asyncio
    async def test_owned_contexts_released_across_cycles(
        self, provider, extractor, mock_page
    ):
        mock_page.evaluate.return_value = "  Hello   World "
        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)

        for _ in range(5):
            result = await strategy.extract(make_target())
            assert result.text == "Hello World"

        assert provider.open_contexts == 0
        assert mock_page.context.close.await_count == 5

    @pytest.mark.asyncio
    async def test_context_released_when_extraction_fails(
        self, provider, extractor, mock_page
    ):
        mock_page.evaluate.return_value = None
        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)

        with pytest.raises(ExtractionFailure):
            await strategy.extract(make_target())

        assert provider.open_contexts == 0
        mock_page.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_load_timeout_raises_render_timeout(
        self, provider, extractor, mock_page
    ):
        mock_page.wait_for_load_state.side_effect = PlaywrightTimeoutError("slow")
        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)

        with pytest.raises(RenderTimeout):
            await strategy.extract(make_target())

        assert provider.open_contexts == 0

    @pytest.mark.asyncio
    async def test_context_released_when_cancelled_during_navigation(
        self, provider, mock_page
    ):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        mock_page.goto.side_effect = hang

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(provider.open("https://example.com/"), 0.05)

        assert provider.open_contexts == 0
        mock_page.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_crashed_page_raises_extraction_failure(
        self, provider, extractor, mock_page
    ):
        mock_page.wait_for_load_state.side_effect = PlaywrightError("Target closed")
        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)

        with pytest.raises(ExtractionFailure):
            await strategy.extract(make_target())

        assert provider.open_contexts == 0
        mock_page.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_adopted_page_is_reused_and_left_open(
        self, provider, browser, extractor
    ):
        held_page = AsyncMock()
        held_page.is_closed = lambda: False
        held_page.context = AsyncMock()
        held_page.evaluate.return_value = "Live text"
        provider.adopt("https://example.com/", held_page)

        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)
        result = await strategy.extract(make_target())

        assert result.text == "Live text"
        browser.new_page.assert_not_awaited()
        held_page.goto.assert_not_awaited()
        held_page.context.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_selector_passed_to_page(self, provider, extractor, mock_page):
        mock_page.evaluate.return_value = "Plan A\nPlan B"
        strategy = RenderedPageStrategy(provider, extractor, render_timeout=1000)

        await strategy.extract(make_target(selector="#plans"))

        args = mock_page.evaluate.await_args.args
        assert args[1]["selector"] == "#plans"


class TestFallbackChain:
    """Test strategy ordering and fallback."""

    @pytest.fixture
    def rendered(self):
        strategy = Mock()
        strategy.extract = AsyncMock(
            side_effect=lambda target: ExtractionResult(
                url=target.url, text="Rendered", strategy="rendered"
            )
        )
        return strategy

    @pytest.fixture
    def direct(self):
        strategy = Mock()
        strategy.extract = AsyncMock()
        return strategy

    @pytest.mark.asyncio
    async def test_http_500_falls_back_to_rendering(self, settings, extractor, rendered):
        transport = HttpTransport(settings, transport=html_transport(500, "error"))
        async with transport:
            chain = FallbackChain(
                DirectRetrievalStrategy(transport, extractor), rendered, direct_timeout=5
            )
            result = await chain.extract(make_target())

        assert result.text == "Rendered"
        rendered.extract.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_direct_success_skips_rendering(self, settings, extractor, rendered):
        transport = HttpTransport(settings, transport=html_transport(200, "<p>Hi</p>"))
        async with transport:
            chain = FallbackChain(
                DirectRetrievalStrategy(transport, extractor), rendered, direct_timeout=5
            )
            result = await chain.extract(make_target())

        assert result.text == "Hi"
        rendered.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_selector_forces_rendering(self, direct, rendered):
        chain = FallbackChain(direct, rendered, direct_timeout=5)
        target = make_target(selector=".price")

        assert chain.plan(target) == [rendered]
        await chain.extract(target)
        direct.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_local_file_forces_rendering(self, direct, rendered):
        chain = FallbackChain(direct, rendered, direct_timeout=5)
        target = make_target(url="file:///tmp/page.html")

        await chain.extract(target)
        direct.extract.assert_not_awaited()
        rendered.extract.assert_awaited_once()

    def test_plain_http_target_plans_direct_first(self, direct, rendered):
        chain = FallbackChain(direct, rendered, direct_timeout=5)
        assert chain.plan(make_target()) == [direct, rendered]

    @pytest.mark.asyncio
    async def test_rendering_failure_propagates(self, direct, rendered):
        direct.extract.side_effect = RetrievalFailure("down")
        rendered.extract.side_effect = ExtractionFailure("broken")
        chain = FallbackChain(direct, rendered, direct_timeout=5)

        with pytest.raises(ExtractionFailure):
            await chain.extract(make_target())
