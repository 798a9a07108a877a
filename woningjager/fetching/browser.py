"""Headless browser fetching for sites that render listings client-side."""

import asyncio
import logging

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from woningjager.config import settings
from woningjager.errors import FetchError
from woningjager.fetching.base import Fetcher

logger = logging.getLogger(__name__)


class BrowserClusterFetcher(Fetcher):
    """
    Bounded pool of isolated headless Chromium sessions.

    Every fetch opens its own browser context (no shared cookies or storage),
    navigates, waits until the network is idle and returns the rendered HTML
    wrapped in an httpx.Response, so callers cannot tell it apart from a plain
    HTTP fetch. At most ``max_concurrency`` pages render at the same time.
    """

    name = "browser"

    def __init__(
        self,
        max_concurrency: int | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ):
        """Initialize the pool; the browser starts on first use."""
        self.max_concurrency = max_concurrency or settings.browser_max_concurrency
        self.timeout = timeout or settings.browser_timeout
        self.user_agent = user_agent or settings.user_agent
        self._slots = asyncio.Semaphore(self.max_concurrency)
        self._start_lock = asyncio.Lock()
        self._playwright = None
        self.browser = None

    async def _init_browser(self):
        """Launch Chromium once."""
        async with self._start_lock:
            if self.browser is not None:
                return

            self._playwright = await async_playwright().start()
            self.browser = await self._playwright.chromium.launch(
                headless=True,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
            logger.debug("Browser started (max %d pages)", self.max_concurrency)

    async def close(self) -> None:
        """Close browser and clean up."""
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        content: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if method.upper() != "GET" or content is not None:
            raise FetchError(url, f"browser fetcher only navigates with GET, not {method}")

        try:
            await self._init_browser()
        except PlaywrightError as e:
            raise FetchError(url, f"browser failed to start: {e.message}") from e

        async with self._slots:
            try:
                context = await self.browser.new_context(
                    user_agent=self.user_agent,
                    viewport={"width": 1920, "height": 1080},
                    locale="nl-NL",
                    extra_http_headers=headers or {},
                )
            except PlaywrightError as e:
                raise FetchError(url, e.message) from e

            try:
                page = await context.new_page()
                navigation = await page.goto(
                    url, wait_until="networkidle", timeout=self.timeout * 1000
                )
                html = await page.content()
                status = navigation.status if navigation else 200
            except PlaywrightError as e:
                # playwright's TimeoutError is a subclass of Error
                raise FetchError(url, e.message) from e
            finally:
                await context.close()

        logger.debug("Rendered %s -> %d", url, status)
        return httpx.Response(
            status,
            text=html,
            headers={"Content-Type": "text/html; charset=utf-8"},
            request=httpx.Request(method, url),
        )
