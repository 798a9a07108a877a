"""Crawl pipeline: fetch, parse, dedup, enrich, score, persist and alert."""

import logging
from http.cookiejar import CookieJar

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from woningjager.adapters import Adapter, load_adapters
from woningjager.adapters.base import TOKEN_COOKIE, TOKEN_PLACEHOLDER
from woningjager.ai import AIExtractor
from woningjager.areas import desirability, load_areas
from woningjager.config import settings
from woningjager.errors import FetchError
from woningjager.fetching import BrowserClusterFetcher, Fetcher, SessionFetcher
from woningjager.floor import normalize_floor
from woningjager.geocoding import GoogleGeocoder
from woningjager.models import AIProperties, Listing
from woningjager.notify import TelegramNotifier
from woningjager.scoring import build_alert, passes_prefilter
from woningjager.storage import ListingStore, build_record

logger = logging.getLogger(__name__)


class RunSummary(BaseModel):
    """Outcome of one adapter in one pass."""

    platform: str
    fetched: int = 0
    new: int = 0
    alerted: int = 0
    failed: bool = False
    error: str | None = None


class Crawler:
    """
    Drives every adapter through one crawl pass.

    Adapters run one after the other. Each listing goes through the dedup
    gate before anything costly happens; only listings whose row this pass
    inserted are alerted, so a listing is alerted at most once.
    """

    def __init__(
        self,
        adapters: list[Adapter],
        store: ListingStore,
        session_fetcher: Fetcher,
        browser_fetcher: Fetcher | None = None,
        notifier: TelegramNotifier | None = None,
        geocoder: GoogleGeocoder | None = None,
        extractor: AIExtractor | None = None,
        areas=None,
        min_meters: int | None = None,
        development: bool | None = None,
    ):
        self.adapters = adapters
        self.store = store
        self.session_fetcher = session_fetcher
        self.browser_fetcher = browser_fetcher
        self.notifier = notifier or TelegramNotifier()
        self.geocoder = geocoder
        self.extractor = extractor
        self.areas = areas if areas is not None else load_areas(settings.areas_file)
        self.min_meters = min_meters if min_meters is not None else settings.min_meters
        self.development = development if development is not None else settings.development

    @classmethod
    def from_settings(cls, platform: str | None = None) -> "Crawler":
        """
        Build a crawler with the real collaborators.

        Raises:
            AdapterConfigError: If an adapter is invalid
        """
        geocoder = GoogleGeocoder()
        extractor = AIExtractor()
        adapters = load_adapters(
            platform or settings.filter_platform,
            geocoder=geocoder,
            extractor=extractor,
        )
        return cls(
            adapters=adapters,
            store=ListingStore(settings.get_database_url()),
            session_fetcher=SessionFetcher(CookieJar()),
            browser_fetcher=BrowserClusterFetcher(),
            notifier=TelegramNotifier(),
            geocoder=geocoder,
            extractor=extractor,
        )

    async def close(self) -> None:
        """Close fetchers, clients and the store."""
        for resource in (
            self.session_fetcher,
            self.browser_fetcher,
            self.notifier,
            self.geocoder,
            self.extractor,
        ):
            if resource is not None:
                await resource.close()
        await self.store.close()

    def fetcher_for(self, adapter: Adapter) -> Fetcher:
        """The fetch strategy an adapter asks for."""
        if adapter.browser:
            if self.browser_fetcher is None:
                raise FetchError(adapter.target_url, "no browser fetcher configured")
            return self.browser_fetcher
        return self.session_fetcher

    async def run_once(self) -> list[RunSummary]:
        """Run every adapter once, sequentially."""
        logger.info("Starting crawl of %d adapter(s)", len(self.adapters))

        summaries = []
        for adapter in self.adapters:
            summaries.append(await self.crawl(adapter))

        logger.info(
            "Crawl finished: %d new, %d alerted, %d adapter(s) failed",
            sum(s.new for s in summaries),
            sum(s.alerted for s in summaries),
            sum(1 for s in summaries if s.failed),
        )
        return summaries

    async def crawl(self, adapter: Adapter) -> RunSummary:
        """
        Fetch, parse and process one adapter's listing index.

        Failures end this adapter's cycle only; they are recorded on the
        returned summary and never reach the other adapters.
        """
        summary = RunSummary(platform=adapter.platform)

        try:
            await self._crawl(adapter, summary)
        except FetchError as e:
            logger.warning("%s: fetch failed, skipping this run: %s", adapter.platform, e)
            summary.failed = True
            summary.error = str(e)
        except Exception as e:
            logger.exception("%s: crawl aborted", adapter.platform)
            summary.failed = True
            summary.error = f"{type(e).__name__}: {e}"

        return summary

    async def _crawl(self, adapter: Adapter, summary: RunSummary) -> None:
        fetcher = self.fetcher_for(adapter)
        response = await self.fetch_index(adapter, fetcher)

        try:
            listings = self.parse(adapter, response)
        except Exception as e:
            logger.exception("%s: could not parse %s", adapter.platform, adapter.target_url)
            summary.failed = True
            summary.error = f"parse error: {e}"
            return

        summary.fetched = len(listings)
        logger.info("%s: %d listing(s) on the index", adapter.platform, len(listings))

        for listing in listings:
            await self.process_listing(adapter, fetcher, listing, summary)

    async def fetch_index(self, adapter: Adapter, fetcher: Fetcher) -> httpx.Response:
        """
        Fetch the listing index, warming up the session first when needed.

        Raises:
            FetchError: On network errors, timeouts and error statuses
        """
        if adapter.base_url:
            await fetcher.fetch(adapter.base_url)

        response = await fetcher.fetch(adapter.target_url, **self.request_options(adapter))
        if response.is_error:
            raise FetchError(adapter.target_url, f"HTTP {response.status_code}")
        return response

    def request_options(self, adapter: Adapter) -> dict:
        """Method, body and headers for the index request."""
        if not adapter.post_data:
            return {}

        token = None
        if adapter.base_url and isinstance(self.session_fetcher, SessionFetcher):
            token = self.session_fetcher.cookie_value(TOKEN_COOKIE, adapter.base_url)
        if token is None and TOKEN_PLACEHOLDER in adapter.post_data:
            logger.debug("%s: no %s cookie after warm-up", adapter.platform, TOKEN_COOKIE)

        return {
            "method": "POST",
            "content": adapter.post_data.replace(TOKEN_PLACEHOLDER, token or ""),
            "headers": {
                "Content-Type": "application/x-www-form-urlencoded",
                "X-Requested-With": "XMLHttpRequest",
            },
        }

    def parse(self, adapter: Adapter, response: httpx.Response) -> list[Listing]:
        """Run the adapter's parser and stamp the platform on every listing."""
        if adapter.parse_json is not None:
            listings = adapter.parse_json(response.json())
        else:
            listings = adapter.parse_html(BeautifulSoup(response.text, "lxml"))

        return [
            listing if listing.platform == adapter.platform
            else listing.model_copy(update={"platform": adapter.platform})
            for listing in listings
        ]

    async def process_listing(
        self,
        adapter: Adapter,
        fetcher: Fetcher,
        listing: Listing,
        summary: RunSummary,
    ) -> None:
        """Take one listing through dedup, enrichment, persistence and alerting."""
        try:
            if await self.store.exists(listing.url):
                return
        except SQLAlchemyError:
            logger.exception("Could not check %s", listing.url)
            return

        listing = await self.enrich(adapter, fetcher, listing)

        floor = normalize_floor(listing.floor, listing.street)
        area = desirability(self.areas, listing.zipcode)
        eligible = passes_prefilter(area, listing.meters, self.min_meters)

        ai = await self.ai_properties(adapter, fetcher, listing, eligible)

        try:
            inserted = await self.store.insert_if_absent(build_record(listing, floor, ai))
        except SQLAlchemyError:
            logger.exception("Could not store %s", listing.url)
            return

        if not inserted:
            logger.debug("%s was stored by another run", listing.url)
            return

        summary.new += 1
        logger.info(
            "%s: new listing %s (zipcode %s, area %s, floor %s)",
            adapter.platform, listing.street or listing.url, listing.zipcode, area, floor,
        )

        if eligible:
            await self.alert(listing, floor, area, ai)
            summary.alerted += 1

    async def enrich(self, adapter: Adapter, fetcher: Fetcher, listing: Listing) -> Listing:
        """Let the adapter fill a missing postcode; its output never overrides known values."""
        if adapter.enrich is None or listing.zipcode:
            return listing

        try:
            enriched = await adapter.enrich(listing, fetcher)
        except Exception as e:
            logger.warning("%s: enrichment of %s failed: %s", adapter.platform, listing.url, e)
            return listing

        if enriched is None:
            return listing
        return listing.fill_missing(enriched)

    async def ai_properties(
        self,
        adapter: Adapter,
        fetcher: Fetcher,
        listing: Listing,
        eligible: bool,
    ) -> AIProperties | None:
        """AI attributes for eligible listings (all listings in development mode)."""
        if adapter.get_ai_properties is None:
            return None
        if not (eligible or self.development):
            return None

        try:
            return await adapter.get_ai_properties(fetcher, listing)
        except Exception as e:
            logger.warning("%s: AI extraction for %s failed: %s", adapter.platform, listing.url, e)
            return None

    async def alert(
        self,
        listing: Listing,
        floor: int | None,
        area: int,
        ai: AIProperties | None,
    ) -> bool:
        """Build and send the alert; delivery problems are logged only."""
        alert = build_alert(listing, floor, area, ai)

        if self.geocoder is not None and self.geocoder.enabled and listing.street:
            static_map = await self.geocoder.static_map(
                f"{listing.street}, {listing.city}, Netherlands"
            )
            if static_map:
                alert.images.append(static_map)

        try:
            return await self.notifier.send(alert.text, alert.images, silent=alert.silent)
        except httpx.HTTPError as e:
            logger.error("Could not send alert for %s: %s", listing.url, e)
            return False
