"""Base adapter class."""

import logging
from collections.abc import Awaitable, Callable, Iterable

from bs4 import BeautifulSoup

from woningjager.ai import AIExtractor
from woningjager.errors import AdapterConfigError
from woningjager.fetching import Fetcher
from woningjager.geocoding import GoogleGeocoder
from woningjager.models import AIProperties, Listing

logger = logging.getLogger(__name__)

TOKEN_PLACEHOLDER = "{{__RequestVerificationToken}}"
TOKEN_COOKIE = "__RequestVerificationToken"


class Adapter:
    """
    Description of how to fetch and parse one platform's listings.

    Subclasses set the class attributes and define exactly one of
    ``parse_json(payload)`` or ``parse_html(soup)``. Both parsers are pure:
    the same payload always gives the same listings, in the same order.

    Optional hooks, called by the orchestrator for new listings only:

    - ``enrich(listing, fetcher) -> Listing``: fill gaps, e.g. a postcode
    - ``get_ai_properties(fetcher, listing) -> AIProperties | None``: fetch the
      detail page and extract attributes with AI
    """

    platform: str = ""
    target_url: str = ""
    # Fetched first to set session cookies
    base_url: str | None = None
    # Form body for a POST to target_url; TOKEN_PLACEHOLDER is replaced with
    # the anti-forgery cookie from the warm-up request
    post_data: str | None = None
    # Render with the browser cluster instead of plain HTTP
    browser: bool = False

    parse_json: Callable[[object], list[Listing]] | None = None
    parse_html: Callable[[BeautifulSoup], list[Listing]] | None = None
    enrich: Callable[[Listing, Fetcher], Awaitable[Listing]] | None = None
    get_ai_properties: Callable[[Fetcher, Listing], Awaitable[AIProperties | None]] | None = None

    def __init__(
        self,
        geocoder: GoogleGeocoder | None = None,
        extractor: AIExtractor | None = None,
    ):
        """Initialize with the enrichment collaborators the hooks may use."""
        self.geocoder = geocoder or GoogleGeocoder()
        self.extractor = extractor or AIExtractor()

    def listing(self, **values) -> Listing:
        """Build a listing stamped with this adapter's platform."""
        return Listing(platform=self.platform, **values)

    def collect(self, items: Iterable, parse_item: Callable) -> list[Listing]:
        """
        Parse items one by one, skipping the ones that fail.

        ``parse_item`` returns a Listing or None (item not wanted).
        """
        result = []
        for item in items:
            try:
                listing = parse_item(item)
            except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
                logger.debug("%s: skipping unparseable item: %s", self.platform, e)
                continue
            if listing is not None:
                result.append(listing)
        return result

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.platform}>"


def validate_adapter(adapter: Adapter) -> Adapter:
    """
    Check an adapter against the adapter contract.

    Raises:
        AdapterConfigError: If the adapter cannot be used
    """
    name = type(adapter).__name__

    if not adapter.platform:
        raise AdapterConfigError(f"Adapter {name} does not have a platform")
    if not adapter.target_url:
        raise AdapterConfigError(f"Adapter {name} does not have a target_url")

    has_json = callable(adapter.parse_json)
    has_html = callable(adapter.parse_html)
    if not has_json and not has_html:
        raise AdapterConfigError(
            f"Adapter {adapter.platform} does not have a parse_html or parse_json function"
        )
    if has_json and has_html:
        raise AdapterConfigError(
            f"Adapter {adapter.platform} defines both parse_html and parse_json"
        )

    if adapter.post_data and TOKEN_PLACEHOLDER in adapter.post_data and not adapter.base_url:
        raise AdapterConfigError(
            f"Adapter {adapter.platform} needs a base_url to obtain its request token"
        )
    if adapter.browser and adapter.post_data:
        raise AdapterConfigError(
            f"Adapter {adapter.platform} cannot POST through the browser fetcher"
        )

    return adapter
