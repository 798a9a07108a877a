"""De Alliantie adapter - JSON endpoint behind an anti-forgery token."""

import logging

from bs4 import BeautifulSoup

from woningjager.adapters.base import Adapter
from woningjager.fetching import Fetcher
from woningjager.models import AIProperties, Listing
from woningjager.utils.helpers import clean_text

logger = logging.getLogger(__name__)


class DeAlliantieAdapter(Adapter):
    """
    Adapter for ik-zoek.de-alliantie.nl (housing corporation sales).

    The listing endpoint only answers a POST carrying the
    __RequestVerificationToken cookie handed out by the search page, so the
    search page is fetched first. Results carry no postcode; it is looked up
    by geocoding the address.
    """

    platform = "dealliantie"
    site_url = "https://ik-zoek.de-alliantie.nl"
    base_url = "https://ik-zoek.de-alliantie.nl/kopen/"
    target_url = "https://ik-zoek.de-alliantie.nl/getproperties"
    post_data = (
        "__RequestVerificationToken={{__RequestVerificationToken}}"
        "&type=kopen&city=&maxprice=0&minrooms=0&street=&minsurface=0"
        "&maxsurface=0&page=1&sorting=date&order=desc"
    )

    def parse_json(self, payload) -> list[Listing]:
        """Parse the getproperties response; only listings marked new."""
        return self.collect(payload["data"], self._parse_item)

    def _parse_item(self, item: dict) -> Listing | None:
        statuses = item.get("status") or []
        if not any(status.get("type") == "new" for status in statuses):
            return None

        path = item["url"].strip("/")
        image = next((i["url"] for i in item.get("images") or [] if i.get("url")), None)

        # "kopen/amsterdam/keizersgracht-10-2" -> "amsterdam"
        segments = path.split("/")
        city = segments[1].replace("-", " ").title() if len(segments) > 1 else None

        values = {
            "url": f"{self.site_url}/{path}",
            "image": f"{self.site_url}{image.split('?')[0]}" if image else None,
            "street": item.get("address"),
            "zipcode": None,
            "meters": item.get("size"),
            "price": item.get("price"),
            "floor": None,
        }
        if city:
            values["city"] = city
        return self.listing(**values)

    async def enrich(self, listing: Listing, fetcher: Fetcher) -> Listing:
        """Look up the postcode of the address."""
        if listing.zipcode:
            return listing

        address = f"{listing.street}, {listing.city}, Netherlands"
        zipcode = await self.geocoder.zipcode(address)
        return listing.model_copy(update={"zipcode": zipcode})

    async def get_ai_properties(self, fetcher: Fetcher, listing: Listing) -> AIProperties | None:
        """Extract attributes from the detail page summary, tabs and feature tables."""
        response = await fetcher.fetch(listing.url)
        response.raise_for_status()
        soup = BeautifulSoup(response.text, "lxml")

        contents = [
            clean_text(element.get_text(" "))
            for element in soup.select(
                ".property-summary, .property-tabs__body, .table.table--features"
            )
        ]
        contents = [content for content in contents if content]

        if not contents:
            logger.debug("No detail content for %s", listing.url)
            return None

        return await self.extractor.parse_properties(" \n ".join(contents))
