"""Pararius adapter - server-rendered search pages."""

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from woningjager.adapters.base import Adapter
from woningjager.fetching import Fetcher
from woningjager.models import AIProperties, Listing
from woningjager.utils import clean_text, extract_number, parse_area, parse_price, split_postcode_city

# Title prefixes Pararius puts before the address
PROPERTY_TYPES = ("Appartement", "Huis", "Studio", "Kamer")


class ParariusAdapter(Adapter):
    """Adapter for pararius.nl sale listings in Amsterdam, newest first."""

    platform = "pararius"
    site_url = "https://www.pararius.nl"
    target_url = "https://www.pararius.nl/koopwoningen/amsterdam/sorteer-nieuwste"

    def parse_html(self, soup: BeautifulSoup) -> list[Listing]:
        """Parse the search result list."""
        items = soup.select("li.search-list__item--listing")
        if not items and soup.select_one("ul.search-list") is None:
            raise ValueError("Pararius page has no search list")
        return self.collect(items, self._parse_item)

    def _parse_item(self, element) -> Listing | None:
        link = element.select_one("a.listing-search-item__link--title")
        if not link or not link.get("href"):
            return None

        street = clean_text(link.get_text())
        for prefix in PROPERTY_TYPES:
            if street and street.startswith(f"{prefix} "):
                street = street[len(prefix) + 1:]
                break

        location = element.select_one(".listing-search-item__sub-title")
        zipcode, city = split_postcode_city(location.get_text() if location else None)

        price = element.select_one(".listing-search-item__price")
        surface = element.select_one(".illustrated-features__item--surface-area")
        rooms = element.select_one(".illustrated-features__item--number-of-rooms")
        image = element.select_one("img")

        values = {
            "url": urljoin(self.site_url, link["href"]),
            "image": (image.get("src") or image.get("data-src")) if image else None,
            "street": street,
            "zipcode": zipcode,
            "meters": parse_area(surface.get_text()) if surface else None,
            "price": parse_price(price.get_text()) if price else None,
            "rooms": extract_number(rooms.get_text()) if rooms else None,
        }
        if city:
            values["city"] = city
        return self.listing(**values)

    async def get_ai_properties(self, fetcher: Fetcher, listing: Listing) -> AIProperties | None:
        """Extract attributes from the description and feature list of the detail page."""
        response = await fetcher.fetch(listing.url)
        response.raise_for_status()
        soup = BeautifulSoup(response.text, "lxml")

        contents = [
            clean_text(element.get_text(" "))
            for element in soup.select(".listing-detail-description__content, .page__details")
        ]
        text = " \n ".join(content for content in contents if content)
        return await self.extractor.parse_properties(text) if text else None
