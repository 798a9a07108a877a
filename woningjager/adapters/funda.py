"""Funda adapter - client-side rendered, fetched through the browser cluster."""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from woningjager.adapters.base import Adapter
from woningjager.fetching import Fetcher
from woningjager.models import AIProperties, Listing
from woningjager.utils import clean_text, extract_number, parse_area, parse_price, split_postcode_city


class FundaAdapter(Adapter):
    """
    Adapter for funda.nl sale listings in Amsterdam.

    Search results are rendered in the browser and the site blocks plain
    HTTP clients, so both the index and detail pages go through the
    browser cluster.
    """

    platform = "funda"
    site_url = "https://www.funda.nl"
    target_url = (
        "https://www.funda.nl/zoeken/koop"
        "?selected_area=%5B%22amsterdam%22%5D&sort=%22date_down%22"
    )
    browser = True

    def parse_html(self, soup: BeautifulSoup) -> list[Listing]:
        """Parse the rendered search result cards."""
        cards = soup.select("[data-test-id='search-result-item']")
        if not cards and soup.select_one("[data-test-id='search-results'], main") is None:
            raise ValueError("Funda page has no search results container")
        return self.collect(cards, self._parse_card)

    def _parse_card(self, card) -> Listing | None:
        link = card.select_one("a[data-test-id='object-image-link'], a[href*='/koop/']")
        if not link or not link.get("href"):
            return None

        street = card.select_one("[data-test-id='street-name-house-number']")
        location = card.select_one("[data-test-id='postal-code-city']")
        price = card.select_one("[data-test-id='price-sale']")
        image = card.select_one("img")

        zipcode, city = split_postcode_city(location.get_text() if location else None)

        # Feature list: "65 m²", "80 m²" (plot), "3" (rooms), energy label
        meters = None
        rooms = None
        for item in card.select("ul li"):
            text = clean_text(item.get_text()) or ""
            if meters is None and re.search(r"m[²2]", text):
                meters = parse_area(text)
            elif rooms is None and re.fullmatch(r"\d+", text):
                rooms = extract_number(text)

        # Drop query strings: links carry tracking parameters
        href = urljoin(self.site_url, link["href"]).split("?")[0]

        values = {
            "url": href,
            "image": (image.get("src") or image.get("data-src")) if image else None,
            "street": street.get_text() if street else "",
            "zipcode": zipcode,
            "meters": meters,
            "price": parse_price(price.get_text()) if price else None,
            "rooms": rooms,
        }
        if city:
            values["city"] = city
        return self.listing(**values)

    async def get_ai_properties(self, fetcher: Fetcher, listing: Listing) -> AIProperties | None:
        """Extract attributes from the rendered detail page."""
        response = await fetcher.fetch(listing.url)
        response.raise_for_status()
        soup = BeautifulSoup(response.text, "lxml")

        contents = [
            clean_text(element.get_text(" "))
            for element in soup.select(".object-description-body, .object-kenmerken")
        ]
        text = " \n ".join(content for content in contents if content)
        return await self.extractor.parse_properties(text) if text else None
