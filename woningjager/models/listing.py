"""Listing data models."""

import re

from pydantic import BaseModel, Field, field_validator

from woningjager.config import settings


def _to_int(value):
    """Coerce site values like "65", 65.4 or "€ 450.000 k.k." to an int."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value))
    digits = re.sub(r"\D", "", str(value))
    return int(digits) if digits else None


class Listing(BaseModel):
    """Normalized listing shared by all adapters."""

    url: str = Field(..., description="Listing URL, unique across platforms")
    image: str | bytes | None = None
    street: str = ""
    zipcode: str | None = Field(None, description="Four-digit postcode area, e.g. \"1015\"")
    meters: int | None = Field(None, description="Floor area in m²")
    price: int | None = Field(None, description="Asking price in euros")
    floor: int | str | None = Field(None, description="Raw floor as published")
    rooms: int | None = None
    city: str = Field(default_factory=lambda: settings.default_city)
    platform: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        return _to_int(value)

    @field_validator("meters", mode="before")
    @classmethod
    def _parse_meters(cls, value):
        if isinstance(value, str):
            # "65,5 m²" -> 65.5; keep the integer part of a decimal comma
            match = re.search(r"\d+(?:[.,]\d+)?", value)
            return int(round(float(match.group().replace(",", ".")))) if match else None
        return _to_int(value)

    @field_validator("rooms", mode="before")
    @classmethod
    def _parse_rooms(cls, value):
        return _to_int(value)

    @field_validator("zipcode", mode="before")
    @classmethod
    def _parse_zipcode(cls, value):
        # "1015 AB" -> "1015"; the four digits identify the area
        if value is None:
            return None
        value = str(value).strip()
        match = re.match(r"(\d{4})\s*[A-Za-z]{0,2}$", value)
        if match:
            return match.group(1)
        return value or None

    @field_validator("street", mode="before")
    @classmethod
    def _parse_street(cls, value):
        return " ".join(str(value).split()) if value else ""

    def fill_missing(self, other: "Listing") -> "Listing":
        """Return a copy with gaps filled from ``other``.

        Present values are never replaced and the url always stays ours.
        """
        updates = {
            name: getattr(other, name)
            for name in ("image", "zipcode", "meters", "price", "floor", "rooms")
            if getattr(self, name) is None and getattr(other, name) is not None
        }
        if not self.street and other.street:
            updates["street"] = other.street
        return self.model_copy(update=updates)


class AIProperties(BaseModel):
    """Attributes extracted from a listing's detail page text."""

    garden: bool | None = None
    rooftarrace: bool | None = None
    year: int | None = Field(None, description="Construction year")
    rooms: int | None = None
    servicecosts: int | None = Field(None, description="Monthly service costs in euros")
    rating: int | None = Field(None, description="Desirability 0-100")
    reason: str | None = None
    size: int | None = Field(None, description="Floor area in m², fallback")
    price: int | None = Field(None, description="Asking price, fallback")

    @field_validator("year", "rooms", "servicecosts", "size", "price", mode="before")
    @classmethod
    def _parse_numbers(cls, value):
        return _to_int(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value):
        value = _to_int(value)
        if value is None:
            return None
        return max(0, min(100, value))
