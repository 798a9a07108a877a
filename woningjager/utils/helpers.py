"""Helper utilities for parsing listing pages."""

import re

POSTCODE_PATTERN = re.compile(r"(\d{4})\s*([A-Z]{2})?\s*(.*)")


def parse_price(text: str | None) -> int | None:
    """
    Parse a Dutch price text to euros.

    "€ 450.000 k.k." -> 450000. Dots and commas are thousand separators;
    texts without digits ("Prijs op aanvraag") give None.
    """
    if not text:
        return None

    match = re.search(r"\d[\d.,]*", text)
    if not match:
        return None

    # Drop cents: "€ 1.250,50" -> "1.250"
    number_str = re.sub(r",\d{1,2}$", "", match.group())
    digits = re.sub(r"\D", "", number_str)
    return int(digits) if digits else None


def parse_area(text: str | None) -> int | None:
    """Parse area text and extract square meters: "65 m²" -> 65."""
    if not text:
        return None

    match = re.search(r"(\d+(?:[.,]\d+)?)\s*m[²2]", text)
    if match:
        return int(round(float(match.group(1).replace(",", "."))))

    return None


def extract_number(text: str | None) -> int | None:
    """Extract first integer from text."""
    if not text:
        return None

    match = re.search(r"\d+", text)
    if match:
        return int(match.group())
    return None


def clean_text(text: str | None) -> str | None:
    """Clean and normalize text."""
    if not text:
        return None

    # Remove extra whitespace
    text = " ".join(text.split())
    return text.strip() or None


def split_postcode_city(text: str | None) -> tuple[str | None, str | None]:
    """
    Split a Dutch "postcode city" line.

    "1015 AB Amsterdam (Jordaan)" -> ("1015 AB", "Amsterdam")
    """
    text = clean_text(text)
    if not text:
        return None, None

    match = POSTCODE_PATTERN.match(text)
    if not match:
        return None, text

    digits, letters, rest = match.groups()
    zipcode = f"{digits} {letters}" if letters else digits
    city = clean_text(re.sub(r"\(.*?\)", "", rest))
    return zipcode, city
