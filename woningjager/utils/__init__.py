"""Parsing helpers shared by adapters."""

from woningjager.utils.helpers import (
    clean_text,
    extract_number,
    parse_area,
    parse_price,
    split_postcode_city,
)

__all__ = ["clean_text", "extract_number", "parse_area", "parse_price", "split_postcode_city"]
