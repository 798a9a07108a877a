"""Data models."""

from woningjager.models.listing import AIProperties, Listing

__all__ = ["AIProperties", "Listing"]
