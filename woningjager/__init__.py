"""Crawler for Dutch real estate listings with Telegram alerts."""

__version__ = "0.1.0"
