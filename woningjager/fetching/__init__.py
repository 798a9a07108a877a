"""Fetch strategies: session HTTP and headless browser cluster."""

from woningjager.fetching.base import Fetcher
from woningjager.fetching.browser import BrowserClusterFetcher
from woningjager.fetching.session import SessionFetcher

__all__ = ["Fetcher", "BrowserClusterFetcher", "SessionFetcher"]
