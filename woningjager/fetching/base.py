"""Base fetcher class."""

from abc import ABC, abstractmethod

import httpx


class Fetcher(ABC):
    """Abstract fetch capability handed to the orchestrator and adapter hooks."""

    name: str = "base"

    @abstractmethod
    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        content: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Fetch a URL.

        Args:
            url: URL to request
            method: HTTP method
            content: Request body
            headers: Extra request headers

        Returns:
            The response; status, text and json() are always available

        Raises:
            FetchError: On network errors and timeouts
        """
        pass

    async def close(self) -> None:
        """Clean up resources."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
