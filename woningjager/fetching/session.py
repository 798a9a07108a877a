"""Plain HTTP fetching with one cookie jar for the whole process."""

import logging
from http.cookiejar import CookieJar
from urllib.parse import urlparse

import httpx

from woningjager.config import settings
from woningjager.errors import FetchError
from woningjager.fetching.base import Fetcher

logger = logging.getLogger(__name__)


class SessionFetcher(Fetcher):
    """
    HTTP fetcher that keeps session cookies between requests.

    Some sites hand out a session or anti-forgery token on a warm-up request
    that the data request must carry. The cookie jar is passed in and shared
    with the HTTP client, so Set-Cookie headers of every response (redirects
    included) land in it and go out with every later request to that origin.
    """

    name = "session"

    def __init__(
        self,
        cookie_jar: CookieJar,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize with the process cookie jar."""
        self.cookie_jar = cookie_jar
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout or settings.request_timeout
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                headers={
                    "User-Agent": self.user_agent,
                    "Accept-Language": "nl-NL,nl;q=0.9,en;q=0.8",
                },
                # a CookieJar is wrapped, not copied
                cookies=self.cookie_jar,
                follow_redirects=True,
                timeout=self.timeout,
                transport=self.transport,
            )
        return self.client

    async def close(self) -> None:
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        content: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    def cookie_value(self, name: str, url: str) -> str | None:
        """Value of a cookie the jar holds for the host of ``url``."""
        host = urlparse(url).hostname or ""
        for cookie in self.cookie_jar:
            domain = cookie.domain.lstrip(".")
            if cookie.name == name and (host == domain or host.endswith(f".{domain}")):
                return cookie.value
        return None
