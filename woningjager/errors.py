"""Exception types raised by the crawler."""


class WoningjagerError(Exception):
    """Base class for all crawler errors."""


class AdapterConfigError(WoningjagerError):
    """An adapter does not satisfy the adapter contract.

    Raised while loading adapters; this is the only error allowed to stop
    startup.
    """


class FetchError(WoningjagerError):
    """A request could not be completed (network error, timeout, bad status)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
