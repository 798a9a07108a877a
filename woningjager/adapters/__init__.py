"""Site adapters for Dutch real estate platforms."""

from woningjager.adapters.base import Adapter, validate_adapter
from woningjager.adapters.dealliantie import DeAlliantieAdapter
from woningjager.adapters.funda import FundaAdapter
from woningjager.adapters.pararius import ParariusAdapter
from woningjager.ai import AIExtractor
from woningjager.errors import AdapterConfigError
from woningjager.geocoding import GoogleGeocoder

# Run order within a pass
ADAPTERS: tuple[type[Adapter], ...] = (
    DeAlliantieAdapter,
    ParariusAdapter,
    FundaAdapter,
)


def register_adapters(adapters: list[Adapter], platform: str | None = None) -> list[Adapter]:
    """
    Validate adapter instances and apply the platform filter.

    Raises:
        AdapterConfigError: On an invalid adapter, a duplicate platform or an
            unknown platform filter
    """
    seen = set()
    for adapter in adapters:
        validate_adapter(adapter)
        if adapter.platform in seen:
            raise AdapterConfigError(f"Platform {adapter.platform} is registered twice")
        seen.add(adapter.platform)

    if platform is None:
        return list(adapters)

    if platform not in seen:
        raise AdapterConfigError(
            f"Unknown platform {platform}. Available: {', '.join(sorted(seen))}"
        )
    return [adapter for adapter in adapters if adapter.platform == platform]


def load_adapters(
    platform: str | None = None,
    geocoder: GoogleGeocoder | None = None,
    extractor: AIExtractor | None = None,
) -> list[Adapter]:
    """Instantiate and validate the registered adapters."""
    geocoder = geocoder or GoogleGeocoder()
    extractor = extractor or AIExtractor()
    adapters = [cls(geocoder=geocoder, extractor=extractor) for cls in ADAPTERS]
    return register_adapters(adapters, platform)


__all__ = [
    "ADAPTERS",
    "Adapter",
    "DeAlliantieAdapter",
    "FundaAdapter",
    "ParariusAdapter",
    "load_adapters",
    "register_adapters",
    "validate_adapter",
]
