import logging

from app.core.settings import Settings
from .base import GeocodingProvider, NoOpProvider
from .nominatim_provider import NominatimProvider
from .opencage_provider import OpenCageProvider

logger = logging.getLogger(__name__)


def build_geocoding_provider(settings: Settings) -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - Default: OpenCage geoproxy (needs GEOPROXY_KEY; unconfigured means no lookups).
    - GEOCODING_PROVIDER='nominatim': OpenStreetMap, no key required.
    - GEOCODING_PROVIDER='none': geocoding disabled.
    - Unknown names fall back to the default with a warning.
    """
    provider_name = (settings.GEOCODING_PROVIDER or "opencage").lower()
    timeout = settings.GEOCODING_TIMEOUT_SECONDS

    if provider_name == "none":
        logger.info("Geocoding disabled (GEOCODING_PROVIDER=none)")
        return NoOpProvider()

    if provider_name == "nominatim":
        logger.info("Geocoding provider initialized: nominatim")
        return NominatimProvider(user_agent=f"{settings.APP_NAME}/{settings.APP_VERSION}", timeout=timeout)

    if provider_name != "opencage":
        logger.warning(f"Unknown GEOCODING_PROVIDER '{provider_name}', using opencage")

    provider = OpenCageProvider(api_key=settings.GEOPROXY_KEY, timeout=timeout)
    if not provider.configured:
        logger.warning("GEOPROXY_KEY is not set; reports will be stored without resolved addresses")
    else:
        logger.info("Geocoding provider initialized: opencage")
    return provider
