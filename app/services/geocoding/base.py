from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """
    Abstract reverse-geocoding provider.

    Contract:
    - Input: latitude, longitude (floats), language code
    - Output: dict with well-known keys:
      {
        "formatted_address": str | None,
        "error": str | None,
        "provider": str
      }
    - MUST NEVER raise upstream exceptions.
    - MUST return formatted_address=None and set "error" on failure.
    - Implementations should enforce a network timeout <= 3 seconds.
    """

    name = "base"

    @property
    def configured(self) -> bool:
        """False when required credentials are missing; callers then skip the lookup."""
        return True

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float, language: str = "en") -> Dict[str, Optional[str]]:
        raise NotImplementedError


def empty_result(provider: str, error: Optional[str] = None) -> Dict[str, Optional[str]]:
    return {
        "formatted_address": None,
        "error": error,
        "provider": provider,
    }


class NoOpProvider(GeocodingProvider):
    """Used when GEOCODING_PROVIDER=none. Never configured, never called."""

    name = "none"

    @property
    def configured(self) -> bool:
        return False

    def reverse_geocode(self, latitude: float, longitude: float, language: str = "en"):
        return empty_result(self.name)
