import logging
from typing import Any, Dict, Optional

import requests

from .base import GeocodingProvider, empty_result

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim reverse-geocoding provider.

    - No API key required.
    - Uses a strict timeout (<= 3 seconds).
    - Includes a User-Agent header as required by Nominatim usage policy.
    - Never raises upstream exceptions; returns an error result on failure.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: str = "balagh-reports/1.0", timeout: float = 3.0):
        self.user_agent = user_agent
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float, language: str = "en") -> Dict[str, Optional[str]]:
        try:
            params = {
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "accept-language": language,
            }
            headers = {
                "User-Agent": self.user_agent,
            }
            resp = requests.get(self.BASE_URL, params=params, headers=headers, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Nominatim reverse-geocode failed with status {resp.status_code}")
                return empty_result(self.name, f"http {resp.status_code}")

            data: Dict[str, Any] = resp.json()
            if data.get("error"):
                return empty_result(self.name, str(data["error"]))

            return {
                "formatted_address": data.get("display_name"),
                "error": None,
                "provider": self.name,
            }
        except Exception as e:
            # Fail gracefully – never block or crash report creation.
            logger.warning(f"Nominatim reverse-geocode error: {e}")
            return empty_result(self.name, str(e))
