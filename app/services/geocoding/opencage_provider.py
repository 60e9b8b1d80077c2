import logging
from typing import Any, Dict, Optional

import requests

from .base import GeocodingProvider, empty_result

logger = logging.getLogger(__name__)


class OpenCageProvider(GeocodingProvider):
    """
    OpenCage reverse geocoding through the gps-coordinates.net geoproxy.

    - Requires GEOPROXY_KEY; without it the provider reports itself unconfigured.
    - Response follows the OpenCage schema: {"status": {"code": 200}, "results": [{"formatted": ...}]}
    - Fails gracefully and never raises upstream exceptions.
    """

    name = "opencage"
    BASE_URL = "https://www.gps-coordinates.net/geoproxy"

    def __init__(self, api_key: Optional[str], timeout: float = 3.0):
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def reverse_geocode(self, latitude: float, longitude: float, language: str = "en") -> Dict[str, Optional[str]]:
        if not self.api_key:
            return empty_result(self.name, "GEOPROXY_KEY is not configured")

        try:
            params = {
                "q": f"{latitude} {longitude}",  # encoded as "lat+lng"
                "key": self.api_key,
                "no_annotations": 1,
                "language": language,
            }
            resp = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
            data: Dict[str, Any] = resp.json()

            status_code = (data.get("status") or {}).get("code")
            results = data.get("results")
            if resp.status_code != 200 or status_code != 200 or not isinstance(results, list) or not results:
                logger.warning(f"OpenCage reverse-geocode returned no result (http={resp.status_code}, status={status_code})")
                return empty_result(self.name, f"no result (status {status_code or resp.status_code})")

            return {
                "formatted_address": results[0].get("formatted"),
                "error": None,
                "provider": self.name,
            }
        except Exception as e:
            logger.warning(f"OpenCage reverse-geocode error: {e}")
            return empty_result(self.name, str(e))
