"""
Address Enrichment Service - resolve a human-readable address for report coordinates.

Enrichment is best-effort: a report is always stored, with or without an
address. Provider failures, timeouts and missing configuration all degrade to
"no address" and are never surfaced to API callers.
"""

import logging
from typing import Any, Dict, Optional

from app.core.errors import EnrichmentUnavailable
from app.services.geocoding import GeocodeCache, GeocodingProvider

logger = logging.getLogger(__name__)


class AddressEnrichmentService:

    def __init__(self, provider: GeocodingProvider, cache: GeocodeCache, default_language: str = "en"):
        self.provider = provider
        self.cache = cache
        self.default_language = default_language

    def resolve(self, latitude: float, longitude: float, language: Optional[str] = None) -> Optional[str]:
        """
        Resolve an address for the coordinates.

        Returns the formatted address, or None when unavailable. Never raises.
        """
        hit, address = self.cache.lookup(latitude, longitude)
        if hit:
            return address

        if not self.provider.configured:
            # Not cached: configuring the provider later takes effect immediately
            return None

        try:
            address = self._lookup(latitude, longitude, language or self.default_language)
        except EnrichmentUnavailable as e:
            logger.warning(f"Reverse geocoding unavailable for ({latitude}, {longitude}): {e}")
            address = None

        self.cache.store(latitude, longitude, address)
        return address

    def _lookup(self, latitude: float, longitude: float, language: str) -> str:
        try:
            result = self.provider.reverse_geocode(latitude, longitude, language)
        except Exception as e:
            # Providers must not raise, but a misbehaving one must not break intake
            raise EnrichmentUnavailable(f"{self.provider.name} raised: {e}") from e

        address = (result or {}).get("formatted_address")
        if not isinstance(address, str) or not address.strip():
            raise EnrichmentUnavailable((result or {}).get("error") or "empty result")
        return address.strip()

    def enrich_location(self, location: Optional[Dict[str, Any]], language: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Return a location dict with the address filled in when it was blank.
        An existing non-blank address is kept as given.
        """
        if not location:
            return None

        enriched = {
            "latitude": location["latitude"],
            "longitude": location["longitude"],
            "address": location.get("address"),
        }
        if isinstance(enriched["address"], str) and enriched["address"].strip():
            return enriched

        enriched["address"] = self.resolve(enriched["latitude"], enriched["longitude"], language)
        if enriched["address"] is None:
            logger.info(f"No address resolved for ({enriched['latitude']}, {enriched['longitude']}); storing coordinates only")
        return enriched
