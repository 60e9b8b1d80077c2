"""
Reverse geocoding: providers, provider selection and the coordinate cache.
"""

from .base import GeocodingProvider, NoOpProvider, empty_result
from .cache import GeocodeCache, cache_key
from .resolver import build_geocoding_provider

__all__ = [
    "GeocodingProvider",
    "NoOpProvider",
    "empty_result",
    "GeocodeCache",
    "cache_key",
    "build_geocoding_provider",
]
