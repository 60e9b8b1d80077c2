from typing import Dict, Optional, Tuple

# 5 fractional digits is roughly 1 meter
CACHE_KEY_PRECISION = 5

_MISSING = object()


def cache_key(latitude: float, longitude: float) -> str:
    return f"{latitude:.{CACHE_KEY_PRECISION}f},{longitude:.{CACHE_KEY_PRECISION}f}"


class GeocodeCache:
    """
    Process-lifetime map of rounded coordinates to resolved address.

    Stores failures as None too, so a coordinate that failed once is not
    retried on every request. Unbounded. Concurrent writers for the same key
    compute the same value, so no locking.
    """

    def __init__(self):
        self._entries: Dict[str, Optional[str]] = {}

    def lookup(self, latitude: float, longitude: float) -> Tuple[bool, Optional[str]]:
        """Returns (hit, address). address may be None on a cached failure."""
        value = self._entries.get(cache_key(latitude, longitude), _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def store(self, latitude: float, longitude: float, address: Optional[str]) -> None:
        self._entries[cache_key(latitude, longitude)] = address

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
