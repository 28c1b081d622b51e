import logging
import time
from typing import Callable, Dict, Optional, Tuple

from models.schemas import IrradianceProfile

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class IrradianceCache:
    """Process-wide irradiance cache keyed by coordinates rounded to two decimals.

    Construct one at startup and hand it to every provider. Expired entries are
    evicted lazily when their key is looked up again. Concurrent writers for the
    same key store equivalent payloads, so the last writer simply wins.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[IrradianceProfile, float]] = {}

    @staticmethod
    def key_for(latitude: float, longitude: float) -> str:
        return f"{latitude:.2f},{longitude:.2f}"

    def get(self, latitude: float, longitude: float) -> Optional[IrradianceProfile]:
        key = self.key_for(latitude, longitude)
        entry = self._entries.get(key)
        if entry is None:
            return None
        profile, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            logger.info(f"[irradiance_cache] Entry {key} expired")
            self._entries.pop(key, None)
            return None
        return profile

    def set(self, latitude: float, longitude: float, profile: IrradianceProfile) -> None:
        self._entries[self.key_for(latitude, longitude)] = (profile, self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
