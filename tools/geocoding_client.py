import logging
from typing import Optional

import requests

from engine.region import PEI_BOUNDS

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Thin wrapper over the Google Geocoding JSON API."""

    def __init__(self, api_key: str, timeout: float = 10.0):
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = "https://maps.googleapis.com/maps/api/geocode/json"

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def call_api(self, address: str) -> Optional[dict]:
        """Return the decoded payload, or None when the HTTP call itself fails."""
        params = {
            "address": address,
            "key": self.api_key,
            # Bias results towards PEI
            "bounds": f"{PEI_BOUNDS['south']},{PEI_BOUNDS['west']}|{PEI_BOUNDS['north']},{PEI_BOUNDS['east']}",
        }
        resp = requests.get(self.base_url, params=params, timeout=self.timeout)
        if not resp.ok:
            logger.warning(f"[geocoding] HTTP {resp.status_code} from geocoding API")
            return None
        return resp.json()
