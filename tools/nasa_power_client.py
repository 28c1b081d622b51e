import logging
from datetime import date, timedelta
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

IRRADIANCE_PARAMETER = "ALLSKY_SFC_SW_DWN"


class NasaPowerClient:
    """Daily point time series from the NASA POWER API."""

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout
        self.base_url = "https://power.larc.nasa.gov/api/temporal/daily/point"

    def call_api(self, latitude: float, longitude: float, start: date, end: date) -> dict:
        params = {
            "parameters": IRRADIANCE_PARAMETER,
            "community": "RE",
            "longitude": longitude,
            "latitude": latitude,
            "start": start.strftime("%Y%m%d"),
            "end": end.strftime("%Y%m%d"),
            "format": "JSON",
        }
        logger.info(f"[nasa_power] Fetching {params['start']}..{params['end']} for {latitude}, {longitude}")
        resp = requests.get(self.base_url, params=params, headers={"Accept": "application/json"}, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_daily_irradiance(self, latitude: float, longitude: float, today: Optional[date] = None) -> Dict[str, float]:
        """Trailing 366 days of daily GHI keyed by ``YYYYMMDD``; negative values are sentinels."""
        end = today or date.today()
        start = end - timedelta(days=365)
        data = self.call_api(latitude, longitude, start, end)
        try:
            daily = data["properties"]["parameter"][IRRADIANCE_PARAMETER]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Failed to parse NASA POWER response: Missing key {e}")
        if not isinstance(daily, dict):
            raise ValueError(f"Failed to parse NASA POWER response: {IRRADIANCE_PARAMETER} is {type(daily).__name__}")
        return daily
