import asyncio
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

import requests

from engine.errors import DataQualityError
from engine.irradiance.cache import IrradianceCache
from engine.region import (
    PEAK_SUN_HOURS_RANGE,
    PEI_MONTHLY_IRRADIANCE,
    PEI_SOLAR_DATA,
    PV_SYSTEM_EFFICIENCY,
)
from models.schemas import IrradianceProfile
from tools.nasa_power_client import NasaPowerClient

logger = logging.getLogger(__name__)


def reading_month(day: str) -> Optional[int]:
    """Month (1-12) of a ``YYYYMMDD`` key, or None when the key is malformed."""
    day = str(day)
    if len(day) != 8 or not day.isdigit():
        return None
    month = int(day[4:6])
    return month if 1 <= month <= 12 else None


def valid_readings(daily: Dict[str, float]) -> Dict[str, float]:
    """Drop negative sentinel values (NASA reports -999 for missing data) and malformed day keys."""
    valid = {}
    for day, value in daily.items():
        if value is None or reading_month(day) is None:
            continue
        value = float(value)
        if value >= 0:
            valid[day] = value
    return valid


def calculate_monthly_averages(daily: Dict[str, float]) -> List[float]:
    totals = [0.0] * 12
    counts = [0] * 12
    for day, value in daily.items():
        month = reading_month(day)
        if month is None:
            raise ValueError(f"Malformed NASA POWER day key: {day!r}")
        month -= 1
        totals[month] += value
        counts[month] += 1
    return [round(totals[i] / counts[i], 2) if counts[i] else 0 for i in range(12)]


def build_profile(daily: Dict[str, float], latitude: float, longitude: float) -> IrradianceProfile:
    valid = valid_readings(daily)
    if not valid:
        raise DataQualityError("No valid irradiance data received from NASA POWER", service="nasa_power")

    # Average then project to a full year so partial years are tolerated
    average_daily = sum(valid.values()) / len(valid)
    annual_ghi = round(average_daily * 365)

    low, high = PEAK_SUN_HOURS_RANGE
    peak_sun_hours = max(low, min(round(annual_ghi / 365, 2), high))

    return IrradianceProfile(
        annual_ghi=annual_ghi,
        monthly_ghi=calculate_monthly_averages(valid),
        average_peak_sun_hours=peak_sun_hours,
        photovoltaic_potential=round(annual_ghi * PV_SYSTEM_EFFICIENCY),
        data_source="live",
        latitude=latitude,
        longitude=longitude,
    )


def default_profile(latitude: float, longitude: float) -> IrradianceProfile:
    return IrradianceProfile(
        annual_ghi=PEI_SOLAR_DATA["annual_ghi"],
        monthly_ghi=list(PEI_MONTHLY_IRRADIANCE),
        average_peak_sun_hours=PEI_SOLAR_DATA["average_peak_sun_hours"],
        photovoltaic_potential=PEI_SOLAR_DATA["photovoltaic_potential"],
        data_source="default",
        latitude=latitude,
        longitude=longitude,
    )


class IrradianceDataProvider:
    def __init__(self, client: NasaPowerClient, cache: IrradianceCache, today: Optional[Callable[[], date]] = None):
        self.client = client
        self.cache = cache
        self._today = today or date.today

    async def get_profile(self, latitude: float, longitude: float) -> IrradianceProfile:
        cached = self.cache.get(latitude, longitude)
        if cached is not None:
            logger.info(f"[irradiance] Using cached data for {self.cache.key_for(latitude, longitude)}")
            return cached.model_copy(update={"data_source": "cached"}, deep=True)

        try:
            daily = await asyncio.to_thread(self.client.get_daily_irradiance, latitude, longitude, self._today())
            profile = build_profile(daily, latitude, longitude)
        except (requests.RequestException, ValueError, TypeError, AttributeError, DataQualityError) as e:
            logger.warning(f"[irradiance] Falling back to PEI defaults for {latitude}, {longitude}: {e}")
            return default_profile(latitude, longitude)

        self.cache.set(latitude, longitude, profile)
        logger.info(
            f"[irradiance] annual_ghi={profile.annual_ghi} peak_sun_hours={profile.average_peak_sun_hours} "
            f"pv_potential={profile.photovoltaic_potential}"
        )
        return profile
