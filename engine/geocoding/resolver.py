import asyncio
import logging
import math
import re

import requests

from engine.region import DEFAULT_COUNTRY, PEI_BOUNDS, PEI_COORDINATES, REGION_CODE
from models.schemas import Address, GeocodedLocation
from tools.geocoding_client import GeocodingClient

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
# PEI forward sortation areas: C0A, C0B, C1A, C1B, C1C, C1E, C1N
PEI_POSTAL_CODE = re.compile(r"^C[01][ABCEN]\d[A-Z]\d$")


def is_location_in_region(latitude: float, longitude: float) -> bool:
    return (
        PEI_BOUNDS["south"] <= latitude <= PEI_BOUNDS["north"]
        and PEI_BOUNDS["west"] <= longitude <= PEI_BOUNDS["east"]
    )


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_valid_postal_code(postal_code: str) -> bool:
    normalized = re.sub(r"\s", "", postal_code or "").upper()
    return bool(PEI_POSTAL_CODE.match(normalized))


def build_address_string(address: Address) -> str:
    parts = [
        address.street,
        address.city,
        REGION_CODE,
        address.postal_code,
        address.country or DEFAULT_COUNTRY,
    ]
    return ", ".join(p.strip() for p in parts if p and p.strip())


def default_location(address: Address, reason: str) -> GeocodedLocation:
    return GeocodedLocation(
        latitude=PEI_COORDINATES["latitude"],
        longitude=PEI_COORDINATES["longitude"],
        formatted_address=f"{address.street}, {address.city}, {REGION_CODE} {address.postal_code}, {DEFAULT_COUNTRY}",
        is_default=True,
        reason=reason,
    )


class GeocodingResolver:
    """Resolves an address to PEI coordinates. Every failure degrades to Charlottetown."""

    def __init__(self, client: GeocodingClient):
        self.client = client

    async def resolve(self, address: Address) -> GeocodedLocation:
        if not self.client.configured:
            logger.warning("[geocoding] GEOCODE_API_KEY not configured, using PEI defaults")
            return default_location(address, "Geocoding API key not configured")

        query = build_address_string(address)
        try:
            data = await asyncio.to_thread(self.client.call_api, query)
        except requests.RequestException as e:
            logger.warning(f"[geocoding] Request failed for '{query}': {e}")
            return default_location(address, f"Geocoding request failed: {e}")
        except ValueError as e:
            logger.warning(f"[geocoding] Could not decode response for '{query}': {e}")
            return default_location(address, "Geocoding response was not valid JSON")

        if not isinstance(data, dict):
            return default_location(address, "Geocoding request failed")

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            logger.warning(f"[geocoding] Geocoding failed: {status} {data.get('error_message', '')}")
            return default_location(address, f"Geocoding failed: {status}")

        try:
            first = results[0]
            lat = float(first["geometry"]["location"]["lat"])
            lng = float(first["geometry"]["location"]["lng"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"[geocoding] Malformed result: missing {e}")
            return default_location(address, "Geocoding response was malformed")

        if not is_location_in_region(lat, lng):
            logger.warning(f"[geocoding] {lat}, {lng} is outside PEI bounds, using defaults")
            return default_location(address, "Address is outside Prince Edward Island")

        logger.info(f"[geocoding] Resolved '{query}' to {lat}, {lng}")
        return GeocodedLocation(
            latitude=lat,
            longitude=lng,
            formatted_address=first.get("formatted_address") or query,
            is_default=False,
        )
