from tools.geocoding_client import GeocodingClient
from tools.nasa_power_client import NasaPowerClient
from tools.gemini_client import GeminiClient, is_rate_limited

__all__ = [
    "GeocodingClient",
    "NasaPowerClient",
    "GeminiClient",
    "is_rate_limited",
]
