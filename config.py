import os
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

GEOCODE_API_KEY = os.getenv("GEOCODE_API_KEY", "")
GOOGLE_AI_API_KEY = os.getenv("GOOGLE_AI_API_KEY", "")
GOOGLE_AI_SUMMARY_API_KEY = os.getenv("GOOGLE_AI_SUMMARY_API_KEY", GOOGLE_AI_API_KEY)

VISION_MODELS = [m.strip() for m in os.getenv("VISION_MODELS", "gemini-2.5-flash,gemini-2.0-flash").split(",") if m.strip()]
SUMMARY_MODEL = os.getenv("SUMMARY_MODEL", "gemini-2.0-flash")
VISION_MAX_RETRIES = int(os.getenv("VISION_MAX_RETRIES", "3"))
VISION_RETRY_DELAY = float(os.getenv("VISION_RETRY_DELAY", "2.0"))

# "strict" surfaces vision failures, "heuristic" falls back to the synthetic estimator
ROOF_ANALYSIS_MODE = os.getenv("ROOF_ANALYSIS_MODE", "strict")
IMPROVEMENT_ANALYSIS_MODE = os.getenv("IMPROVEMENT_ANALYSIS_MODE", "heuristic")
HEURISTIC_SEED = os.getenv("HEURISTIC_SEED")

IRRADIANCE_CACHE_TTL_SECONDS = int(os.getenv("IRRADIANCE_CACHE_TTL_SECONDS", str(24 * 60 * 60)))
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
PORT = int(os.getenv("PORT", 3001))


class Settings(BaseModel):
    """Runtime settings bundled for the engine factory."""
    geocode_api_key: str = ""
    vision_api_key: str = ""
    summary_api_key: str = ""
    vision_models: List[str] = ["gemini-2.5-flash", "gemini-2.0-flash"]
    summary_model: str = "gemini-2.0-flash"
    vision_max_retries: int = 3
    vision_retry_delay: float = 2.0
    roof_analysis_mode: Literal["strict", "heuristic"] = "strict"
    improvement_analysis_mode: Literal["strict", "heuristic"] = "heuristic"
    heuristic_seed: Optional[int] = None
    irradiance_cache_ttl_seconds: int = 24 * 60 * 60
    http_timeout_seconds: float = 15.0


def get_settings() -> Settings:
    return Settings(
        geocode_api_key=GEOCODE_API_KEY,
        vision_api_key=GOOGLE_AI_API_KEY,
        summary_api_key=GOOGLE_AI_SUMMARY_API_KEY,
        vision_models=VISION_MODELS,
        summary_model=SUMMARY_MODEL,
        vision_max_retries=VISION_MAX_RETRIES,
        vision_retry_delay=VISION_RETRY_DELAY,
        roof_analysis_mode=ROOF_ANALYSIS_MODE,
        improvement_analysis_mode=IMPROVEMENT_ANALYSIS_MODE,
        heuristic_seed=int(HEURISTIC_SEED) if HEURISTIC_SEED else None,
        irradiance_cache_ttl_seconds=IRRADIANCE_CACHE_TTL_SECONDS,
        http_timeout_seconds=HTTP_TIMEOUT_SECONDS,
    )
