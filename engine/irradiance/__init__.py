from engine.irradiance.cache import IrradianceCache
from engine.irradiance.provider import IrradianceDataProvider, build_profile, default_profile
