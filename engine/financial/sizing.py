import logging
import math

from engine.region import (
    ORIENTATION_FACTORS,
    PEI_COMBINED_EFFICIENCY,
    PEI_INSTALLATION_COSTS,
)
from models.schemas import IrradianceProfile, RoofAnalysis, SystemSpecs

logger = logging.getLogger(__name__)

# Panel footprint plus 20% for spacing and access paths
PANEL_SPACING_FACTOR = 1.2
MIN_PANELS = 8

# (usable area upper bound in m², panel cap)
PANEL_CAPS = [
    (50, 12),
    (75, 18),
    (100, 25),
    (math.inf, 30),
]


def max_panels_for_area(usable_area_sq_m: float) -> int:
    for upper, cap in PANEL_CAPS:
        if usable_area_sq_m < upper:
            return cap
    return PANEL_CAPS[-1][1]


def orientation_factor(orientation: str) -> float:
    key = (orientation or "south").strip().lower()
    if key in ORIENTATION_FACTORS:
        return ORIENTATION_FACTORS[key]
    # Compound bearings such as "South-West" use their primary direction
    primary = key.replace("_", "-").split("-")[0]
    return ORIENTATION_FACTORS.get(primary, ORIENTATION_FACTORS["south"])


def size_system(roof: RoofAnalysis, irradiance: IrradianceProfile) -> SystemSpecs:
    """Fit 400 W panels on the usable roof and estimate first-year production."""
    panel_area = PEI_INSTALLATION_COSTS["panel_area_sq_m"]
    usable_area = roof.usable_area_sq_m

    panels_fit = math.floor(usable_area / (panel_area * PANEL_SPACING_FACTOR))
    panel_count = max(MIN_PANELS, min(panels_fit, max_panels_for_area(usable_area)))

    system_size_kw = round(panel_count * PEI_INSTALLATION_COSTS["panel_wattage"] / 1000, 2)
    annual_production = (
        system_size_kw
        * irradiance.average_peak_sun_hours
        * 365
        * PEI_COMBINED_EFFICIENCY
        * orientation_factor(roof.orientation)
    )

    specs = SystemSpecs(
        panel_count=panel_count,
        system_size_kw=system_size_kw,
        roof_area_used_sq_m=round(panel_count * panel_area, 1),
        annual_production_kwh=round(annual_production),
    )
    logger.info(f"[sizing] {panel_count} panels ({system_size_kw} kW) -> {specs.annual_production_kwh} kWh/yr")
    return specs
