"""
Prince Edward Island constants used across the assessment engine.

Sources:
- Natural Resources Canada (irradiance)
- Maritime Electric (electricity rates)
- Industry averages (installation costs)
"""

# Default location (Charlottetown)
PEI_COORDINATES = {
    "latitude": 46.2382,
    "longitude": -63.1311,
    "city": "Charlottetown",
    "province": "PE",
    "country": "Canada",
}

REGION_CODE = "PE"
DEFAULT_COUNTRY = "Canada"

PEI_BOUNDS = {
    "north": 47.1,
    "south": 45.9,
    "east": -61.9,
    "west": -64.5,
}

# Monthly GHI for Charlottetown (kWh/m²/day), January first
PEI_MONTHLY_IRRADIANCE = [1.8, 2.7, 3.6, 4.5, 5.3, 5.8, 5.7, 5.0, 3.9, 2.7, 1.7, 1.4]

PEI_SOLAR_DATA = {
    "annual_ghi": 1150,
    "average_peak_sun_hours": 3.7,
    "photovoltaic_potential": 1450,
    "optimal_tilt_angle": 44,
    "best_orientation": "south",
}

# Guards against corrupt upstream irradiance
PEAK_SUN_HOURS_RANGE = (2.5, 5.5)
PV_SYSTEM_EFFICIENCY = 0.80

PEI_ELECTRICITY_RATES = {
    "residential_rate": 0.1712,
    "net_metering_credit_rate": 0.1712,
    "monthly_basic_charge": 28.14,
    "annual_rate_increase": 0.03,
    "utility_name": "Maritime Electric",
}

PEI_INSTALLATION_COSTS = {
    "cost_per_watt_low": 2.50,
    "cost_per_watt_mid": 3.00,
    "cost_per_watt_high": 3.50,
    "panel_wattage": 400,
    "panel_area_sq_m": 1.7,
}

PEI_CLIMATE_FACTORS = {
    "snow_loss": 0.04,
    "temperature_coefficient": 1.02,
    "soiling": 0.02,
    "system_degradation": 0.005,
    "inverter_efficiency": 0.96,
    "system_losses": 0.02,
}

# ~0.90 effective production after climate and system losses
PEI_COMBINED_EFFICIENCY = (
    (1 - PEI_CLIMATE_FACTORS["snow_loss"])
    * PEI_CLIMATE_FACTORS["temperature_coefficient"]
    * (1 - PEI_CLIMATE_FACTORS["soiling"])
    * PEI_CLIMATE_FACTORS["inverter_efficiency"]
    * (1 - PEI_CLIMATE_FACTORS["system_losses"])
)

ORIENTATION_FACTORS = {
    "south": 1.0,
    "flat": 0.92,
    "east": 0.85,
    "west": 0.85,
    "north": 0.55,
}

PEI_HOUSEHOLD_DATA = {
    "average_monthly_consumption_kwh": 850,
    "average_annual_consumption_kwh": 10200,
}

PEI_ENVIRONMENTAL_DATA = {
    "grid_emission_factor": 0.4,  # kg CO2 per kWh
    "tree_co2_absorption_per_year": 21,  # kg
}
