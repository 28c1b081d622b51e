from typing import List, Optional

from engine.region import (
    PEI_ELECTRICITY_RATES,
    PEI_INSTALLATION_COSTS,
    PEI_MONTHLY_IRRADIANCE,
)
from models.schemas import CostRange

DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def get_system_cost_range(system_size_kw: float) -> CostRange:
    watts = system_size_kw * 1000
    return CostRange(
        low=round(watts * PEI_INSTALLATION_COSTS["cost_per_watt_low"]),
        mid=round(watts * PEI_INSTALLATION_COSTS["cost_per_watt_mid"]),
        high=round(watts * PEI_INSTALLATION_COSTS["cost_per_watt_high"]),
    )


def estimate_annual_consumption_from_bill(
    monthly_bill: float,
    rate: float = PEI_ELECTRICITY_RATES["residential_rate"],
    basic_charge: float = PEI_ELECTRICITY_RATES["monthly_basic_charge"],
) -> float:
    """Back out yearly kWh from a monthly bill, ignoring the fixed basic charge."""
    energy_cost = max(0.0, monthly_bill - basic_charge)
    return round(energy_cost / rate * 12)


def calculate_coverage_percentage(annual_production_kwh: float, annual_consumption_kwh: float) -> float:
    if annual_consumption_kwh <= 0:
        return 0.0
    return round(min(100.0, annual_production_kwh / annual_consumption_kwh * 100), 1)


def calculate_monthly_production(annual_production_kwh: float, monthly_ghi: Optional[List[float]] = None) -> List[float]:
    """Split annual production across months in proportion to each month's irradiance."""
    monthly_ghi = monthly_ghi or PEI_MONTHLY_IRRADIANCE
    monthly_energy = [ghi * days for ghi, days in zip(monthly_ghi, DAYS_IN_MONTH)]
    total = sum(monthly_energy)
    if total <= 0:
        return [round(annual_production_kwh / 12) for _ in DAYS_IN_MONTH]
    return [round(annual_production_kwh * energy / total) for energy in monthly_energy]


def format_currency(amount: float) -> str:
    return f"${amount:,.0f}"
