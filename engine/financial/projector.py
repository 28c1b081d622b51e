"""
Financial projection for a PEI rooftop system.

Savings are valued at the retail rate because Maritime Electric credits net
metered production 1:1. The 25-year projection is a fold over the years, so the
yearly figures are the single source for every lifetime total.
"""

import logging
from functools import reduce
from typing import List, NamedTuple, Optional

from engine.financial.helper import get_system_cost_range
from engine.region import (
    PEI_CLIMATE_FACTORS,
    PEI_ELECTRICITY_RATES,
    PEI_ENVIRONMENTAL_DATA,
    PEI_INSTALLATION_COSTS,
)
from models.schemas import FinancialAnalysis, YearProjection

logger = logging.getLogger(__name__)

PROJECTION_YEARS = 25


class _ProjectionState(NamedTuple):
    years: tuple
    production: float
    rate: float
    cumulative: float


def calculate_payback(installation_cost: float, annual_savings: float) -> float:
    """Simple payback in years; ``inf`` when the system never pays for itself."""
    if annual_savings <= 0:
        return float("inf")
    return round(installation_cost / annual_savings, 2)


class FinancialProjector:
    def __init__(
        self,
        electricity_rate: float = PEI_ELECTRICITY_RATES["residential_rate"],
        monthly_basic_charge: float = PEI_ELECTRICITY_RATES["monthly_basic_charge"],
        cost_per_watt: float = PEI_INSTALLATION_COSTS["cost_per_watt_mid"],
        degradation: float = PEI_CLIMATE_FACTORS["system_degradation"],
        rate_escalation: float = PEI_ELECTRICITY_RATES["annual_rate_increase"],
        utility_name: str = PEI_ELECTRICITY_RATES["utility_name"],
    ):
        self.electricity_rate = electricity_rate
        self.monthly_basic_charge = monthly_basic_charge
        self.cost_per_watt = cost_per_watt
        self.degradation = degradation
        self.rate_escalation = rate_escalation
        self.utility_name = utility_name

    def installation_cost(self, system_size_kw: float) -> float:
        return round(system_size_kw * 1000 * self.cost_per_watt, 2)

    def _advance(self, state: _ProjectionState, year: int) -> _ProjectionState:
        # Degradation and escalation apply after the year is counted
        savings = state.production * state.rate
        cumulative = state.cumulative + savings
        projection = YearProjection(
            year=year,
            production_kwh=round(state.production, 2),
            rate=round(state.rate, 4),
            savings=round(savings, 2),
            cumulative_savings=round(cumulative, 2),
        )
        return _ProjectionState(
            years=state.years + (projection,),
            production=state.production * (1 - self.degradation),
            rate=state.rate * (1 + self.rate_escalation),
            cumulative=cumulative,
        )

    def project_years(self, annual_production_kwh: float, years: int = PROJECTION_YEARS) -> List[YearProjection]:
        initial = _ProjectionState(years=(), production=annual_production_kwh, rate=self.electricity_rate, cumulative=0.0)
        final = reduce(self._advance, range(1, years + 1), initial)
        return list(final.years)

    def project(
        self,
        system_size_kw: float,
        annual_production_kwh: float,
        installation_cost: Optional[float] = None,
    ) -> FinancialAnalysis:
        if installation_cost is None:
            installation_cost = self.installation_cost(system_size_kw)

        annual_savings = annual_production_kwh * self.electricity_rate
        yearly = self.project_years(annual_production_kwh)

        twenty_five_year_savings = yearly[-1].cumulative_savings if yearly else 0.0
        net_profit = twenty_five_year_savings - installation_cost
        roi = net_profit / installation_cost * 100 if installation_cost else 0.0
        lifetime_production = sum(y.production_kwh for y in yearly)

        emission_factor = PEI_ENVIRONMENTAL_DATA["grid_emission_factor"]
        annual_co2 = annual_production_kwh * emission_factor

        analysis = FinancialAnalysis(
            installation_cost=round(installation_cost, 2),
            cost_per_watt=self.cost_per_watt,
            cost_range=get_system_cost_range(system_size_kw),
            annual_savings=round(annual_savings, 2),
            monthly_savings=round(annual_savings / 12, 2),
            simple_payback_years=calculate_payback(installation_cost, annual_savings),
            twenty_five_year_savings=round(twenty_five_year_savings, 2),
            net_profit=round(net_profit, 2),
            return_on_investment=round(roi, 1),
            first_year_production_kwh=round(annual_production_kwh, 2),
            lifetime_production_kwh=round(lifetime_production),
            yearly_projection=yearly,
            annual_co2_offset_kg=round(annual_co2),
            lifetime_co2_offset_kg=round(lifetime_production * emission_factor),
            equivalent_trees_planted=round(annual_co2 / PEI_ENVIRONMENTAL_DATA["tree_co2_absorption_per_year"]),
            electricity_rate=self.electricity_rate,
            monthly_basic_charge=self.monthly_basic_charge,
            utility_name=self.utility_name,
        )
        logger.info(
            f"[financial] {system_size_kw} kW: cost=${analysis.installation_cost:,.0f} "
            f"savings=${analysis.annual_savings:,.0f}/yr payback={analysis.simple_payback_years} yrs"
        )
        return analysis
