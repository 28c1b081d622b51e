from engine.financial.helper import (
    calculate_coverage_percentage,
    calculate_monthly_production,
    estimate_annual_consumption_from_bill,
    format_currency,
    get_system_cost_range,
)
from engine.financial.projector import FinancialProjector, calculate_payback
from engine.financial.sizing import size_system
