import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from engine.incentives.catalog import INCENTIVE_CATALOG, STACKING_CAPS
from models.schemas import (
    IncentiveEligibility,
    IncentiveProgram,
    IncentiveRequest,
    IncentiveSummary,
)

logger = logging.getLogger(__name__)

ELIGIBLE_REASON = "Meets basic eligibility requirements"
LOAN_CATEGORIES = ("loan", "interest-free-loan")


def deadline_passed(deadline: str, as_of: date) -> bool:
    """Free-text deadlines such as "Ongoing" never expire."""
    try:
        return date.fromisoformat(deadline) < as_of
    except (TypeError, ValueError):
        return False


def estimate_value(program: IncentiveProgram, request: IncentiveRequest) -> float:
    if program.valuation == "per_watt":
        value = program.valuation_rate * request.system_size_kw * 1000
    elif program.valuation == "cost_share":
        value = program.valuation_rate * request.estimated_cost
    else:
        value = program.max_amount or 0

    if program.max_amount is not None:
        value = min(value, program.max_amount)
    if program.max_cost_share is not None:
        value = min(value, program.max_cost_share * request.estimated_cost)
    return round(max(0.0, value), 2)


def check_eligibility(
    program: IncentiveProgram,
    request: IncentiveRequest,
    as_of: Optional[date] = None,
) -> IncentiveEligibility:
    as_of = as_of or date.today()
    rules = program.rules
    reasons: List[str] = []

    if not program.available:
        reasons.append("Program currently not accepting applications")
    else:
        if request.property_type not in rules.property_types:
            reasons.append(f"Not available for {request.property_type} properties")
        if rules.min_system_kw is not None and request.system_size_kw < rules.min_system_kw:
            reasons.append(f"System must be minimum {rules.min_system_kw:g}kW")
        if rules.max_system_kw is not None and request.system_size_kw > rules.max_system_kw:
            reasons.append(f"System must be at most {rules.max_system_kw:g}kW")
        if rules.min_cost is not None and request.estimated_cost < rules.min_cost:
            reasons.append(f"Project cost must be at least ${rules.min_cost:,.0f}")
        if rules.max_cost is not None and request.estimated_cost > rules.max_cost:
            reasons.append(f"Project cost must not exceed ${rules.max_cost:,.0f}")
        if deadline_passed(program.deadline, as_of):
            reasons.append(f"Application deadline passed ({program.deadline})")

    eligible = not reasons
    if eligible:
        reasons.append(ELIGIBLE_REASON)

    return IncentiveEligibility(
        program_id=program.id,
        name=program.name,
        category=program.category,
        eligible=eligible,
        reasons=reasons,
        estimated_value=estimate_value(program, request) if eligible else 0.0,
        requires_pre_approval=program.requires_pre_approval,
    )


class IncentiveEligibilityEngine:
    def __init__(
        self,
        catalog: Optional[Dict[str, List[IncentiveProgram]]] = None,
        stacking_caps: Optional[Dict[str, float]] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.catalog = catalog if catalog is not None else INCENTIVE_CATALOG
        self.stacking_caps = stacking_caps if stacking_caps is not None else STACKING_CAPS
        self._today = today or date.today

    def programs_for(self, property_type: str) -> List[IncentiveProgram]:
        return self.catalog.get(property_type, [])

    def evaluate(self, request: IncentiveRequest) -> IncentiveSummary:
        as_of = self._today()
        results = [check_eligibility(p, request, as_of) for p in self.programs_for(request.property_type)]
        eligible = [r for r in results if r.eligible]

        total_grants = sum(r.estimated_value for r in eligible if r.category == "grant")
        total_loans = sum(r.estimated_value for r in eligible if r.category in LOAN_CATEGORIES)
        uncapped_total = total_grants + total_loans

        stacking_cap = self.stacking_caps.get(request.property_type, float("inf"))
        total_funding = min(uncapped_total, stacking_cap)
        cap_applied = uncapped_total > stacking_cap
        if cap_applied:
            logger.info(
                f"[incentives] {request.property_type} total ${uncapped_total:,.0f} clamped to stacking cap ${stacking_cap:,.0f}"
            )

        # Not clamped to 100: loans and grants together can exceed the cost
        coverage = total_funding / request.estimated_cost * 100 if request.estimated_cost > 0 else 0.0

        return IncentiveSummary(
            property_type=request.property_type,
            results=results,
            eligible_programs=eligible,
            total_grants=round(total_grants, 2),
            total_loans=round(total_loans, 2),
            uncapped_total=round(uncapped_total, 2),
            stacking_cap=stacking_cap,
            total_funding=round(total_funding, 2),
            cap_applied=cap_applied,
            coverage_percentage=round(coverage, 1),
        )
