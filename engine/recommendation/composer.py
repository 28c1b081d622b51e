import logging
import math
from typing import List

from engine.financial.helper import (
    calculate_coverage_percentage,
    calculate_monthly_production,
    format_currency,
)
from engine.region import PEI_ELECTRICITY_RATES, PEI_SOLAR_DATA
from engine.roof_vision.heuristic import sort_by_priority
from models.schemas import (
    FinancialAnalysis,
    IncentiveSummary,
    IrradianceProfile,
    RoofAnalysis,
    SolarRecommendation,
    Suggestion,
    SystemSpecs,
)

logger = logging.getLogger(__name__)

AREA_WEIGHT = 35
SHADING_WEIGHT = 30
PRODUCTION_WEIGHT = 35
# Usable m² at which the area term saturates (about 25 panels with spacing)
FULL_SCORE_AREA_SQ_M = 60

SHADING_FACTORS = {"low": 1.0, "medium": 0.6, "high": 0.2}
COMPLEXITY_PENALTIES = {"simple": 0, "moderate": 5, "complex": 10}
PITCH_PENALTY_PER_DEGREE = 0.25
MAX_PITCH_PENALTY = 10
TILT_BRACKET_THRESHOLD = 15
LONG_PAYBACK_YEARS = 15

IMPROVEMENT_CATEGORIES = {
    "cleaning": "maintenance",
    "maintenance": "maintenance",
    "tree_trimming": "shading",
    "angle_adjustment": "orientation",
    "additional_panels": "equipment",
}


def calculate_suitability_score(
    usable_area_sq_m: float,
    shading_level: str,
    annual_production_kwh: float,
    annual_consumption_kwh: float,
    complexity: str = "simple",
    roof_pitch_degrees: float = PEI_SOLAR_DATA["optimal_tilt_angle"],
) -> int:
    """Weighted 0-100 score.

    Increases with usable area and production, decreases with shading. Complexity
    and distance from the optimal tilt are subtracted as fixed penalties.
    """
    area_term = min(max(usable_area_sq_m, 0) / FULL_SCORE_AREA_SQ_M, 1.0)
    shading_term = SHADING_FACTORS.get(shading_level, SHADING_FACTORS["medium"])
    if annual_consumption_kwh > 0:
        production_term = min(max(annual_production_kwh, 0) / annual_consumption_kwh, 1.0)
    else:
        production_term = 1.0

    pitch_gap = abs(roof_pitch_degrees - PEI_SOLAR_DATA["optimal_tilt_angle"])
    penalty = COMPLEXITY_PENALTIES.get(complexity, 0) + min(pitch_gap * PITCH_PENALTY_PER_DEGREE, MAX_PITCH_PENALTY)

    score = (
        AREA_WEIGHT * area_term
        + SHADING_WEIGHT * shading_term
        + PRODUCTION_WEIGHT * production_term
        - penalty
    )
    return round(max(0, min(score, 100)))


def quality_label(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "moderate"
    return "challenging"


def generate_layout_suggestion(roof: RoofAnalysis, panel_count: int) -> str:
    rows = math.ceil(panel_count / 4)
    if roof.complexity == "simple":
        return (
            f"A single array of {panel_count} panels arranged in {rows} row{'s' if rows > 1 else ''} "
            "would maximize efficiency. For PEI's latitude (46°N), prioritize south-facing sections "
            "with a tilt angle close to 44° for optimal year-round production."
        )
    if roof.complexity == "moderate":
        half = math.ceil(panel_count / 2)
        return (
            f"Split installation recommended: two arrays of approximately {half} panels each to work "
            "around roof features. Consider microinverters for independent panel optimization, which "
            "helps with PEI's variable weather."
        )
    return (
        "Complex roof structure requires a custom layout. A professional site assessment by a "
        "PEI-certified installer is recommended for panel placement across multiple roof planes."
    )


def generate_explanation(
    score: int,
    roof: RoofAnalysis,
    irradiance: IrradianceProfile,
    specs: SystemSpecs,
    financials: FinancialAnalysis,
) -> str:
    return (
        f"Your PEI property has {quality_label(score)} potential for solar installation. "
        f"With approximately {roof.roof_area_sq_m:g} m² of roof area and {roof.shading_level} shading, "
        f"a {specs.system_size_kw:.1f} kW system could save you approximately "
        f"{format_currency(financials.annual_savings)} annually at current {financials.utility_name} rates. "
        f"PEI receives an average of {irradiance.average_peak_sun_hours:.1f} peak sun hours daily. "
        "While winters are shorter on sunlight, cold temperatures can boost panel efficiency by 2-3%."
    )


def roof_suggestions(roof: RoofAnalysis) -> List[Suggestion]:
    suggestions = []

    if roof.shading_level != "low":
        suggestions.append(Suggestion(
            category="shading",
            title="Consider tree trimming",
            description="Reducing nearby tree coverage could increase your solar production by 15-25%. Focus on trees blocking the south-facing roof sections.",
            priority="high" if roof.shading_level == "high" else "medium",
        ))

    if roof.complexity == "complex":
        suggestions.append(Suggestion(
            category="equipment",
            title="Use microinverters",
            description="Microinverters optimize each panel individually, which suits complex roofs with several orientations or partial shading.",
            priority="high",
        ))
    else:
        suggestions.append(Suggestion(
            category="equipment",
            title="String inverter recommended",
            description="A string inverter offers cost-effective performance for a straightforward roof layout. Consider power optimizers for any partially shaded panels.",
            priority="low",
        ))

    if abs(roof.roof_pitch_degrees - PEI_SOLAR_DATA["optimal_tilt_angle"]) > TILT_BRACKET_THRESHOLD:
        suggestions.append(Suggestion(
            category="orientation",
            title="Consider tilt brackets",
            description=f"Your roof pitch of {roof.roof_pitch_degrees:g}° differs from PEI's optimal 44°. Adjustable tilt brackets could improve energy capture by 5-10%, especially in winter.",
            priority="medium",
        ))

    suggestions.append(Suggestion(
        category="orientation",
        title="Maximize south-facing exposure",
        description="Prioritize panel placement on south-facing roof sections. East or west-facing panels produce about 15-20% less energy.",
        priority="medium",
    ))
    suggestions.append(Suggestion(
        category="equipment",
        title="Set up net metering with Maritime Electric",
        description=f"Maritime Electric offers net metering at the retail rate (${PEI_ELECTRICITY_RATES['residential_rate']}/kWh). Make sure your installer configures a bi-directional meter to earn credits for excess energy.",
        priority="high",
    ))
    suggestions.append(Suggestion(
        category="maintenance",
        title="Winter snow management",
        description="PEI winters may require occasional snow clearing. A steeper angle (40-45°) helps snow slide off naturally; otherwise plan for 2-3 manual clearings per winter.",
        priority="medium",
    ))
    suggestions.append(Suggestion(
        category="maintenance",
        title="Annual cleaning recommended",
        description="Cleaning panels every 6-12 months maintains efficiency. A monitoring system helps detect issues early.",
        priority="low",
    ))
    return suggestions


def improvement_suggestions(roof: RoofAnalysis) -> List[Suggestion]:
    return [
        Suggestion(
            category=IMPROVEMENT_CATEGORIES.get(s.type, "equipment"),
            title=s.title,
            description=s.description,
            priority=s.priority,
        )
        for s in roof.suggestions
    ]


def financial_suggestions(financials: FinancialAnalysis) -> List[Suggestion]:
    suggestions = []
    if not financials.pays_back:
        suggestions.append(Suggestion(
            category="financial",
            title="Savings do not cover the system cost",
            description="Estimated production is too low to pay back the installation. Review shading and system size with an installer before committing.",
            priority="high",
        ))
    elif financials.simple_payback_years > LONG_PAYBACK_YEARS:
        suggestions.append(Suggestion(
            category="financial",
            title="Long payback period",
            description=f"The simple payback of {financials.simple_payback_years:g} years is above typical. Incentives or a smaller system can shorten it.",
            priority="medium",
        ))
    if financials.return_on_investment > 100:
        suggestions.append(Suggestion(
            category="financial",
            title="Strong long-term return",
            description=f"Over 25 years the system returns about {financials.return_on_investment:g}% of its cost, for a net profit of {format_currency(financials.net_profit)}.",
            priority="low",
        ))
    return suggestions


def incentive_suggestions(incentives: IncentiveSummary) -> List[Suggestion]:
    suggestions = []
    eligible = incentives.eligible_programs
    if eligible:
        suggestions.append(Suggestion(
            category="incentive",
            title=f"Apply for {len(eligible)} eligible incentive program{'s' if len(eligible) > 1 else ''}",
            description=f"You may qualify for up to {format_currency(incentives.total_funding)} in grants and loans: {', '.join(p.name for p in eligible)}.",
            priority="high",
        ))
        if any(p.requires_pre_approval for p in eligible):
            suggestions.append(Suggestion(
                category="incentive",
                title="Get pre-approval before installing",
                description="Some programs only fund work approved before installation starts. Apply before signing an installation contract.",
                priority="high",
            ))
    if incentives.cap_applied:
        suggestions.append(Suggestion(
            category="incentive",
            title="Incentive stacking cap reached",
            description=f"Combined incentives are limited to {format_currency(incentives.stacking_cap)} for {incentives.property_type} properties.",
            priority="medium",
        ))
    return suggestions


class RecommendationComposer:
    def compose(
        self,
        roof: RoofAnalysis,
        irradiance: IrradianceProfile,
        specs: SystemSpecs,
        financials: FinancialAnalysis,
        incentives: IncentiveSummary,
        annual_consumption_kwh: float,
    ) -> SolarRecommendation:
        score = calculate_suitability_score(
            roof.usable_area_sq_m,
            roof.shading_level,
            specs.annual_production_kwh,
            annual_consumption_kwh,
            roof.complexity,
            roof.roof_pitch_degrees,
        )
        suggestions = sort_by_priority(
            roof_suggestions(roof)
            + improvement_suggestions(roof)
            + financial_suggestions(financials)
            + incentive_suggestions(incentives)
        )
        logger.info(f"[recommendation] Score {score} with {len(suggestions)} suggestions")
        return SolarRecommendation(
            suitability_score=score,
            system_size_kw=specs.system_size_kw,
            panel_count=specs.panel_count,
            estimated_annual_production_kwh=specs.annual_production_kwh,
            monthly_production_kwh=calculate_monthly_production(specs.annual_production_kwh, irradiance.monthly_ghi),
            consumption_coverage_percentage=calculate_coverage_percentage(specs.annual_production_kwh, annual_consumption_kwh),
            layout_suggestion=generate_layout_suggestion(roof, specs.panel_count),
            explanation=generate_explanation(score, roof, irradiance, specs, financials),
            suggestions=suggestions,
            financials=financials,
            incentives=incentives,
        )
