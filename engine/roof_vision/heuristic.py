import logging
import random
from typing import Iterable, List, Optional

from models.schemas import ImprovementSuggestion, RoofAnalysis

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

SHADING_LEVELS = ["low", "medium", "high"]
COMPLEXITIES = ["simple", "moderate", "complex"]
ORIENTATIONS = ["South", "South-West", "South-East", "West", "East"]
CONDITIONS = ["Good", "Fair", "Needs Cleaning", "Minor Damage"]

ROOF_FIELDS = {
    "roof_area_sq_m",
    "shading_level",
    "roof_pitch_degrees",
    "complexity",
    "usable_area_percentage",
    "orientation",
    "condition",
}

HEURISTIC_PANEL_KW = 0.35
MAX_POTENTIAL_EFFICIENCY = 98
# kWh per kW per year used to translate efficiency points into production
PRODUCTION_PER_KW = 1200


def sort_by_priority(suggestions: Iterable) -> List:
    """High, then medium, then low; ties keep their original order."""
    return sorted(suggestions, key=lambda s: PRIORITY_ORDER.get(s.priority, len(PRIORITY_ORDER)))


class HeuristicRoofEstimator:
    """Synthetic estimator used when no vision model produced an answer.

    The output is plausible, not measured; it is always tagged ``used_ai=False``.
    Pass a seed for reproducible output.
    """

    def __init__(self, seed: Optional[int] = None):
        self.random = random.Random(seed)

    def _suggestions(self, current_efficiency: int, shading_level: str) -> List[ImprovementSuggestion]:
        rng = self.random
        suggestions = []

        if current_efficiency < 75:
            suggestions.append(ImprovementSuggestion(
                type="cleaning",
                title="Panel Cleaning",
                description="Regular cleaning of solar panels can restore 5-15% efficiency. Dust, bird droppings, and debris reduce light absorption.",
                priority="high",
                estimated_efficiency_gain=rng.randint(5, 14),
                estimated_cost=200,
            ))

        if shading_level in ("medium", "high"):
            suggestions.append(ImprovementSuggestion(
                type="tree_trimming",
                title="Reduce Shading",
                description="Trees or structures are shading the array. Trimming nearby vegetation could increase energy production by 10-20%.",
                priority="high" if shading_level == "high" else "medium",
                estimated_efficiency_gain=18 if shading_level == "high" else 12,
                estimated_cost=500,
            ))

        if rng.random() > 0.5:
            suggestions.append(ImprovementSuggestion(
                type="angle_adjustment",
                title="Optimize Panel Angle",
                description="Adjusting the tilt towards PEI's optimal 44° could improve year-round production by 8-12%.",
                priority="medium",
                estimated_efficiency_gain=rng.randint(8, 12),
                estimated_cost=800,
            ))

        if rng.random() > 0.6:
            suggestions.append(ImprovementSuggestion(
                type="additional_panels",
                title="Add More Panels",
                description="The roof has space for 4-6 additional panels, which could increase total energy production by 20-30%.",
                priority="low",
                estimated_efficiency_gain=25,
                estimated_cost=3500,
            ))

        if rng.random() > 0.7:
            suggestions.append(ImprovementSuggestion(
                type="maintenance",
                title="System Maintenance",
                description="A professional inspection can find inverter and wiring issues and keep the system performing.",
                priority="medium",
                estimated_efficiency_gain=5,
                estimated_cost=400,
            ))

        return sort_by_priority(suggestions)

    def estimate(self) -> RoofAnalysis:
        rng = self.random
        panel_count = rng.randint(12, 24)
        panel_count_max = panel_count + 7
        current_efficiency = rng.randint(65, 85)
        shading_level = rng.choice(SHADING_LEVELS)
        complexity = rng.choice(COMPLEXITIES)

        suggestions = self._suggestions(current_efficiency, shading_level)
        total_gain = sum(s.estimated_efficiency_gain for s in suggestions)
        potential_efficiency = min(MAX_POTENTIAL_EFFICIENCY, current_efficiency + total_gain)

        system_size_kw = round(panel_count * HEURISTIC_PANEL_KW, 2)
        additional_kwh = (potential_efficiency - current_efficiency) / 100 * system_size_kw * PRODUCTION_PER_KW

        analysis = RoofAnalysis(
            roof_area_sq_m=rng.randint(70, 149),
            shading_level=shading_level,
            roof_pitch_degrees=rng.randint(25, 44),
            complexity=complexity,
            usable_area_percentage=rng.randint(65, 89),
            orientation=rng.choice(ORIENTATIONS),
            condition=rng.choice(CONDITIONS),
            current_panel_count=panel_count,
            current_panel_count_max=panel_count_max,
            estimated_system_size_kw=system_size_kw,
            estimated_system_size_kw_max=round(panel_count_max * HEURISTIC_PANEL_KW, 2),
            current_efficiency=current_efficiency,
            potential_efficiency=potential_efficiency,
            estimated_additional_production_kwh=round(additional_kwh),
            suggestions=suggestions,
            used_ai=False,
        )
        logger.info(f"[heuristic] Synthesised roof analysis with {panel_count} panels, {len(suggestions)} suggestions")
        return analysis

    def estimate_roof(self) -> RoofAnalysis:
        """Roof attributes only, for planning a new installation."""
        return RoofAnalysis(**self.estimate().model_dump(include=ROOF_FIELDS))
