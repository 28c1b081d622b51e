import logging
import statistics
from typing import Any, Dict, List, Optional

from engine.errors import InvalidImageError, VisionAnalysisError
from engine.roof_vision.heuristic import MAX_POTENTIAL_EFFICIENCY, PRODUCTION_PER_KW, sort_by_priority
from models.schemas import ImprovementSuggestion, RoofAnalysis

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 30
DEFAULT_CONFIDENCE = 50
# kW per detected panel for existing installations
DETECTED_PANEL_KW = 0.4
PANEL_COUNT_SPREAD = 7

SHADING_RANK = {"low": 0, "medium": 1, "high": 2}
COMPLEXITY_RANK = {"simple": 0, "moderate": 1, "complex": 2}
ORIENTATIONS = {"north", "south", "east", "west", "flat"}


def _number(value: Any, default: float) -> float:
    # Zero, missing and non-numeric replies all count as "no answer"
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number else default


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _choice(value: Any, allowed, default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def check_reply(parsed: Dict[str, Any]) -> None:
    if parsed.get("isHouse") is False:
        raise InvalidImageError(
            "The uploaded image does not appear to show a building. Please upload a clear photo of a roof.",
            service="vision",
        )
    confidence = parsed.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool) and confidence < MIN_CONFIDENCE:
        raise VisionAnalysisError(
            f"Visual clarity too low to analyse the roof (confidence {confidence})", service="vision"
        )


def sanitize_roof(parsed: Dict[str, Any], model_name: Optional[str] = None) -> RoofAnalysis:
    """Validate a roof reply and clamp every field into its physical range."""
    check_reply(parsed)
    obstacles = parsed.get("obstacles")
    orientation = parsed.get("orientation")
    return RoofAnalysis(
        roof_area_sq_m=round(_clamp(_number(parsed.get("roofAreaSqMeters"), 100), 50, 300)),
        usable_area_percentage=round(_clamp(_number(parsed.get("usableAreaPercentage"), 70), 30, 95)),
        shading_level=_choice(parsed.get("shadingLevel"), SHADING_RANK, "medium"),
        roof_pitch_degrees=round(_clamp(_number(parsed.get("roofPitchDegrees"), 30), 5, 60)),
        complexity=_choice(parsed.get("complexity"), COMPLEXITY_RANK, "moderate"),
        orientation=_choice(orientation, ORIENTATIONS, "south"),
        obstacles=[str(o) for o in obstacles] if isinstance(obstacles, list) else [],
        ai_confidence=_clamp(_number(parsed.get("confidence"), DEFAULT_CONFIDENCE), 0, 100),
        used_ai=True,
        model_name=model_name,
    )


def _suggestions(raw: Any) -> List[ImprovementSuggestion]:
    if not isinstance(raw, list):
        return []
    suggestions = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        cost = item.get("estimatedCost")
        suggestions.append(ImprovementSuggestion(
            type=str(item.get("type") or "general"),
            title=str(item["title"]),
            description=str(item.get("description") or ""),
            priority=_choice(item.get("priority"), {"high", "medium", "low"}, "medium"),
            estimated_efficiency_gain=max(0.0, _number(item.get("estimatedEfficiencyGain"), 0.0)),
            estimated_cost=_number(cost, 0.0) if cost is not None else None,
        ))
    return sort_by_priority(suggestions)


def sanitize_existing_installation(parsed: Dict[str, Any], model_name: Optional[str] = None) -> RoofAnalysis:
    """Roof fields plus the detected installation, with a panel-count range of count..count+7."""
    roof = sanitize_roof(parsed, model_name)

    panel_count = max(0, int(_number(parsed.get("currentPanelCount"), 0)))
    panel_count_max = panel_count + PANEL_COUNT_SPREAD
    system_size_kw = round(_number(parsed.get("estimatedSystemSizeKW"), panel_count * DETECTED_PANEL_KW), 2)
    current_efficiency = round(_clamp(_number(parsed.get("currentEfficiency"), 75), 0, 100))
    suggestions = _suggestions(parsed.get("suggestions"))

    gains = sum(s.estimated_efficiency_gain for s in suggestions)
    potential = _number(parsed.get("potentialEfficiency"), current_efficiency + gains)
    potential_efficiency = round(_clamp(potential, current_efficiency, MAX_POTENTIAL_EFFICIENCY))

    additional = _number(
        parsed.get("estimatedAdditionalProduction"),
        (potential_efficiency - current_efficiency) / 100 * system_size_kw * PRODUCTION_PER_KW,
    )

    condition = parsed.get("panelCondition")
    orientation = parsed.get("orientation")
    return roof.model_copy(update={
        # Existing arrays may face e.g. "South-West"; keep the model's wording
        "orientation": str(orientation) if isinstance(orientation, str) and orientation.strip() else roof.orientation,
        "condition": str(condition) if condition else None,
        "current_panel_count": panel_count,
        "current_panel_count_max": panel_count_max,
        "estimated_system_size_kw": system_size_kw,
        "estimated_system_size_kw_max": round(panel_count_max * DETECTED_PANEL_KW, 2),
        "current_efficiency": current_efficiency,
        "potential_efficiency": potential_efficiency,
        "estimated_additional_production_kwh": round(max(0.0, additional)),
        "suggestions": suggestions,
    })


def combine_analyses(analyses: List[RoofAnalysis]) -> RoofAnalysis:
    """Merge per-image results into one.

    Numeric fields use a confidence-weighted mean (unknown confidence weighs 50),
    shading takes the worst case and complexity the rounded mean rank. The most
    confident image supplies orientation, obstacles and installation details.
    """
    if not analyses:
        raise VisionAnalysisError("No analyses to combine", service="vision")
    if len(analyses) == 1:
        return analyses[0]

    weights = [a.ai_confidence if a.ai_confidence is not None else DEFAULT_CONFIDENCE for a in analyses]
    total_weight = sum(weights) or len(analyses)

    def weighted(field: str) -> float:
        return round(sum(getattr(a, field) * w for a, w in zip(analyses, weights)) / total_weight)

    shading = max((a.shading_level for a in analyses), key=SHADING_RANK.get)
    complexity_rank = round(statistics.mean(COMPLEXITY_RANK[a.complexity] for a in analyses))
    complexity = next(name for name, rank in COMPLEXITY_RANK.items() if rank == complexity_rank)

    primary = max(analyses, key=lambda a: a.ai_confidence if a.ai_confidence is not None else DEFAULT_CONFIDENCE)
    confidences = [a.ai_confidence for a in analyses if a.ai_confidence is not None]

    combined = primary.model_copy(update={
        "roof_area_sq_m": weighted("roof_area_sq_m"),
        "roof_pitch_degrees": weighted("roof_pitch_degrees"),
        "usable_area_percentage": weighted("usable_area_percentage"),
        "shading_level": shading,
        "complexity": complexity,
        "ai_confidence": round(statistics.mean(confidences)) if confidences else None,
        "used_ai": any(a.used_ai for a in analyses),
        "image_count": len(analyses),
    })
    logger.info(
        f"[roof_vision] Combined {len(analyses)} analyses: area={combined.roof_area_sq_m} "
        f"shading={shading} complexity={complexity}"
    )
    return combined
