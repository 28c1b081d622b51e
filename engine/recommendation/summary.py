import logging
from typing import Optional

from engine.financial.helper import format_currency
from engine.recommendation.prompt import SUMMARY_PROMPT, SYSTEM_INSTRUCTIONS
from models.schemas import RoofAnalysis, SolarRecommendation
from tools.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

TEMPLATE_QUALITY = {"low": "excellent", "medium": "good", "high": "moderate"}


def format_payback(years: float, pays_back: bool) -> str:
    return f"about {years:g} years" if pays_back else "not reached within the system lifetime"


def template_summary(recommendation: SolarRecommendation, roof: RoofAnalysis) -> str:
    financials = recommendation.financials
    quality = TEMPLATE_QUALITY.get(roof.shading_level, "good")
    return (
        f"Your PEI property shows {quality} solar potential. A {recommendation.system_size_kw:g} kW system "
        f"could save you approximately {format_currency(financials.annual_savings)} annually at current "
        f"{financials.utility_name} rates, with a payback period of "
        f"{format_payback(financials.simple_payback_years, financials.pays_back)}. "
        f"Over 25 years, you could save up to {format_currency(financials.twenty_five_year_savings)}, "
        "and PEI's cold winters actually boost panel efficiency by 2-3%."
    )


class SummaryWriter:
    """Short owner-facing summary from a Gemini text model, or a template when unavailable."""

    def __init__(self, client: Optional[GeminiClient], model_name: str):
        self.client = client
        self.model_name = model_name

    async def write(self, recommendation: SolarRecommendation, roof: RoofAnalysis) -> str:
        if self.client is None or not self.client.configured:
            return template_summary(recommendation, roof)

        financials = recommendation.financials
        prompt = SUMMARY_PROMPT.format(
            roof_area=roof.roof_area_sq_m,
            usable_percentage=roof.usable_area_percentage,
            shading_level=roof.shading_level,
            roof_pitch=roof.roof_pitch_degrees,
            complexity=roof.complexity,
            system_size_kw=recommendation.system_size_kw,
            installation_cost=financials.installation_cost,
            annual_savings=financials.annual_savings,
            payback=format_payback(financials.simple_payback_years, financials.pays_back),
            twenty_five_year_savings=financials.twenty_five_year_savings,
            total_funding=recommendation.incentives.total_funding,
        )
        try:
            text = await self.client.generate_text(self.model_name, prompt, SYSTEM_INSTRUCTIONS)
        except Exception as e:
            logger.error(f"[{self.model_name}] Summary generation failed: {e}")
            return template_summary(recommendation, roof)

        if not text:
            logger.warning(f"[{self.model_name}] Empty summary, using template")
            return template_summary(recommendation, roof)
        return text
