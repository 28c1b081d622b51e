import asyncio
import logging
from typing import List, Optional

from config import Settings
from engine.financial import FinancialProjector, estimate_annual_consumption_from_bill, size_system
from engine.geocoding import GeocodingResolver
from engine.incentives import IncentiveEligibilityEngine
from engine.irradiance import IrradianceCache, IrradianceDataProvider
from engine.recommendation import RecommendationComposer, SummaryWriter
from engine.region import PEI_HOUSEHOLD_DATA
from engine.roof_vision import GeminiVisionProvider, HeuristicRoofEstimator, RoofVisionAnalyzer
from models.schemas import (
    Address,
    ImprovementAssessment,
    IncentiveRequest,
    RoofImage,
    SolarAssessment,
)
from tools import GeminiClient, GeocodingClient, NasaPowerClient

logger = logging.getLogger(__name__)


class SolarAssessmentEngine:
    """Per-request orchestration.

    Geocoding and roof vision share no inputs and run concurrently; irradiance
    waits for the resolved coordinate. Everything after that is local computation.
    """

    def __init__(
        self,
        geocoder: GeocodingResolver,
        irradiance: IrradianceDataProvider,
        vision: RoofVisionAnalyzer,
        projector: Optional[FinancialProjector] = None,
        incentives: Optional[IncentiveEligibilityEngine] = None,
        composer: Optional[RecommendationComposer] = None,
        summary_writer: Optional[SummaryWriter] = None,
    ):
        self.geocoder = geocoder
        self.irradiance = irradiance
        self.vision = vision
        self.projector = projector or FinancialProjector()
        self.incentives = incentives or IncentiveEligibilityEngine()
        self.composer = composer or RecommendationComposer()
        self.summary_writer = summary_writer

    def annual_consumption(self, monthly_bill: Optional[float]) -> float:
        if monthly_bill and monthly_bill > 0:
            return estimate_annual_consumption_from_bill(
                monthly_bill, self.projector.electricity_rate, self.projector.monthly_basic_charge
            )
        return PEI_HOUSEHOLD_DATA["average_annual_consumption_kwh"]

    async def assess(
        self,
        address: Address,
        images: List[RoofImage],
        property_type: str = "residential",
        monthly_bill: Optional[float] = None,
    ) -> SolarAssessment:
        location, roof = await asyncio.gather(
            self.geocoder.resolve(address),
            self.vision.analyze_roof(images),
        )
        irradiance = await self.irradiance.get_profile(location.latitude, location.longitude)

        specs = size_system(roof, irradiance)
        financials = self.projector.project(specs.system_size_kw, specs.annual_production_kwh)
        incentives = self.incentives.evaluate(IncentiveRequest(
            system_size_kw=specs.system_size_kw,
            estimated_cost=financials.installation_cost,
            property_type=property_type,
        ))
        recommendation = self.composer.compose(
            roof, irradiance, specs, financials, incentives, self.annual_consumption(monthly_bill)
        )

        ai_summary = None
        if self.summary_writer is not None:
            ai_summary = await self.summary_writer.write(recommendation, roof)

        logger.info(
            f"[pipeline] Assessed {location.formatted_address}: score={recommendation.suitability_score} "
            f"used_ai={roof.used_ai} irradiance={irradiance.data_source}"
        )
        return SolarAssessment(
            recommendation=recommendation,
            roof_analysis=roof,
            irradiance=irradiance,
            geocoded_location=location,
            used_ai=roof.used_ai,
            ai_confidence=roof.ai_confidence,
            used_real_geocoding=not location.is_default,
            ai_summary=ai_summary,
        )

    async def assess_existing_installation(self, address: Address, images: List[RoofImage]) -> ImprovementAssessment:
        location, installation = await asyncio.gather(
            self.geocoder.resolve(address),
            self.vision.analyze_existing_installation(images),
        )
        irradiance = await self.irradiance.get_profile(location.latitude, location.longitude)

        efficiency_gain = 0.0
        if installation.current_efficiency is not None and installation.potential_efficiency is not None:
            efficiency_gain = installation.potential_efficiency - installation.current_efficiency

        logger.info(
            f"[pipeline] Existing installation at {location.formatted_address}: "
            f"{installation.current_panel_count} panels, +{efficiency_gain:g}% potential"
        )
        return ImprovementAssessment(
            installation=installation,
            irradiance=irradiance,
            geocoded_location=location,
            efficiency_gain=efficiency_gain,
            used_ai=installation.used_ai,
            ai_confidence=installation.ai_confidence,
            used_real_geocoding=not location.is_default,
        )


def build_assessment_engine(settings: Settings, cache: IrradianceCache) -> SolarAssessmentEngine:
    """Wire clients from settings. The cache is created once per process and shared."""
    vision_client = GeminiClient(api_key=settings.vision_api_key)
    providers = []
    if vision_client.configured:
        providers = [GeminiVisionProvider(vision_client, model) for model in settings.vision_models]
    else:
        logger.warning("[pipeline] GOOGLE_AI_API_KEY not set, vision analysis is unavailable")

    summary_client = GeminiClient(api_key=settings.summary_api_key)

    return SolarAssessmentEngine(
        geocoder=GeocodingResolver(GeocodingClient(settings.geocode_api_key, timeout=settings.http_timeout_seconds)),
        irradiance=IrradianceDataProvider(NasaPowerClient(timeout=settings.http_timeout_seconds), cache),
        vision=RoofVisionAnalyzer(
            providers,
            roof_mode=settings.roof_analysis_mode,
            improvement_mode=settings.improvement_analysis_mode,
            estimator=HeuristicRoofEstimator(settings.heuristic_seed),
            max_retries=settings.vision_max_retries,
            retry_delay=settings.vision_retry_delay,
        ),
        summary_writer=SummaryWriter(summary_client, settings.summary_model),
    )
