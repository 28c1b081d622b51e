import asyncio
import unittest

from config import Settings
from engine.errors import VisionAnalysisError
from engine.irradiance import IrradianceCache
from engine.pipeline import SolarAssessmentEngine, build_assessment_engine
from engine.roof_vision.heuristic import HeuristicRoofEstimator
from models.schemas import Address, RoofImage
from tests.fakes import FakeGeocoder, FakeIrradiance, FakeVision, make_location, make_roof

ADDRESS = Address(street="550 University Ave", city="Charlottetown", postal_code="C1A 4P3", country="Canada")
IMAGES = [RoofImage(data=b"\xff\xd8roof")]


class GatedGeocoder(FakeGeocoder):
    """Blocks until roof analysis has started, so a sequential pipeline would hang."""

    def __init__(self, gate):
        super().__init__()
        self.gate = gate

    async def resolve(self, address):
        await self.gate.wait()
        return await super().resolve(address)


class GateOpeningVision(FakeVision):
    def __init__(self, gate):
        super().__init__()
        self.gate = gate

    async def analyze_roof(self, images):
        self.gate.set()
        return await super().analyze_roof(images)


class TestSolarAssessmentEngine(unittest.IsolatedAsyncioTestCase):
    async def test_assess_composes_full_result(self):
        geocoder, irradiance, vision = FakeGeocoder(), FakeIrradiance(), FakeVision()
        engine = SolarAssessmentEngine(geocoder, irradiance, vision)

        assessment = await engine.assess(ADDRESS, IMAGES, "residential", monthly_bill=150)

        location = geocoder.location
        self.assertEqual(irradiance.calls, [(location.latitude, location.longitude)])
        self.assertTrue(assessment.used_ai)
        self.assertEqual(assessment.ai_confidence, 85)
        self.assertTrue(assessment.used_real_geocoding)
        self.assertIsNone(assessment.ai_summary)
        recommendation = assessment.recommendation
        self.assertAlmostEqual(recommendation.financials.installation_cost, recommendation.system_size_kw * 3000, places=2)
        self.assertEqual(recommendation.incentives.property_type, "residential")

    async def test_geocoding_and_vision_run_concurrently(self):
        gate = asyncio.Event()
        engine = SolarAssessmentEngine(GatedGeocoder(gate), FakeIrradiance(), GateOpeningVision(gate))

        assessment = await asyncio.wait_for(engine.assess(ADDRESS, IMAGES), timeout=2)

        self.assertIsNotNone(assessment.recommendation)

    async def test_default_location_is_reported(self):
        geocoder = FakeGeocoder(make_location(is_default=True, reason="Address is outside Prince Edward Island"))
        engine = SolarAssessmentEngine(geocoder, FakeIrradiance(), FakeVision())

        assessment = await engine.assess(ADDRESS, IMAGES)

        self.assertFalse(assessment.used_real_geocoding)
        self.assertTrue(assessment.geocoded_location.is_default)

    async def test_strict_vision_failure_propagates(self):
        engine = SolarAssessmentEngine(FakeGeocoder(), FakeIrradiance(), FakeVision(error=VisionAnalysisError("down")))

        with self.assertRaises(VisionAnalysisError):
            await engine.assess(ADDRESS, IMAGES)

    async def test_existing_installation(self):
        installation = HeuristicRoofEstimator(5).estimate()
        engine = SolarAssessmentEngine(FakeGeocoder(), FakeIrradiance(), FakeVision(installation))

        assessment = await engine.assess_existing_installation(ADDRESS, IMAGES)

        self.assertFalse(assessment.used_ai)
        self.assertEqual(
            assessment.efficiency_gain,
            installation.potential_efficiency - installation.current_efficiency,
        )
        self.assertEqual(assessment.irradiance.data_source, "default")

    def test_consumption_from_bill_or_average(self):
        engine = SolarAssessmentEngine(FakeGeocoder(), FakeIrradiance(), FakeVision())
        self.assertEqual(engine.annual_consumption(None), 10200)
        self.assertEqual(engine.annual_consumption(150), 8542)


class TestBuildAssessmentEngine(unittest.TestCase):
    def test_without_vision_key_has_no_providers(self):
        engine = build_assessment_engine(Settings(), IrradianceCache())
        self.assertEqual(engine.vision.providers, [])
        self.assertEqual(engine.vision.modes, {"roof": "strict", "existing_installation": "heuristic"})

    def test_one_provider_per_model(self):
        cache = IrradianceCache()
        settings = Settings(vision_api_key="key", vision_models=["m1", "m2"], roof_analysis_mode="heuristic")

        engine = build_assessment_engine(settings, cache)

        self.assertEqual([p.model_name for p in engine.vision.providers], ["m1", "m2"])
        self.assertEqual(engine.vision.modes["roof"], "heuristic")
        self.assertIs(engine.irradiance.cache, cache)


if __name__ == "__main__":
    unittest.main()
