import unittest

from engine.recommendation import SummaryWriter, calculate_suitability_score, template_summary
from engine.recommendation.composer import quality_label
from engine.roof_vision.heuristic import PRIORITY_ORDER, HeuristicRoofEstimator
from tests.fakes import fake_genai_client, make_recommendation, make_roof
from tools.gemini_client import GeminiClient


class TestSuitabilityScore(unittest.TestCase):
    def test_increases_with_usable_area(self):
        scores = [calculate_suitability_score(area, "medium", 6000, 10200) for area in (10, 30, 50, 70)]
        self.assertEqual(scores, sorted(scores))
        self.assertLess(scores[0], scores[-1])

    def test_increases_with_production(self):
        scores = [calculate_suitability_score(40, "medium", production, 10200) for production in (0, 3000, 6000, 9000)]
        self.assertEqual(scores, sorted(scores))
        self.assertLess(scores[0], scores[-1])

    def test_decreases_with_shading(self):
        low, medium, high = (calculate_suitability_score(40, s, 6000, 10200) for s in ("low", "medium", "high"))
        self.assertGreater(low, medium)
        self.assertGreater(medium, high)

    def test_bounds(self):
        self.assertEqual(calculate_suitability_score(60, "low", 12000, 10200, "simple", 44), 100)
        self.assertEqual(calculate_suitability_score(0, "high", 0, 10200, "complex", 0), 0)
        self.assertLessEqual(calculate_suitability_score(500, "low", 50000, 1, "simple", 44), 100)

    def test_quality_bands(self):
        self.assertEqual(quality_label(80), "excellent")
        self.assertEqual(quality_label(60), "good")
        self.assertEqual(quality_label(40), "moderate")
        self.assertEqual(quality_label(39), "challenging")


class TestRecommendationComposer(unittest.TestCase):
    def test_compose_sizes_and_explains(self):
        recommendation = make_recommendation()

        self.assertTrue(0 <= recommendation.suitability_score <= 100)
        self.assertGreater(recommendation.panel_count, 0)
        self.assertIn("single array", recommendation.layout_suggestion)
        self.assertIn("Maritime Electric", recommendation.explanation)
        self.assertIn(quality_label(recommendation.suitability_score), recommendation.explanation)

    def test_monthly_split_and_consumption_coverage(self):
        recommendation = make_recommendation()

        annual = recommendation.estimated_annual_production_kwh
        monthly = recommendation.monthly_production_kwh
        self.assertEqual(len(monthly), 12)
        self.assertAlmostEqual(sum(monthly), annual, delta=12)
        self.assertGreater(monthly[5], monthly[11])
        self.assertEqual(
            recommendation.consumption_coverage_percentage,
            round(min(100.0, annual / 10200 * 100), 1),
        )

    def test_suggestions_sorted_and_merged(self):
        recommendation = make_recommendation(make_roof(shading_level="high", complexity="complex", roof_pitch_degrees=10))

        ranks = [PRIORITY_ORDER[s.priority] for s in recommendation.suggestions]
        self.assertEqual(ranks, sorted(ranks))
        categories = {s.category for s in recommendation.suggestions}
        self.assertTrue({"shading", "equipment", "orientation", "maintenance", "incentive"} <= categories)
        titles = [s.title for s in recommendation.suggestions]
        self.assertIn("Consider tilt brackets", titles)
        self.assertIn("Use microinverters", titles)

    def test_existing_installation_suggestions_are_included(self):
        installation = HeuristicRoofEstimator(11).estimate()
        recommendation = make_recommendation(installation)

        titles = [s.title for s in recommendation.suggestions]
        for suggestion in installation.suggestions:
            self.assertIn(suggestion.title, titles)


class TestSummaryWriter(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.roof = make_roof()
        self.recommendation = make_recommendation(self.roof)

    async def test_unconfigured_client_uses_template(self):
        writer = SummaryWriter(GeminiClient(api_key=""), "gemini-2.0-flash")

        summary = await writer.write(self.recommendation, self.roof)

        self.assertEqual(summary, template_summary(self.recommendation, self.roof))
        self.assertIn("kW system", summary)

    async def test_model_failure_uses_template(self):
        genai_client = fake_genai_client(side_effect=RuntimeError("service unavailable"))
        writer = SummaryWriter(GeminiClient(api_key="key", client=genai_client), "gemini-2.0-flash")

        summary = await writer.write(self.recommendation, self.roof)

        self.assertEqual(summary, template_summary(self.recommendation, self.roof))

    async def test_model_summary_is_returned(self):
        genai_client = fake_genai_client(text="  Your roof is a great fit for solar.  ")
        writer = SummaryWriter(GeminiClient(api_key="key", client=genai_client), "gemini-2.0-flash")

        summary = await writer.write(self.recommendation, self.roof)

        self.assertEqual(summary, "Your roof is a great fit for solar.")
        call = genai_client.aio.models.generate_content.call_args
        self.assertEqual(call.kwargs["model"], "gemini-2.0-flash")
        self.assertIn("Maritime Electric", call.kwargs["contents"])


if __name__ == "__main__":
    unittest.main()
