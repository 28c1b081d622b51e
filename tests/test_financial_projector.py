import math
import unittest

from engine.financial import (
    FinancialProjector,
    calculate_coverage_percentage,
    calculate_monthly_production,
    estimate_annual_consumption_from_bill,
    get_system_cost_range,
    size_system,
)
from engine.financial.sizing import orientation_factor
from engine.irradiance import default_profile
from engine.region import PEI_COMBINED_EFFICIENCY
from tests.fakes import make_roof


class TestFinancialProjector(unittest.TestCase):
    def test_reference_scenario(self):
        projector = FinancialProjector(electricity_rate=0.18)

        analysis = projector.project(6, 7000, installation_cost=18000)

        self.assertEqual(analysis.annual_savings, 1260)
        self.assertEqual(analysis.monthly_savings, 105)
        self.assertEqual(analysis.simple_payback_years, 14.29)
        self.assertTrue(analysis.pays_back)

    def test_first_year_is_unmodified(self):
        projection = FinancialProjector(electricity_rate=0.18).project_years(7000)

        self.assertEqual(len(projection), 25)
        first, second = projection[0], projection[1]
        self.assertEqual(first.year, 1)
        self.assertEqual(first.production_kwh, 7000)
        self.assertEqual(first.rate, 0.18)
        self.assertEqual(first.savings, 1260)
        self.assertEqual(second.production_kwh, 6965)
        self.assertEqual(second.rate, 0.1854)

    def test_totals_derive_from_yearly_projection(self):
        analysis = FinancialProjector().project(6, 7000, installation_cost=18000)

        self.assertEqual(analysis.twenty_five_year_savings, analysis.yearly_projection[-1].cumulative_savings)
        self.assertAlmostEqual(analysis.net_profit, analysis.twenty_five_year_savings - 18000, places=2)
        self.assertAlmostEqual(analysis.return_on_investment, analysis.net_profit / 18000 * 100, delta=0.1)
        self.assertEqual(
            analysis.lifetime_production_kwh,
            round(sum(y.production_kwh for y in analysis.yearly_projection)),
        )
        cumulative = [y.cumulative_savings for y in analysis.yearly_projection]
        self.assertEqual(cumulative, sorted(cumulative))

    def test_default_installation_cost(self):
        analysis = FinancialProjector().project(6, 7000)
        self.assertEqual(analysis.installation_cost, 18000)
        self.assertEqual(analysis.cost_range.low, 15000)
        self.assertEqual(analysis.cost_range.high, 21000)

    def test_zero_savings_means_no_payback(self):
        analysis = FinancialProjector().project(6, 0, installation_cost=18000)

        self.assertTrue(math.isinf(analysis.simple_payback_years))
        self.assertFalse(analysis.pays_back)
        self.assertIsNone(analysis.model_dump(mode="json")["simple_payback_years"])

    def test_environmental_impact(self):
        analysis = FinancialProjector().project(6, 7000)
        self.assertEqual(analysis.annual_co2_offset_kg, 2800)
        self.assertEqual(analysis.equivalent_trees_planted, 133)


class TestFinancialHelpers(unittest.TestCase):
    def test_consumption_from_bill(self):
        self.assertEqual(estimate_annual_consumption_from_bill(150), 8542)
        self.assertEqual(estimate_annual_consumption_from_bill(20), 0)

    def test_coverage_is_clamped_for_display(self):
        self.assertEqual(calculate_coverage_percentage(5000, 10000), 50)
        self.assertEqual(calculate_coverage_percentage(15000, 10000), 100)
        self.assertEqual(calculate_coverage_percentage(5000, 0), 0)

    def test_monthly_production_follows_irradiance(self):
        monthly = calculate_monthly_production(8000)
        self.assertEqual(len(monthly), 12)
        self.assertAlmostEqual(sum(monthly), 8000, delta=12)
        self.assertGreater(monthly[5], monthly[11])

    def test_cost_range(self):
        cost_range = get_system_cost_range(7.2)
        self.assertEqual((cost_range.low, cost_range.mid, cost_range.high), (18000, 21600, 25200))


class TestSystemSizing(unittest.TestCase):
    def setUp(self):
        self.irradiance = default_profile(46.2382, -63.1311)

    def test_panels_capped_by_usable_area_bracket(self):
        # 70 m² usable fits 34 panels but the <75 m² bracket allows 18
        specs = size_system(make_roof(roof_area_sq_m=100, usable_area_percentage=70), self.irradiance)

        self.assertEqual(specs.panel_count, 18)
        self.assertEqual(specs.system_size_kw, 7.2)
        expected = 7.2 * self.irradiance.average_peak_sun_hours * 365 * PEI_COMBINED_EFFICIENCY
        self.assertEqual(specs.annual_production_kwh, round(expected))

    def test_minimum_panel_count(self):
        specs = size_system(make_roof(roof_area_sq_m=50, usable_area_percentage=30), self.irradiance)
        self.assertEqual(specs.panel_count, 8)

    def test_orientation_reduces_production(self):
        south = size_system(make_roof(orientation="south"), self.irradiance)
        north = size_system(make_roof(orientation="north"), self.irradiance)
        self.assertLess(north.annual_production_kwh, south.annual_production_kwh)

    def test_orientation_factor_for_compound_bearing(self):
        self.assertEqual(orientation_factor("South-West"), 1.0)
        self.assertEqual(orientation_factor("East"), 0.85)
        self.assertEqual(orientation_factor("unknown"), 1.0)


if __name__ == "__main__":
    unittest.main()
