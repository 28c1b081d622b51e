import unittest
from datetime import date
from unittest.mock import Mock, patch

import requests

from engine.errors import DataQualityError
from engine.irradiance import IrradianceCache, IrradianceDataProvider, build_profile
from engine.irradiance.provider import calculate_monthly_averages, valid_readings
from engine.region import PEI_SOLAR_DATA
from tools.nasa_power_client import NasaPowerClient

LAT, LON = 46.2912, -63.1189


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestBuildProfile(unittest.TestCase):
    def test_sentinel_values_are_excluded(self):
        profile = build_profile({"20230101": -999, "20230102": 3.2}, LAT, LON)

        self.assertEqual(profile.annual_ghi, 1168)
        self.assertEqual(profile.monthly_ghi[0], 3.2)
        self.assertEqual(profile.monthly_ghi[1:], [0] * 11)
        self.assertEqual(profile.average_peak_sun_hours, 3.2)
        self.assertEqual(profile.photovoltaic_potential, round(1168 * 0.80))
        self.assertEqual(profile.data_source, "live")

    def test_annual_is_mean_times_365(self):
        daily = {"20230115": 2.0, "20230615": 6.0, "20230616": 5.0}
        profile = build_profile(daily, LAT, LON)
        self.assertEqual(profile.annual_ghi, round((2.0 + 6.0 + 5.0) / 3 * 365))
        self.assertEqual(profile.monthly_ghi[5], 5.5)

    def test_peak_sun_hours_are_clamped(self):
        high = build_profile({"20230701": 20.0}, LAT, LON)
        low = build_profile({"20231201": 0.5}, LAT, LON)
        self.assertEqual(high.average_peak_sun_hours, 5.5)
        self.assertEqual(low.average_peak_sun_hours, 2.5)

    def test_all_sentinels_is_a_data_quality_error(self):
        with self.assertRaises(DataQualityError):
            build_profile({"20230101": -999, "20230102": -999}, LAT, LON)


class TestIrradianceCache(unittest.TestCase):
    def test_key_rounds_to_two_decimals(self):
        self.assertEqual(IrradianceCache.key_for(46.29123, -63.11891), "46.29,-63.12")

    def test_entries_expire_lazily(self):
        clock = FakeClock()
        cache = IrradianceCache(ttl_seconds=100, clock=clock)
        profile = build_profile({"20230102": 3.2}, LAT, LON)
        cache.set(LAT, LON, profile)

        clock.now += 99
        self.assertIs(cache.get(LAT, LON), profile)
        self.assertEqual(len(cache), 1)

        clock.now += 1
        self.assertIsNone(cache.get(LAT, LON))
        self.assertEqual(len(cache), 0)


class TestIrradianceDataProvider(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = Mock(spec=NasaPowerClient)
        self.client.get_daily_irradiance.return_value = {"20230101": -999, "20230102": 3.2, "20230703": 5.6}
        self.cache = IrradianceCache()
        self.provider = IrradianceDataProvider(self.client, self.cache, today=lambda: date(2024, 1, 1))

    async def test_second_call_is_served_from_cache(self):
        first = await self.provider.get_profile(LAT, LON)
        second = await self.provider.get_profile(LAT, LON)

        self.assertEqual(first.data_source, "live")
        self.assertEqual(second.data_source, "cached")
        self.assertEqual(
            first.model_dump(exclude={"data_source"}),
            second.model_dump(exclude={"data_source"}),
        )
        self.client.get_daily_irradiance.assert_called_once_with(LAT, LON, date(2024, 1, 1))

    async def test_cached_copy_does_not_alter_stored_entry(self):
        await self.provider.get_profile(LAT, LON)
        cached = await self.provider.get_profile(LAT, LON)
        cached.monthly_ghi[0] = 99.0

        again = await self.provider.get_profile(LAT, LON)
        self.assertNotEqual(again.monthly_ghi[0], 99.0)

    async def test_network_failure_returns_default_profile(self):
        self.client.get_daily_irradiance.side_effect = requests.Timeout("timed out")

        profile = await self.provider.get_profile(LAT, LON)

        self.assertEqual(profile.data_source, "default")
        self.assertEqual(profile.annual_ghi, PEI_SOLAR_DATA["annual_ghi"])
        self.assertEqual(len(profile.monthly_ghi), 12)
        self.assertEqual(len(self.cache), 0)

    async def test_all_invalid_readings_return_default_profile(self):
        self.client.get_daily_irradiance.return_value = {"20230101": -999}

        profile = await self.provider.get_profile(LAT, LON)

        self.assertEqual(profile.data_source, "default")
        self.assertEqual(profile.average_peak_sun_hours, PEI_SOLAR_DATA["average_peak_sun_hours"])

    async def test_default_profile_has_same_shape_as_live(self):
        live = await self.provider.get_profile(LAT, LON)
        self.client.get_daily_irradiance.side_effect = ValueError("bad payload")
        fallback = await self.provider.get_profile(10.0, 10.0)

        self.assertEqual(set(live.model_dump()), set(fallback.model_dump()))


class TestMalformedNasaPayloads(unittest.IsolatedAsyncioTestCase):
    async def profile_for(self, block):
        resp = Mock()
        resp.json.return_value = {"properties": {"parameter": {"ALLSKY_SFC_SW_DWN": block}}}
        provider = IrradianceDataProvider(NasaPowerClient(), IrradianceCache(), today=lambda: date(2024, 1, 1))
        with patch("tools.nasa_power_client.requests.get", return_value=resp):
            return await provider.get_profile(LAT, LON)

    async def test_null_block_returns_default_profile(self):
        profile = await self.profile_for(None)
        self.assertEqual(profile.data_source, "default")

    async def test_list_block_returns_default_profile(self):
        profile = await self.profile_for([3.0, 4.0])
        self.assertEqual(profile.data_source, "default")

    async def test_out_of_range_month_returns_default_profile(self):
        profile = await self.profile_for({"20231301": 3.0})
        self.assertEqual(profile.data_source, "default")

    async def test_non_numeric_reading_returns_default_profile(self):
        profile = await self.profile_for({"20230101": "n/a"})
        self.assertEqual(profile.data_source, "default")

    async def test_month_zero_is_not_counted_as_december(self):
        profile = await self.profile_for({"20230001": 9.0, "20230102": 3.2})
        self.assertEqual(profile.data_source, "live")
        self.assertEqual(profile.monthly_ghi[11], 0)
        self.assertEqual(profile.annual_ghi, 1168)


class TestValidReadings(unittest.TestCase):
    def test_malformed_keys_are_dropped(self):
        daily = {"20230102": 3.2, "20231301": 4.0, "20230001": 5.0, "2023-01-03": 6.0, "bad": 1.0}
        self.assertEqual(valid_readings(daily), {"20230102": 3.2})

    def test_monthly_averages_reject_malformed_keys(self):
        with self.assertRaises(ValueError):
            calculate_monthly_averages({"20231301": 4.0})


class TestNasaPowerClient(unittest.TestCase):
    @patch("tools.nasa_power_client.requests.get")
    def test_requests_trailing_year(self, mock_get):
        resp = Mock()
        resp.json.return_value = {"properties": {"parameter": {"ALLSKY_SFC_SW_DWN": {"20240101": 1.2}}}}
        mock_get.return_value = resp

        daily = NasaPowerClient().get_daily_irradiance(LAT, LON, today=date(2024, 1, 1))

        self.assertEqual(daily, {"20240101": 1.2})
        params = mock_get.call_args.kwargs["params"]
        self.assertEqual(params["start"], "20230101")
        self.assertEqual(params["end"], "20240101")
        self.assertEqual(params["community"], "RE")

    @patch("tools.nasa_power_client.requests.get")
    def test_missing_parameter_block_raises_value_error(self, mock_get):
        resp = Mock()
        resp.json.return_value = {"messages": ["no data"]}
        mock_get.return_value = resp

        with self.assertRaises(ValueError):
            NasaPowerClient().get_daily_irradiance(LAT, LON, today=date(2024, 1, 1))

    @patch("tools.nasa_power_client.requests.get")
    def test_non_mapping_parameter_block_raises_value_error(self, mock_get):
        resp = Mock()
        resp.json.return_value = {"properties": {"parameter": {"ALLSKY_SFC_SW_DWN": [3.0, 4.0]}}}
        mock_get.return_value = resp

        with self.assertRaises(ValueError):
            NasaPowerClient().get_daily_irradiance(LAT, LON, today=date(2024, 1, 1))


if __name__ == "__main__":
    unittest.main()
