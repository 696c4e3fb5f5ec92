import unittest

from solar_calc.constants import (
    DEFAULT_CONSTANTS,
    STAGE_FIELDS,
    ProjectionConstants,
    constants_from_env,
    estimate_consumption_from_bill,
    field_stage,
    load_constants,
)
from solar_calc.errors import InvalidConstantsError


class TestDefaults(unittest.TestCase):
    def test_default_values(self):
        c = DEFAULT_CONSTANTS
        self.assertEqual(0.20, c.panel_efficiency)
        self.assertEqual(1.7, c.panel_area_m2)
        self.assertEqual(5.5, c.solar_irradiance)
        self.assertEqual(0.14, c.system_losses)
        self.assertEqual(250, c.cost_per_panel)
        self.assertEqual(1.3, c.installation_multiplier)
        self.assertEqual(0.4, c.co2_factor_kg_per_kwh)
        self.assertEqual(5, c.projection_years)

    def test_field_ownership(self):
        self.assertEqual(0, field_stage("electricity_rate_per_kwh"))
        self.assertEqual(1, field_stage("roof_angle_deg"))
        self.assertEqual((), STAGE_FIELDS[2])
        with self.assertRaises(KeyError):
            field_stage("shade")


class TestLoadConstants(unittest.TestCase):
    def test_no_overrides_returns_defaults(self):
        self.assertIs(DEFAULT_CONSTANTS, load_constants(None))
        self.assertIs(DEFAULT_CONSTANTS, load_constants({}))

    def test_overrides_are_coerced(self):
        c = load_constants({"cost_per_panel": "300", "projection_years": "10"})
        self.assertEqual(300.0, c.cost_per_panel)
        self.assertEqual(10, c.projection_years)
        self.assertIsInstance(c.projection_years, int)
        self.assertEqual(DEFAULT_CONSTANTS.panel_efficiency, c.panel_efficiency)

    def test_bad_overrides_raise(self):
        for overrides in (
            {"panel_colour": 1},
            {"cost_per_panel": "cheap"},
            {"projection_years": 2.5},
            {"system_losses": True},
        ):
            with self.assertRaises(InvalidConstantsError, msg=str(overrides)):
                load_constants(overrides)

    def test_degenerate_overrides_raise(self):
        for overrides in (
            {"panel_efficiency": 0},
            {"system_losses": "1"},
            {"projection_years": -1},
        ):
            with self.assertRaises(InvalidConstantsError, msg=str(overrides)):
                load_constants(overrides)

    def test_degenerate_env_raises(self):
        with self.assertRaises(InvalidConstantsError):
            constants_from_env({"SOLAR_PANEL_EFFICIENCY": "0"})

    def test_from_env(self):
        env = {
            "SOLAR_SOLAR_IRRADIANCE": "4.2",
            "SOLAR_PROJECTION_YEARS": " 7 ",
            "SOLAR_COST_PER_PANEL": "",
            "UNRELATED": "x",
        }
        c = constants_from_env(env)
        self.assertEqual(
            ProjectionConstants(solar_irradiance=4.2, projection_years=7),
            c,
        )

    def test_from_env_rejects_garbage(self):
        with self.assertRaises(InvalidConstantsError):
            constants_from_env({"SOLAR_PANEL_EFFICIENCY": "twenty percent"})


class TestEstimateConsumption(unittest.TestCase):
    def test_from_bill(self):
        self.assertAlmostEqual(300.0, estimate_consumption_from_bill(36.0, 0.12))

    def test_zero_rate(self):
        self.assertEqual(0, estimate_consumption_from_bill(100.0, 0.0))


if __name__ == "__main__":
    unittest.main()
