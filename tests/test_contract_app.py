import os
import tempfile
import unittest
from datetime import datetime, timezone

from pytzline import app
from pytzline.catalog import load_catalog
from pytzline.config import AppConfig, ZoneSpec, load_config

UTC = timezone.utc
FIXED = datetime(2024, 1, 15, 12, 34, 56, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED


def make_state(*cities: str, group: bool = False, **kwargs) -> dict:
    cfg = AppConfig(zones=[ZoneSpec(c) for c in cities], group_same_time=group)
    kwargs.setdefault("persist", False)
    return app.new_state(cfg, load_catalog(), clock=fixed_clock, **kwargs)


class TestTimeNavigationContract(unittest.TestCase):
    def test_hour_scrub_snaps_to_whole_hours(self) -> None:
        state = make_state("New York", "London", "Tokyo")
        app.scrub_hour(state, -1)
        self.assertEqual(state["scrub"], datetime(2024, 1, 15, 12, 0, tzinfo=UTC))
        app.scrub_hour(state, -1)
        self.assertEqual(state["scrub"], datetime(2024, 1, 15, 11, 0, tzinfo=UTC))
        app.scrub_hour(state, 1)
        self.assertEqual(state["scrub"], datetime(2024, 1, 15, 12, 0, tzinfo=UTC))

    def test_minute_adjust_and_reset(self) -> None:
        state = make_state("Tokyo")
        app.adjust_minutes(state, 15)
        app.adjust_minutes(state, -1)
        self.assertEqual(state["scrub"], datetime(2024, 1, 15, 12, 48, 56, tzinfo=UTC))
        app.reset_to_now(state)
        self.assertEqual(state["scrub"], FIXED)
        self.assertTrue(app.tick(state))
        self.assertEqual(state["now"], FIXED)

    def test_zone_navigation_is_clamped(self) -> None:
        state = make_state("New York", "London", "Tokyo")
        self.assertEqual(state["selected"], 0)
        self.assertFalse(app.navigate_zone(state, -1))
        self.assertTrue(app.navigate_zone(state, 1))
        app.navigate_zone(state, 5)
        self.assertEqual(state["selected"], 2)

    def test_local_zone_preselected(self) -> None:
        state = make_state("New York", "London", "Tokyo")
        app.select_local_zone(state, 9 * 3600)
        self.assertEqual(state["selected"], 2)


class TestZoneActionsContract(unittest.TestCase):
    def test_add_highlighted_result(self) -> None:
        state = make_state("New York", "London", "Tokyo")
        app.start_add_zone(state)
        app.update_add_input(state, "syd")
        self.assertEqual(state["add_results"][0], "Sydney")
        app.confirm_add_zone(state)
        self.assertFalse(state["adding"])
        self.assertEqual(len(state["registry"]), 4)
        self.assertEqual(state["registry"][state["selected"]].timezone_id, "Australia/Sydney")

    def test_digit_quick_select(self) -> None:
        state = make_state("Tokyo")
        app.start_add_zone(state)
        app.update_add_input(state, "ber")
        app.quick_select(state, 1)
        self.assertIsNotNone(state["registry"].index_for_city("Berlin"))

        app.start_add_zone(state)
        app.update_add_input(state, "tok")
        app.quick_select(state, 9)
        self.assertTrue(state["adding"])
        self.assertEqual(state["add_input"], "tok9")

    def test_result_navigation(self) -> None:
        state = make_state("Tokyo")
        app.start_add_zone(state)
        self.assertFalse(app.navigate_results(state, 1))
        app.update_add_input(state, "a")
        app.navigate_results(state, 1)
        app.navigate_results(state, -5)
        self.assertEqual(state["add_idx"], 0)
        app.cancel_add_zone(state)
        self.assertFalse(state["adding"])
        self.assertEqual(state["add_results"], [])

    def test_unknown_raw_input(self) -> None:
        state = make_state("Tokyo")
        app.start_add_zone(state)
        app.update_add_input(state, "Atlantis")
        app.confirm_add_zone(state)
        self.assertEqual(len(state["registry"]), 1)
        self.assertIn("not found", state["message"])

    def test_last_zone_cannot_be_removed(self) -> None:
        state = make_state("Tokyo")
        self.assertFalse(app.remove_current_zone(state))
        self.assertEqual(len(state["registry"]), 1)

        state = make_state("Tokyo", "London")
        state["selected"] = 1
        self.assertTrue(app.remove_current_zone(state))
        self.assertEqual(state["selected"], 0)
        self.assertEqual(state["registry"][0].timezone_id, "Europe/London")

    def test_rename_and_clear(self) -> None:
        state = make_state("Tokyo")
        app.start_rename(state)
        state["rename_input"] = "Office"
        app.confirm_rename(state)
        self.assertFalse(state["renaming"])
        self.assertEqual(state["registry"][0].custom_label, "Office")
        app.clear_label(state)
        self.assertIsNone(state["registry"][0].custom_label)

    def test_grouping_toggle(self) -> None:
        state = make_state("Toronto", "New York")
        self.assertEqual(len(state["registry"]), 2)
        app.toggle_grouping(state)
        self.assertEqual(len(state["registry"]), 1)
        app.toggle_grouping(state)
        self.assertEqual(len(state["registry"]), 2)

    def test_unknown_config_cities_fall_back_to_defaults(self) -> None:
        state = make_state("Atlantis")
        self.assertEqual(len(state["registry"]), 7)


class TestDisplayTogglesContract(unittest.TestCase):
    def test_toggles(self) -> None:
        state = make_state("Tokyo")
        cfg = state["config"]
        app.toggle_time_format(state)
        app.toggle_display_mode(state)
        app.toggle_flag(state, "show_date")
        app.cycle_theme(state)
        app.toggle_help(state)
        self.assertEqual(cfg.time_format, "12h")
        self.assertEqual(cfg.display_mode, "full")
        self.assertTrue(cfg.show_date)
        self.assertEqual(cfg.theme, "ocean")
        self.assertTrue(state["show_help"])

    def test_changes_are_persisted(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "cfg.json")
            state = make_state("New York", "Tokyo", config_path=path, persist=True)
            app.toggle_time_format(state)
            app.start_rename(state)
            state["rename_input"] = "HQ"
            app.confirm_rename(state)
            cfg = load_config(path)
        self.assertEqual(cfg.time_format, "12h")
        self.assertEqual(cfg.zones, [ZoneSpec("New York", "HQ"), ZoneSpec("Tokyo")])


if __name__ == "__main__":
    unittest.main(verbosity=2)
