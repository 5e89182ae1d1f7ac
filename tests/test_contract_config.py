import json
import os
import tempfile
import unittest

from pytzline.config import (
    AppConfig,
    HourBands,
    TimeActivity,
    ZoneSpec,
    config_from_dict,
    load_config,
    next_theme,
    save_config,
)
from pytzline.zones import DEFAULT_CITIES


class TestConfigFileContract(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(os.path.join(td, "absent.json"))
        self.assertEqual([z.city for z in cfg.zones], DEFAULT_CITIES)
        self.assertEqual(cfg.time_format, "24h")
        self.assertTrue(cfg.show_sun_times)

    def test_corrupt_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "cfg.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("[1, 2")
            with self.assertLogs("pytzline.config", level="WARNING"):
                cfg = load_config(path)
            self.assertEqual(cfg, AppConfig())

            with open(path, "w", encoding="utf-8") as f:
                json.dump(["not", "an", "object"], f)
            with self.assertLogs("pytzline.config", level="WARNING"):
                self.assertEqual(load_config(path), AppConfig())

    def test_round_trip(self) -> None:
        cfg = AppConfig(
            zones=[ZoneSpec("Tokyo", "Office"), ZoneSpec("London, Canada")],
            selected_zone_index=1,
            time_format="12h",
            theme="sunset",
            show_date=True,
            hours=HourBands(9, 17, 7, 23),
        )
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "cfg.json")
            self.assertTrue(save_config(cfg, path))
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
            loaded = load_config(path)
        self.assertEqual(raw["zones"], [{"city": "Tokyo", "label": "Office"}, "London, Canada"])
        self.assertEqual(loaded, cfg)

    def test_save_failure_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "missing-dir", "cfg.json")
            with self.assertLogs("pytzline.config", level="WARNING"):
                self.assertFalse(save_config(AppConfig(), path))


class TestConfigValuesContract(unittest.TestCase):
    def test_bad_values_fall_back(self) -> None:
        cfg = config_from_dict({
            "zones": [],
            "time_format": "bogus",
            "display_mode": "FULL",
            "theme": 7,
            "selected_zone_index": -1,
            "show_date": "yes",
            "hours": {"work_start": 30, "work_end": 17},
        })
        self.assertEqual([z.city for z in cfg.zones], DEFAULT_CITIES)
        self.assertEqual(cfg.time_format, "24h")
        self.assertEqual(cfg.display_mode, "full")
        self.assertEqual(cfg.theme, "default")
        self.assertEqual(cfg.selected_zone_index, 0)
        self.assertFalse(cfg.show_date)
        self.assertEqual(cfg.hours, HourBands(8, 17, 6, 22))

    def test_zone_entries_accept_strings_and_objects(self) -> None:
        cfg = config_from_dict({"zones": ["Tokyo", {"city": "Havana", "label": ""}, {"label": "x"}, 3]})
        self.assertEqual(cfg.zones, [ZoneSpec("Tokyo"), ZoneSpec("Havana")])

    def test_hour_bands(self) -> None:
        bands = HourBands()
        self.assertIs(bands.activity(3), TimeActivity.NIGHT)
        self.assertIs(bands.activity(6), TimeActivity.AWAKE)
        self.assertIs(bands.activity(8), TimeActivity.WORK)
        self.assertIs(bands.activity(17), TimeActivity.WORK)
        self.assertIs(bands.activity(18), TimeActivity.AWAKE)
        self.assertIs(bands.activity(22), TimeActivity.NIGHT)
        self.assertEqual(bands.work_middle, 13)

    def test_theme_cycle(self) -> None:
        self.assertEqual(next_theme("default"), "ocean")
        self.assertEqual(next_theme("monochrome"), "default")
        self.assertEqual(next_theme("neon"), "default")


if __name__ == "__main__":
    unittest.main(verbosity=2)
