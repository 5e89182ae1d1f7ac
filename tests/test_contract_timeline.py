import unittest
from datetime import datetime, timedelta, timezone

from pytzline.timeline import (
    TimelineWindow,
    hours_for_width,
    instant_to_column,
    window_bounds,
)

UTC = timezone.utc


class TestTimelineWindowContract(unittest.TestCase):
    def test_hours_clamped_between_two_days_and_a_week(self) -> None:
        self.assertEqual(hours_for_width(80), 48.0)
        self.assertEqual(hours_for_width(200), 100.0)
        self.assertEqual(hours_for_width(2000), 168.0)

    def test_hours_always_within_bounds(self) -> None:
        for width in list(range(0, 400)) + [1000, 5000]:
            self.assertTrue(48.0 <= hours_for_width(width) <= 168.0, width)

    def test_columns_never_decrease_across_window(self) -> None:
        scrub = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
        for width in (2, 7, 80, 101, 337, 1000):
            window = TimelineWindow.around(scrub, width)
            previous = 0
            t = window.start
            while t < window.end:
                col = window.column_for(t)
                self.assertGreaterEqual(col, previous, (width, t))
                self.assertTrue(0 <= col < width)
                previous = col
                t += timedelta(minutes=1)

    def test_window_centred_on_scrub(self) -> None:
        scrub = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
        start, end = window_bounds(scrub, 80)
        self.assertEqual(start, datetime(2024, 3, 9, 12, 0, tzinfo=UTC))
        self.assertEqual(end, datetime(2024, 3, 11, 12, 0, tzinfo=UTC))
        self.assertEqual(scrub - start, end - scrub)

    def test_scrub_maps_to_middle_column(self) -> None:
        scrub = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
        window = TimelineWindow.around(scrub, 100)
        self.assertEqual(window.column_for(scrub), 50)
        self.assertEqual(window.column_for(window.start), 0)
        # ratio 1.0 lands on width and is clamped to the last column
        self.assertEqual(window.column_for(window.end), 99)

    def test_columns_clamped_outside_window(self) -> None:
        scrub = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
        window = TimelineWindow.around(scrub, 100)
        self.assertEqual(window.column_for(window.start - timedelta(days=3)), 0)
        self.assertEqual(window.column_for(window.end + timedelta(days=3)), 99)
        self.assertFalse(window.contains(window.end))
        self.assertTrue(window.contains(window.start))

    def test_half_column_rounds_up(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = start + timedelta(hours=4)
        # 15 minutes of 4 hours at width 8 is exactly half a column
        self.assertEqual(instant_to_column(start + timedelta(minutes=15), start, end, 8), 1)

    def test_zero_width_is_not_renderable(self) -> None:
        scrub = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
        self.assertFalse(TimelineWindow.around(scrub, 0).renderable)
        self.assertFalse(TimelineWindow.around(scrub, 1).renderable)
        self.assertTrue(TimelineWindow.around(scrub, 2).renderable)
        self.assertEqual(TimelineWindow.around(scrub, 1).local_hours("UTC"), [])
        self.assertEqual(instant_to_column(scrub, scrub, scrub, 10), 0)

    def test_instant_at_inverts_column(self) -> None:
        scrub = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
        window = TimelineWindow.around(scrub, 96)
        self.assertEqual(window.instant_at(0), window.start)
        self.assertEqual(window.instant_at(48), scrub)
        self.assertEqual(window.column_for(window.instant_at(37)), 37)

    def test_local_hours_per_column(self) -> None:
        window = TimelineWindow.around(datetime(2024, 1, 15, 12, 0, tzinfo=UTC), 96)
        hours = window.local_hours("UTC")
        self.assertEqual(len(hours), 96)
        self.assertEqual(hours[:3], [12, 12, 13])
        self.assertEqual(window.local_hours("Asia/Tokyo")[0], 21)

    def test_local_hours_skip_the_spring_forward_gap(self) -> None:
        window = TimelineWindow.around(datetime(2024, 3, 10, 12, 0, tzinfo=UTC), 96)
        hours = window.local_hours("America/New_York")
        self.assertEqual(hours[36], 1)
        self.assertEqual(hours[38], 3)
        self.assertNotIn(2, hours[30:44])


if __name__ == "__main__":
    unittest.main(verbosity=2)
