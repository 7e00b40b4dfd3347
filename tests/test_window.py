import datetime

import pytest

from window import Window, plan_rolling_day, plan_window

UTC = datetime.timezone.utc


def at(*args):
    return datetime.datetime(*args, tzinfo=UTC)


class TestPlanWindow:
    def test_previous_four_hour_block(self):
        window = plan_window(4, "h", 1, now=at(2024, 1, 1, 13, 27, 45))
        assert window == Window(at(2024, 1, 1, 8), at(2024, 1, 1, 12))

    def test_offset_zero_is_current_block(self):
        window = plan_window(4, "hour", 0, now=at(2024, 1, 1, 13, 27))
        assert window == Window(at(2024, 1, 1, 12), at(2024, 1, 1, 16))

    def test_crosses_midnight(self):
        window = plan_window(4, "h", 1, now=at(2024, 1, 1, 2, 5))
        assert window == Window(at(2023, 12, 31, 20), at(2024, 1, 1, 0))

    def test_offset_multiplies_period(self):
        window = plan_window(4, "h", 3, now=at(2024, 1, 2, 13, 0))
        assert window.start == at(2024, 1, 2, 0)

    def test_minutes(self):
        window = plan_window(15, "m", 1, now=at(2024, 1, 1, 10, 47, 12))
        assert window == Window(at(2024, 1, 1, 10, 30), at(2024, 1, 1, 10, 45))

    def test_days_align_to_week_start(self):
        # 2024-03-13 is a Wednesday, weeks start on Sunday
        window = plan_window(7, "d", 1, now=at(2024, 3, 13, 18))
        assert window == Window(at(2024, 3, 3), at(2024, 3, 10))

    @pytest.mark.parametrize("period", [1, 7])
    def test_daily_runs_never_overlap(self, period):
        windows = {
            plan_window(period, "d", 1, now=at(2024, 2, 15, 12) + datetime.timedelta(days=n))
            for n in range(30)
        }
        ordered = sorted(windows)
        for before, after in zip(ordered, ordered[1:]):
            assert before.end <= after.start

    def test_length_is_period(self):
        for granularity, unit in (("m", "minutes"), ("h", "hours"), ("d", "days")):
            window = plan_window(3, granularity, 2, now=at(2024, 5, 17, 9, 41))
            assert window.end - window.start == datetime.timedelta(**{unit: 3})

    def test_deterministic(self):
        now = at(2024, 6, 1, 23, 59, 59)
        assert plan_window(6, "h", 1, now) == plan_window(6, "h", 1, now)

    def test_naive_now_treated_as_utc(self):
        naive = datetime.datetime(2024, 1, 1, 13, 27)
        assert plan_window(4, "h", 1, naive) == plan_window(4, "h", 1, at(2024, 1, 1, 13, 27))

    def test_other_timezone_converted(self):
        tz = datetime.timezone(datetime.timedelta(hours=5))
        now = datetime.datetime(2024, 1, 1, 18, 27, tzinfo=tz)
        assert plan_window(4, "h", 1, now) == Window(at(2024, 1, 1, 8), at(2024, 1, 1, 12))

    def test_window_contains_is_half_open(self):
        window = plan_window(4, "h", 1, now=at(2024, 1, 1, 13))
        assert window.contains(window.start)
        assert not window.contains(window.end)

    @pytest.mark.parametrize(
        "period, granularity, offset",
        [(0, "h", 1), (-2, "h", 1), (4, "h", -1), (4, "week", 1)],
    )
    def test_invalid_input(self, period, granularity, offset):
        with pytest.raises(ValueError):
            plan_window(period, granularity, offset, now=at(2024, 1, 1))


class TestPlanRollingDay:
    def test_day_before_current_block(self):
        day = plan_rolling_day(4, "h", now=at(2024, 1, 2, 13, 27))
        assert day == Window(at(2024, 1, 1, 12), at(2024, 1, 2, 12))
