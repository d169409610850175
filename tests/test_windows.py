"""Tests for window partitioning rules."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from barstream.errors import InvalidWindowError, ResamplerErrorCode
from barstream.models.observation import Observation
from barstream.windows import (
    TickWindow,
    TimeWindow,
    VolumeWindow,
    floor_timestamp,
    make_window,
)
from conftest import obs


class TestFloorTimestamp:
    def test_minute_floor(self):
        ts = datetime(2024, 1, 1, 9, 30, 45, tzinfo=timezone.utc)
        assert floor_timestamp(ts, timedelta(minutes=1)) == datetime(
            2024, 1, 1, 9, 30, tzinfo=timezone.utc
        )

    def test_naive_datetime(self):
        ts = datetime(2024, 1, 1, 9, 37, 12)
        assert floor_timestamp(ts, timedelta(minutes=5)) == datetime(2024, 1, 1, 9, 35)

    def test_on_boundary_is_unchanged(self):
        ts = datetime(2024, 1, 1, 10, 0)
        assert floor_timestamp(ts, timedelta(hours=1)) == ts

    def test_pandas_timestamp(self):
        ts = pd.Timestamp("2024-01-01 09:30:45", tz="UTC")
        assert floor_timestamp(ts, timedelta(minutes=1)) == pd.Timestamp(
            "2024-01-01 09:30:00", tz="UTC"
        )

    def test_numeric(self):
        assert floor_timestamp(1234, 100) == 1200
        assert floor_timestamp(12.5, 5) == 10

    @pytest.mark.parametrize("seconds", [0, 1, 59, 61, 3599, 86399])
    def test_floor_law(self, seconds):
        period = timedelta(minutes=1)
        ts = datetime(2024, 3, 5, tzinfo=timezone.utc) + timedelta(seconds=seconds)
        start = floor_timestamp(ts, period)
        assert start <= ts < start + period


class TestTimeWindow:
    def test_string_period(self):
        assert TimeWindow("5min").period == timedelta(minutes=5)

    def test_invalid_period(self):
        with pytest.raises(InvalidWindowError) as exc:
            TimeWindow(timedelta(0))
        assert exc.value.code == ResamplerErrorCode.INVALID_WINDOW
        with pytest.raises(InvalidWindowError):
            TimeWindow("not a period")

    def test_half_open_membership(self, base_time):
        window = TimeWindow("1min", start=base_time)
        assert window.belongs(obs(0, 100.0))
        assert window.belongs(obs(59.999, 100.0))
        assert not window.belongs(obs(60, 100.0))
        assert window.should_finalize(obs(60, 100.0))
        assert not window.should_finalize(obs(30, 100.0))

    def test_unseeded_window_holds_nothing(self):
        window = TimeWindow("1min")
        assert window.start is None
        assert window.end is None
        assert not window.belongs(obs(0, 100.0))

    def test_successor_jumps_over_gaps(self, base_time):
        window = TimeWindow("1min", start=base_time)
        nxt = window.successor(obs(3600 + 15, 100.0))
        assert nxt.start == base_time + timedelta(hours=1)
        assert nxt.period == timedelta(minutes=1)

    def test_end_and_next_adjacent(self, base_time):
        window = TimeWindow("1min", start=base_time)
        assert window.end == base_time + timedelta(minutes=1)
        adjacent = window.next_adjacent()
        assert adjacent.start == window.end
        assert adjacent.contains(base_time + timedelta(seconds=90))

    def test_next_adjacent_requires_start(self):
        with pytest.raises(InvalidWindowError):
            TimeWindow("1min").next_adjacent()

    def test_numeric_timestamps(self):
        window = TimeWindow(60).successor(Observation(125, 1.0, 1.0))
        assert window.start == 120
        assert window.end == 180

    def test_record_is_noop(self, base_time):
        window = TimeWindow("1min", start=base_time)
        window.record(obs(1, 100.0))
        assert window == TimeWindow("1min", start=base_time)


class TestVolumeWindow:
    def test_defaults(self):
        window = VolumeWindow(1000.0)
        assert window.target == 1000.0
        assert window.accumulated == 0

    def test_prospective_finalize(self):
        window = VolumeWindow(1000.0, accumulated=900.0)
        assert not window.should_finalize(obs(0, 100.0, 99.0))
        assert window.belongs(obs(0, 100.0, 99.0))
        assert window.should_finalize(obs(0, 100.0, 100.0))
        assert not window.belongs(obs(0, 100.0, 100.0))

    def test_record_adds_volume(self):
        window = VolumeWindow(1000.0)
        window.record(obs(0, 100.0, 250.0))
        window.record(obs(1, 100.0, 250.0))
        assert window.accumulated == 500.0

    def test_successor_resets_counter(self):
        window = VolumeWindow(1000.0, accumulated=900.0)
        nxt = window.successor(obs(0, 100.0, 5000.0))
        assert nxt == VolumeWindow(1000.0)
        assert window.accumulated == 900.0

    def test_invalid_target(self):
        with pytest.raises(InvalidWindowError):
            VolumeWindow(0)
        with pytest.raises(InvalidWindowError):
            VolumeWindow(-5.0)


class TestTickWindow:
    def test_defaults(self):
        window = TickWindow(100)
        assert window.target == 100
        assert window.accumulated == 0

    def test_holds_exactly_target_ticks(self):
        window = TickWindow(3)
        for i in range(3):
            assert not window.should_finalize(obs(i, 100.0))
            window.record(obs(i, 100.0))
        assert window.accumulated == 3
        assert window.should_finalize(obs(3, 100.0))
        assert not window.belongs(obs(3, 100.0))

    def test_invalid_target(self):
        with pytest.raises(InvalidWindowError):
            TickWindow(0)
        with pytest.raises(InvalidWindowError):
            TickWindow(2.5)  # type: ignore[arg-type]
        with pytest.raises(InvalidWindowError):
            TickWindow(True)


class TestMakeWindow:
    def test_from_string(self):
        window = make_window("15min")
        assert isinstance(window, TimeWindow)
        assert window.period == timedelta(minutes=15)

    def test_from_timedelta(self):
        assert make_window(timedelta(hours=1)) == TimeWindow(timedelta(hours=1))

    def test_instances_are_copied_and_cleared(self, base_time):
        src = VolumeWindow(500.0, accumulated=300.0)
        window = make_window(src)
        assert window == VolumeWindow(500.0)
        assert window is not src

        seeded = TimeWindow("1min", start=base_time)
        assert make_window(seeded).start is None

    def test_rejects_unknown(self):
        with pytest.raises(InvalidWindowError):
            make_window(42)  # type: ignore[arg-type]

    def test_same_configuration(self):
        assert TimeWindow("1min").same_configuration(TimeWindow(timedelta(minutes=1)))
        assert not TimeWindow("1min").same_configuration(TimeWindow("5min"))
        assert VolumeWindow(10).same_configuration(VolumeWindow(10, accumulated=3))
        assert not TickWindow(10).same_configuration(VolumeWindow(10))


class TestDaylightSaving:
    """America/New_York falls back at 02:00 EDT on 2024-11-03."""

    @staticmethod
    def _ny(utc: str) -> pd.Timestamp:
        return pd.Timestamp(utc, tz="UTC").tz_convert("America/New_York")

    def test_first_repeated_hour(self):
        ts = self._ny("2024-11-03 05:30")  # 01:30 EDT
        start = floor_timestamp(ts, timedelta(hours=1))
        assert start == pd.Timestamp("2024-11-03 05:00", tz="UTC")
        assert start <= ts < start + timedelta(hours=1)

    def test_second_repeated_hour(self):
        ts = self._ny("2024-11-03 06:30")  # 01:30 EST
        start = floor_timestamp(ts, timedelta(hours=1))
        assert start == pd.Timestamp("2024-11-03 06:00", tz="UTC")
        assert start <= ts < start + timedelta(hours=1)

    def test_day_floor_is_local_midnight(self):
        ts = self._ny("2024-11-03 17:00")  # 12:00 EST
        start = floor_timestamp(ts, timedelta(days=1))
        assert start == pd.Timestamp("2024-11-03 00:00", tz="America/New_York")

    def test_spring_forward_gap(self):
        ts = pd.Timestamp("2024-03-10 03:30", tz="America/New_York")
        start = floor_timestamp(ts, timedelta(hours=2))
        assert start <= ts

    def test_successor_in_repeated_hour(self):
        window = TimeWindow("1h").successor(Observation(self._ny("2024-11-03 05:30"), 100.0, 1.0))
        assert window.start == pd.Timestamp("2024-11-03 05:00", tz="UTC")


class TestPeriodTimestampMismatch:
    def test_numeric_period_with_datetime(self):
        with pytest.raises(InvalidWindowError):
            TimeWindow(60).successor(Observation(pd.Timestamp("2024-01-01 09:30"), 1.0, 1.0))
        with pytest.raises(InvalidWindowError):
            floor_timestamp(datetime(2024, 1, 1, 9, 30), 60)

    def test_timedelta_period_with_number(self):
        with pytest.raises(InvalidWindowError):
            TimeWindow("1min").successor(Observation(125, 1.0, 1.0))
