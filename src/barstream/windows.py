"""Window partitioning rules: elapsed time, accumulated volume, tick count.

A window answers four questions for the resampler driving it:

* ``belongs(obs)`` -- may ``obs`` be folded into the open bar as is?
* ``should_finalize(obs)`` -- must the open bar be closed before ``obs``
  is folded?
* ``successor(obs)`` -- the window that opens once the current one closes,
  seeded from ``obs``. A resampler keeps one *configuration* window and
  calls ``successor`` on it to open the very first window, too.
* ``record(obs)`` -- update the running counter after ``obs`` was accepted.

Windows are replaced wholesale on finalization, never mutated into the next
one. Time windows jump straight to the period containing the new
observation, so a gap of any length opens exactly one window and no empty
bars are synthesised in between.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from barstream.errors import InvalidWindowError
from barstream.models.observation import Observation


class Window(ABC):
    """Abstract partitioning rule."""

    @abstractmethod
    def belongs(self, obs: Observation) -> bool:
        ...

    @abstractmethod
    def should_finalize(self, obs: Observation) -> bool:
        ...

    @abstractmethod
    def successor(self, obs: Observation) -> Window:
        ...

    def record(self, obs: Observation) -> None:
        """Update the running counter. Stateless windows do nothing."""

    @abstractmethod
    def as_dict(self) -> dict[str, Any]:
        ...

    def same_configuration(self, other: Window) -> bool:
        """True if ``other`` partitions observations by the same rule."""
        return type(self) is type(other)

    def copy(self) -> Window:
        return dataclasses.replace(self)  # type: ignore[type-var]


# ---------------------------------------------------------------- time


def _coerce_period(period: Any) -> Any:
    if isinstance(period, bool):
        raise InvalidWindowError(f"Invalid period: {period!r}")
    if isinstance(period, str):
        try:
            period = pd.to_timedelta(period).to_pytimedelta()
        except ValueError as e:
            raise InvalidWindowError(f"Invalid period {period!r}: {e}") from e
    if isinstance(period, timedelta):
        if period <= timedelta(0):
            raise InvalidWindowError(f"Period must be positive, got {period}")
        return period
    if isinstance(period, (int, float)) or hasattr(period, "__mod__"):
        if not period > 0:
            raise InvalidWindowError(f"Period must be positive, got {period}")
        return period
    raise InvalidWindowError(f"Invalid period: {period!r}")


_PD_EPOCH = pd.Timestamp(1970, 1, 1)


def floor_timestamp(ts: Any, period: Any) -> Any:
    """Floor ``ts`` to a multiple of ``period``.

    Datetimes are floored relative to the Unix epoch in their own timezone
    (wall-clock), numbers relative to zero. Datetimes need a ``timedelta``
    period and numbers a numeric one.

    Raises:
        InvalidWindowError: ``period`` does not match the timestamp type.
    """
    is_datetime = isinstance(ts, datetime)
    if is_datetime != isinstance(period, timedelta):
        raise InvalidWindowError(
            f"Period {period!r} cannot partition timestamps like {ts!r}"
        )
    if isinstance(ts, pd.Timestamp):
        if ts.tz is None:
            return ts - (ts - _PD_EPOCH) % period
        # floor in wall-clock time, then keep the side of a DST fold ts is on
        wall = ts.tz_localize(None)
        start = wall - (wall - _PD_EPOCH) % period
        return start.tz_localize(ts.tz, ambiguous=bool(ts.dst()), nonexistent="shift_forward")
    if is_datetime:
        epoch = datetime(1970, 1, 1, tzinfo=ts.tzinfo)
        return ts - (ts - epoch) % period
    return ts - ts % period


@dataclass
class TimeWindow(Window):
    """Half-open time span ``[start, start + period)``.

    Attributes:
        period: Span length -- ``timedelta``, a pandas offset string such
            as ``"1min"`` / ``"5min"`` / ``"1h"``, or a positive number for
            numeric timestamps.
        start: Period floor of the observation that opened the window.
            None on a configuration window that has not been seeded.
    """

    period: Any
    start: Any = None

    def __post_init__(self) -> None:
        self.period = _coerce_period(self.period)

    @property
    def end(self) -> Any:
        if self.start is None:
            return None
        return self.start + self.period

    def contains(self, timestamp: Any) -> bool:
        if self.start is None:
            return False
        return self.start <= timestamp < self.start + self.period

    def belongs(self, obs: Observation) -> bool:
        return self.contains(obs.timestamp)

    def should_finalize(self, obs: Observation) -> bool:
        return not self.belongs(obs)

    def successor(self, obs: Observation) -> TimeWindow:
        return TimeWindow(self.period, floor_timestamp(obs.timestamp, self.period))

    def next_adjacent(self) -> TimeWindow:
        """The window starting where this one ends."""
        if self.start is None:
            raise InvalidWindowError("Unseeded time window has no adjacent window")
        return TimeWindow(self.period, self.end)

    def same_configuration(self, other: Window) -> bool:
        return isinstance(other, TimeWindow) and other.period == self.period

    def as_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "period": self.period}


# ------------------------------------------------------------ counters


def _check_target(target: Any, kind: str) -> None:
    if isinstance(target, bool) or not target > 0:
        raise InvalidWindowError(f"{kind} target must be positive, got {target!r}")


@dataclass
class VolumeWindow(Window):
    """Closes once the accumulated volume would reach ``target``.

    An observation that would bring ``accumulated`` to ``target`` or beyond
    finalizes the open bar first and is then folded, whole, into the new one.
    Observations are never split across windows.
    """

    target: Any
    accumulated: Any = 0

    def __post_init__(self) -> None:
        _check_target(self.target, "Volume")

    def belongs(self, obs: Observation) -> bool:
        return self.accumulated + obs.volume < self.target

    def should_finalize(self, obs: Observation) -> bool:
        return self.accumulated + obs.volume >= self.target

    def successor(self, obs: Observation) -> VolumeWindow:
        return VolumeWindow(self.target)

    def record(self, obs: Observation) -> None:
        self.accumulated += obs.volume

    def same_configuration(self, other: Window) -> bool:
        return isinstance(other, VolumeWindow) and other.target == self.target

    def as_dict(self) -> dict[str, Any]:
        return {"target": self.target, "accumulated": self.accumulated}


@dataclass
class TickWindow(Window):
    """Holds exactly ``target`` observations."""

    target: int
    accumulated: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.target, bool) or not isinstance(self.target, int):
            raise InvalidWindowError(f"Tick target must be an int, got {self.target!r}")
        _check_target(self.target, "Tick")

    def belongs(self, obs: Observation) -> bool:
        return self.accumulated < self.target

    def should_finalize(self, obs: Observation) -> bool:
        return self.accumulated + 1 > self.target

    def successor(self, obs: Observation) -> TickWindow:
        return TickWindow(self.target)

    def record(self, obs: Observation) -> None:
        self.accumulated += 1

    def same_configuration(self, other: Window) -> bool:
        return isinstance(other, TickWindow) and other.target == self.target

    def as_dict(self) -> dict[str, Any]:
        return {"target": self.target, "accumulated": self.accumulated}


def make_window(spec: Window | timedelta | str) -> Window:
    """Normalise a window spec into a fresh configuration window.

    Strings and timedeltas become ``TimeWindow``s. Window instances are
    copied with their running state cleared so the caller's object is never
    shared with a resampler.
    """
    if isinstance(spec, TimeWindow):
        return TimeWindow(spec.period)
    if isinstance(spec, (VolumeWindow, TickWindow)):
        return type(spec)(spec.target)
    if isinstance(spec, Window):
        return spec.copy()
    if isinstance(spec, (str, timedelta)):
        return TimeWindow(spec)
    raise InvalidWindowError(f"Cannot build a window from {spec!r}")
