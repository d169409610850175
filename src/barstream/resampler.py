"""Resampler -- drives one window and one accumulator over a stream.

Finalization discards the closed bar. Read ``value()`` before the
``process()`` call that rolls the window if the completed bar is needed, or
wrap the resampler in a ``BarCollector``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from barstream.accumulators import ACCUMULATORS, Accumulator
from barstream.errors import InvalidAccumulatorChoiceError, OutOfOrderObservationError
from barstream.models.observation import Observation
from barstream.windows import Window, make_window

logger = logging.getLogger(__name__)


def _accumulator_class(choice: str | type[Accumulator]) -> type[Accumulator]:
    if isinstance(choice, type) and issubclass(choice, Accumulator):
        return choice
    try:
        return ACCUMULATORS[choice]  # type: ignore[index]
    except (KeyError, TypeError):
        raise InvalidAccumulatorChoiceError(choice, tuple(ACCUMULATORS)) from None


class Resampler:
    """Online bar builder.

    States: *empty* (no window yet, accumulator empty) and *open* (a
    window is active). The first ``process()`` opens a window seeded from
    that observation. Every later call either folds into the open window or
    finalizes it, opens the successor, and folds into that.

    Usage::

        r = Resampler("1min", accumulator="ohlc", enforce_order=True)
        for obs in stream:
            r.process(obs)
        bar = r.value()

    Args:
        window: Window configuration -- a ``Window``, ``timedelta`` or
            timeframe string (``"1min"``).
        accumulator: ``"ohlc"``, ``"mean"``, ``"sum"`` or an
            ``Accumulator`` subclass.
        enforce_order: Reject observations older than the last accepted one.
    """

    def __init__(
        self,
        window: Window | timedelta | str,
        accumulator: str | type[Accumulator] = "ohlc",
        enforce_order: bool = False,
    ) -> None:
        self.window_spec: Window = make_window(window)
        self.accumulator: Accumulator = _accumulator_class(accumulator)()
        self.enforce_order = enforce_order
        self._window: Window | None = None
        self._last_timestamp: Any = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(window={self._window or self.window_spec!r}, "
            f"accumulator={self.accumulator.kind!r}, count={self.count})"
        )

    # ------------------------------------------------------------ state

    @property
    def current_window(self) -> Window | None:
        """The live window. Treat as read-only."""
        return self._window

    @property
    def last_timestamp(self) -> Any:
        """Last accepted timestamp; only tracked when ``enforce_order`` is on."""
        return self._last_timestamp

    @property
    def count(self) -> int:
        """Observations in the open bar. Resets on finalization."""
        return self.accumulator.count

    @property
    def is_empty(self) -> bool:
        return self._window is None

    # ------------------------------------------------------------- feed

    def process(self, obs: Observation) -> None:
        """Fold one observation, finalizing the open window first if needed.

        Raises:
            OutOfOrderObservationError: ``enforce_order`` is on and ``obs``
                is older than the last accepted observation. State is left
                untouched.
        """
        if (
            self.enforce_order
            and self._last_timestamp is not None
            and obs.timestamp < self._last_timestamp
        ):
            raise OutOfOrderObservationError(obs.timestamp, self._last_timestamp)

        if self._window is None:
            self._window = self.window_spec.successor(obs)
        elif self._window.should_finalize(obs):
            logger.debug(
                "Finalizing %s bar (%d obs) in %r", self.accumulator.kind, self.count, self._window
            )
            successor = self._window.successor(obs)
            self.accumulator.reset()
            self._window = successor

        # finalize, then record, then fold -- decides boundary attribution
        self._window.record(obs)
        self.accumulator.fold(obs)

        if self.enforce_order:
            self._last_timestamp = obs.timestamp

    def process_many(self, observations: Iterable[Observation]) -> None:
        """Process observations in order, stopping at the first error."""
        for obs in observations:
            self.process(obs)

    # ------------------------------------------------------------- read

    def value(self) -> Any:
        """Current bar view; echoes a snapshot of the current window."""
        window = self._window.copy() if self._window is not None else None
        return self.accumulator.view(window)

    # ------------------------------------------------------------ merge

    def merge(self, other: Resampler) -> Resampler:
        """Fold ``other``'s open bar into this one and return self.

        Both resamplers must use the same accumulator variant and window
        rule. The caller asserts that the two processed disjoint, in-order
        slices of the same window; windows are not compared. ``other`` is
        the later slice and should not be used afterwards.
        """
        if not self.window_spec.same_configuration(other.window_spec):
            raise TypeError(
                f"Cannot merge resamplers with different windows: "
                f"{self.window_spec!r} vs {other.window_spec!r}"
            )
        self.accumulator.merge(other.accumulator)
        if self._window is None and other._window is not None:
            self._window = other._window.copy()
        if other._last_timestamp is not None and (
            self._last_timestamp is None or other._last_timestamp > self._last_timestamp
        ):
            self._last_timestamp = other._last_timestamp
        logger.debug("Merged %s bar, count now %d", self.accumulator.kind, self.count)
        return self


class OHLCResampler(Resampler):
    """Resampler producing OHLC bars."""

    def __init__(self, window: Window | timedelta | str, enforce_order: bool = False) -> None:
        super().__init__(window, accumulator="ohlc", enforce_order=enforce_order)


class MeanResampler(Resampler):
    """Resampler producing mean-price bars."""

    def __init__(self, window: Window | timedelta | str, enforce_order: bool = False) -> None:
        super().__init__(window, accumulator="mean", enforce_order=enforce_order)


class SumResampler(Resampler):
    """Resampler producing volume sums."""

    def __init__(self, window: Window | timedelta | str, enforce_order: bool = False) -> None:
        super().__init__(window, accumulator="sum", enforce_order=enforce_order)
