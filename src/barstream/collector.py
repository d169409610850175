"""Completed-bar capture on top of a resampler."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import pandas as pd

from barstream.market import MarketResampler
from barstream.models.observation import Observation
from barstream.resampler import Resampler


class BarCollector:
    """Keeps the bars a resampler discards on finalization.

    Before each ``process()`` the current view is snapshotted; if the call
    replaced the window, the snapshot is the completed bar. Errors from the
    wrapped resampler propagate and nothing is recorded for that call.

    Args:
        resampler: ``Resampler`` or ``MarketResampler`` to drive.
        on_bar: Called with each completed bar view as it closes.
    """

    def __init__(
        self,
        resampler: Resampler | MarketResampler,
        on_bar: Callable[[Any], None] | None = None,
    ) -> None:
        self.resampler = resampler
        self.on_bar = on_bar
        self.bars: list[Any] = []

    def process(self, obs: Observation) -> Any | None:
        """Process ``obs``; return the bar it closed, if any."""
        window = self.resampler.current_window
        before = self.resampler.value() if window is not None else None

        self.resampler.process(obs)

        if window is None or self.resampler.current_window is window:
            return None
        self.bars.append(before)
        if self.on_bar is not None:
            self.on_bar(before)
        return before

    def process_many(self, observations: Iterable[Observation]) -> list[Any]:
        """Process observations in order; return the bars they closed."""
        closed = []
        for obs in observations:
            bar = self.process(obs)
            if bar is not None:
                closed.append(bar)
        return closed

    def flush(self) -> Any | None:
        """Current in-progress bar, or None before the first observation.

        The open window is not finalized.
        """
        if self.resampler.current_window is None:
            return None
        return self.resampler.value()

    def to_frame(self, include_open: bool = False) -> pd.DataFrame:
        """Completed bars as a DataFrame, one row per bar."""
        views = list(self.bars)
        if include_open:
            current = self.flush()
            if current is not None:
                views.append(current)
        return pd.DataFrame([v.as_dict() for v in views])

    def clear(self) -> None:
        self.bars.clear()
