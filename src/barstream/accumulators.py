"""Bar accumulators -- OHLC, mean price, and volume sum.

Each accumulator folds one observation at a time and knows nothing about
windows; the resampler decides when to ``reset()`` it.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from barstream.models.bar import OHLC, MeanBarView, OHLCBarView, SumBarView
from barstream.models.observation import Observation
from barstream.windows import Window


class Accumulator(ABC):
    """Abstract running aggregate over the observations of one window."""

    kind: ClassVar[str]
    count: int

    @abstractmethod
    def fold(self, obs: Observation) -> None:
        ...

    @abstractmethod
    def reset(self) -> None:
        """Return to the empty state."""
        ...

    @abstractmethod
    def view(self, window: Window | None) -> Any:
        """Read-only snapshot of the current aggregate."""
        ...

    @abstractmethod
    def _merge(self, other: Any) -> None:
        ...

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def merge(self, other: Accumulator) -> Accumulator:
        """Fold ``other`` into this accumulator in place and return self.

        ``other`` is treated as the chronologically later slice.
        """
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot merge {type(other).__name__} into {type(self).__name__}"
            )
        self._merge(other)
        return self

    def copy(self) -> Accumulator:
        return copy.copy(self)


@dataclass
class OHLCAccumulator(Accumulator):
    """Open/high/low/close plus volume and observation count."""

    kind: ClassVar[str] = "ohlc"

    ohlc: OHLC | None = None
    volume: Any = 0
    count: int = 0

    def fold(self, obs: Observation) -> None:
        price = obs.price
        if self.ohlc is None:
            self.ohlc = OHLC(price, price, price, price)
        else:
            self.ohlc = OHLC(
                self.ohlc.open,
                max(self.ohlc.high, price),
                min(self.ohlc.low, price),
                price,
            )
        self.volume += obs.volume
        self.count += 1

    def reset(self) -> None:
        self.ohlc = None
        self.volume = 0
        self.count = 0

    def view(self, window: Window | None) -> OHLCBarView:
        return OHLCBarView(ohlc=self.ohlc, volume=self.volume, count=self.count, window=window)

    def _merge(self, other: OHLCAccumulator) -> None:
        if other.ohlc is not None:
            if self.ohlc is None:
                self.ohlc = other.ohlc
            else:
                # open from the left operand, close from the right
                self.ohlc = OHLC(
                    self.ohlc.open,
                    max(self.ohlc.high, other.ohlc.high),
                    min(self.ohlc.low, other.ohlc.low),
                    other.ohlc.close,
                )
        self.volume += other.volume
        self.count += other.count


@dataclass
class MeanAccumulator(Accumulator):
    """Arithmetic mean of prices plus total volume.

    The mean of an empty accumulator is reported as None.
    """

    kind: ClassVar[str] = "mean"

    price_sum: Any = 0
    volume_sum: Any = 0
    count: int = 0

    @property
    def mean_price(self) -> Any:
        if self.count == 0:
            return None
        return self.price_sum / self.count

    def fold(self, obs: Observation) -> None:
        self.price_sum += obs.price
        self.volume_sum += obs.volume
        self.count += 1

    def reset(self) -> None:
        self.price_sum = 0
        self.volume_sum = 0
        self.count = 0

    def view(self, window: Window | None) -> MeanBarView:
        return MeanBarView(
            mean_price=self.mean_price,
            volume=self.volume_sum,
            count=self.count,
            window=window,
        )

    def _merge(self, other: MeanAccumulator) -> None:
        self.price_sum += other.price_sum
        self.volume_sum += other.volume_sum
        self.count += other.count


@dataclass
class SumAccumulator(Accumulator):
    """Total volume."""

    kind: ClassVar[str] = "sum"

    total: Any = 0
    count: int = 0

    def fold(self, obs: Observation) -> None:
        self.total += obs.volume
        self.count += 1

    def reset(self) -> None:
        self.total = 0
        self.count = 0

    def view(self, window: Window | None) -> SumBarView:
        return SumBarView(sum=self.total, count=self.count, window=window)

    def _merge(self, other: SumAccumulator) -> None:
        self.total += other.total
        self.count += other.count


ACCUMULATORS: dict[str, type[Accumulator]] = {
    OHLCAccumulator.kind: OHLCAccumulator,
    MeanAccumulator.kind: MeanAccumulator,
    SumAccumulator.kind: SumAccumulator,
}


def merge(a: Accumulator, b: Accumulator) -> Accumulator:
    """Combine two same-variant accumulators into a new one.

    Not commutative: for OHLC the result keeps ``a``'s open and ``b``'s
    close, so pass the slices in chronological order. Neither operand is
    modified.
    """
    return a.copy().merge(b)
