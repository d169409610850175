"""MarketResampler -- price bar and volume total over one window rule."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from barstream.config import PriceMethod
from barstream.errors import InvalidAccumulatorChoiceError
from barstream.models.bar import MarketBarView
from barstream.models.observation import Observation
from barstream.resampler import MeanResampler, OHLCResampler, Resampler, SumResampler
from barstream.windows import Window, make_window


def _price_method(choice: PriceMethod | str) -> PriceMethod:
    if isinstance(choice, PriceMethod):
        return choice
    try:
        return PriceMethod(choice)
    except ValueError:
        raise InvalidAccumulatorChoiceError(
            choice, tuple(m.value for m in PriceMethod)
        ) from None


class MarketResampler:
    """Pairs a price resampler (OHLC or mean) with a volume-sum resampler.

    Both sides get their own window built from the same configuration and
    see every observation, so their current windows stay equal.

    Usage::

        r = MarketResampler("1min", price_method="ohlc")
        r.process(Observation(ts, 100.0, 1000.0))
        bar = r.value()
        bar.price.open, bar.volume
    """

    def __init__(
        self,
        window: Window | timedelta | str,
        price_method: PriceMethod | str = PriceMethod.OHLC,
        enforce_order: bool = False,
    ) -> None:
        self.price_method = _price_method(price_method)
        spec = make_window(window)

        self.price: Resampler
        if self.price_method is PriceMethod.OHLC:
            self.price = OHLCResampler(spec, enforce_order=enforce_order)
        else:
            self.price = MeanResampler(spec, enforce_order=enforce_order)
        self.volume: Resampler = SumResampler(spec, enforce_order=enforce_order)

    def __repr__(self) -> str:
        return (
            f"MarketResampler(window={self.current_window or self.price.window_spec!r}, "
            f"price_method={self.price_method.value!r}, count={self.count})"
        )

    @property
    def enforce_order(self) -> bool:
        return self.price.enforce_order

    @property
    def current_window(self) -> Window | None:
        return self.price.current_window

    @property
    def count(self) -> int:
        return self.price.count

    def process(self, obs: Observation) -> None:
        """Feed ``obs`` to the price side, then the volume side.

        An out-of-order rejection from the price side propagates before the
        volume side is touched.
        """
        self.price.process(obs)
        self.volume.process(obs)

    def process_many(self, observations: Iterable[Observation]) -> None:
        for obs in observations:
            self.process(obs)

    def value(self) -> MarketBarView:
        price_view = self.price.value()
        volume_view = self.volume.value()
        return MarketBarView(price=price_view, volume=volume_view.sum, window=price_view.window)

    def merge(self, other: MarketResampler) -> MarketResampler:
        """Merge both sides of ``other`` into this resampler and return self."""
        if other.price_method is not self.price_method:
            raise TypeError(
                f"Cannot merge {other.price_method.value} bars into {self.price_method.value} bars"
            )
        self.price.merge(other.price)
        self.volume.merge(other.volume)
        return self
