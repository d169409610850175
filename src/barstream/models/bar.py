"""Bar view models returned by ``value()``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from barstream.windows import Window


def _window_fields(window: Window | None) -> dict[str, Any]:
    if window is None:
        return {}
    return {f"window_{k}": v for k, v in window.as_dict().items()}


@dataclass(frozen=True)
class OHLC:
    """Open/high/low/close prices of one bar."""

    open: Any
    high: Any
    low: Any
    close: Any


@dataclass(frozen=True)
class OHLCBarView:
    """Current OHLC bar.

    Attributes:
        ohlc: Prices, or None before the first observation of the window.
        volume: Volume folded into this bar.
        count: Number of observations folded into this bar.
        window: Snapshot of the window the bar belongs to (None when empty).
    """

    ohlc: OHLC | None
    volume: Any
    count: int
    window: Window | None

    @property
    def open(self) -> Any:
        return self.ohlc.open if self.ohlc is not None else None

    @property
    def high(self) -> Any:
        return self.ohlc.high if self.ohlc is not None else None

    @property
    def low(self) -> Any:
        return self.ohlc.low if self.ohlc is not None else None

    @property
    def close(self) -> Any:
        return self.ohlc.close if self.ohlc is not None else None

    def as_dict(self) -> dict[str, Any]:
        return {
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
            "count": self.count,
            **_window_fields(self.window),
        }


@dataclass(frozen=True)
class MeanBarView:
    """Current mean-price bar.

    ``mean_price`` is None when no observation has been folded yet.
    """

    mean_price: Any
    volume: Any
    count: int
    window: Window | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "mean_price": self.mean_price,
            "volume": self.volume,
            "count": self.count,
            **_window_fields(self.window),
        }


@dataclass(frozen=True)
class SumBarView:
    """Current volume-sum bar."""

    sum: Any
    count: int
    window: Window | None

    def as_dict(self) -> dict[str, Any]:
        return {"sum": self.sum, "count": self.count, **_window_fields(self.window)}


@dataclass(frozen=True)
class MarketBarView:
    """Price bar paired with the volume total of the same window."""

    price: OHLCBarView | MeanBarView
    volume: Any
    window: Window | None

    @property
    def count(self) -> int:
        return self.price.count

    def as_dict(self) -> dict[str, Any]:
        # price side already carries the window columns
        record = self.price.as_dict()
        record["volume"] = self.volume
        return record
