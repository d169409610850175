"""barstream -- online OHLC / mean / volume bars from a tick stream.

Single-pass, constant-memory resampling by elapsed time, accumulated
volume, or observation count. Partial aggregates from disjoint slices can
be merged.

Quick start::

    from barstream import MarketResampler, Observation
    r = MarketResampler("1min")
    r.process(Observation(datetime(2024, 1, 2, 9, 30), 100.0, 1000.0))
    bar = r.value()

A resampler keeps only the open bar. Finalizing a window discards the
completed bar, so read ``value()`` first or use ``BarCollector``.
"""

from __future__ import annotations

from pathlib import Path

from barstream.accumulators import (
    ACCUMULATORS,
    Accumulator,
    MeanAccumulator,
    OHLCAccumulator,
    SumAccumulator,
    merge,
)
from barstream.collector import BarCollector
from barstream.config import PriceMethod, ResamplerConfig, WindowType
from barstream.errors import (
    InvalidAccumulatorChoiceError,
    InvalidWindowError,
    OutOfOrderObservationError,
    ResamplerError,
    ResamplerErrorCode,
)
from barstream.market import MarketResampler
from barstream.models.bar import OHLC, MarketBarView, MeanBarView, OHLCBarView, SumBarView
from barstream.models.observation import Observation
from barstream.resampler import MeanResampler, OHLCResampler, Resampler, SumResampler
from barstream.windows import (
    TickWindow,
    TimeWindow,
    VolumeWindow,
    Window,
    floor_timestamp,
    make_window,
)

__version__ = "0.1.0"

__all__ = [
    # Resamplers
    "Resampler",
    "OHLCResampler",
    "MeanResampler",
    "SumResampler",
    "MarketResampler",
    "BarCollector",
    "create_resampler_from_env",
    # Windows
    "Window",
    "TimeWindow",
    "VolumeWindow",
    "TickWindow",
    "make_window",
    "floor_timestamp",
    # Accumulators
    "Accumulator",
    "OHLCAccumulator",
    "MeanAccumulator",
    "SumAccumulator",
    "ACCUMULATORS",
    "merge",
    # Config
    "ResamplerConfig",
    "WindowType",
    "PriceMethod",
    # Errors
    "ResamplerError",
    "ResamplerErrorCode",
    "OutOfOrderObservationError",
    "InvalidAccumulatorChoiceError",
    "InvalidWindowError",
    # Models
    "Observation",
    "OHLC",
    "OHLCBarView",
    "MeanBarView",
    "SumBarView",
    "MarketBarView",
]


def create_resampler_from_env(env_file: Path | str | None = None) -> MarketResampler:
    """Zero-config factory -- reads the window rule from env vars.

    See ``ResamplerConfig.from_env`` for the variables read.
    """
    config = ResamplerConfig.from_env(env_file)
    return MarketResampler(
        config.build_window(),
        price_method=config.price_method,
        enforce_order=config.enforce_order,
    )
