"""Resampler data models."""

from barstream.models.bar import OHLC, MarketBarView, MeanBarView, OHLCBarView, SumBarView
from barstream.models.observation import Observation

__all__ = [
    "Observation",
    "OHLC",
    "OHLCBarView",
    "MeanBarView",
    "SumBarView",
    "MarketBarView",
]
