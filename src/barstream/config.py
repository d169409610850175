"""Resampler configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from barstream.errors import InvalidWindowError, ResamplerError, ResamplerErrorCode
from barstream.windows import TickWindow, TimeWindow, VolumeWindow, Window


class WindowType(Enum):
    """Supported partitioning rules."""

    TIME = "time"
    VOLUME = "volume"
    TICK = "tick"


class PriceMethod(Enum):
    """Price aggregation used by ``MarketResampler``."""

    OHLC = "ohlc"
    MEAN = "mean"


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ResamplerError(f"{name} must be a boolean, got {raw!r}")


def _env_number(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(Decimal(raw.strip()))
    except InvalidOperation:
        raise ResamplerError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class ResamplerConfig:
    """Configuration for building resamplers.

    Attributes:
        window_type: Partitioning rule.
        period: Time window length as a pandas offset string.
        volume_target: Volume per bar for volume windows.
        tick_target: Observations per bar for tick windows.
        price_method: "ohlc" or "mean".
        enforce_order: Reject out-of-order observations.
    """

    window_type: WindowType = WindowType.TIME
    period: str = "1min"
    volume_target: float | None = None
    tick_target: int | None = None
    price_method: PriceMethod = PriceMethod.OHLC
    enforce_order: bool = False

    def build_window(self) -> Window:
        """Configuration window for ``window_type``."""
        if self.window_type is WindowType.TIME:
            return TimeWindow(self.period)
        if self.window_type is WindowType.VOLUME:
            if self.volume_target is None:
                raise ResamplerError("volume_target is required for volume windows")
            return VolumeWindow(self.volume_target)
        if self.tick_target is None:
            raise ResamplerError("tick_target is required for tick windows")
        return TickWindow(self.tick_target)

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> ResamplerConfig:
        """Read configuration from environment variables.

        Environment variables:
            RESAMPLER_WINDOW: "time", "volume" or "tick" (default: "time").
            RESAMPLER_PERIOD: Time window length (default: "1min").
            RESAMPLER_VOLUME_TARGET: Volume per bar.
            RESAMPLER_TICK_TARGET: Observations per bar.
            RESAMPLER_PRICE_METHOD: "ohlc" or "mean" (default: "ohlc").
            RESAMPLER_ENFORCE_ORDER: Boolean flag (default: false).

        Args:
            env_file: Optional ``.env`` file loaded first. Variables already
                set in the environment win.
        """
        if env_file is not None:
            load_dotenv(env_file, override=False)

        try:
            window_type = WindowType(os.getenv("RESAMPLER_WINDOW", "time").strip().lower())
            price_method = PriceMethod(
                os.getenv("RESAMPLER_PRICE_METHOD", "ohlc").strip().lower()
            )
        except ValueError as e:
            raise ResamplerError(str(e), code=ResamplerErrorCode.INVALID_CONFIG) from e

        tick_target = _env_number("RESAMPLER_TICK_TARGET")
        if tick_target is not None and not tick_target.is_integer():
            raise ResamplerError(f"RESAMPLER_TICK_TARGET must be an integer, got {tick_target}")

        config = cls(
            window_type=window_type,
            period=os.getenv("RESAMPLER_PERIOD", "1min"),
            volume_target=_env_number("RESAMPLER_VOLUME_TARGET"),
            tick_target=int(tick_target) if tick_target is not None else None,
            price_method=price_method,
            enforce_order=_env_bool("RESAMPLER_ENFORCE_ORDER", False),
        )
        try:
            config.build_window()
        except InvalidWindowError as e:
            raise ResamplerError(str(e), code=ResamplerErrorCode.INVALID_CONFIG) from e
        return config
