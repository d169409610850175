"""Resampler error types."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ResamplerErrorCode(Enum):
    """Error classification codes."""

    OUT_OF_ORDER = "out_of_order"
    INVALID_ACCUMULATOR = "invalid_accumulator"
    INVALID_WINDOW = "invalid_window"
    INVALID_CONFIG = "invalid_config"


class ResamplerError(Exception):
    """Resampler exception with error code and retryable flag.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Always False for the built-in codes; the caller has to
            fix the input (sort it, change the config) before trying again.
    """

    def __init__(
        self,
        message: str,
        code: ResamplerErrorCode = ResamplerErrorCode.INVALID_CONFIG,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


class OutOfOrderObservationError(ResamplerError):
    """An observation arrived with a timestamp earlier than the last one accepted.

    Attributes:
        timestamp: Timestamp of the rejected observation.
        last_timestamp: Timestamp of the last accepted observation.
    """

    def __init__(self, timestamp: Any, last_timestamp: Any) -> None:
        super().__init__(
            f"Observation not in chronological order: {timestamp} < {last_timestamp}. "
            "To disable this check, construct the resampler with enforce_order=False.",
            code=ResamplerErrorCode.OUT_OF_ORDER,
        )
        self.timestamp = timestamp
        self.last_timestamp = last_timestamp


class InvalidAccumulatorChoiceError(ResamplerError, ValueError):
    """Unknown price aggregation mode requested at construction time."""

    def __init__(self, choice: Any, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"price_method must be one of {', '.join(allowed)}; got {choice!r}",
            code=ResamplerErrorCode.INVALID_ACCUMULATOR,
        )
        self.choice = choice


class InvalidWindowError(ResamplerError, ValueError):
    """Window configuration that can never hold an observation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=ResamplerErrorCode.INVALID_WINDOW)
