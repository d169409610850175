"""Observation data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Observation:
    """Single timestamped price/volume observation (a trade or tick).

    Attributes:
        timestamp: Event time. ``datetime`` or a plain number.
        price: Traded price.
        volume: Traded size.
    """

    timestamp: Any
    price: Any
    volume: Any
