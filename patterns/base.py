from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

import pandas as pd

from utils.errors import DataFormatError


@dataclass(frozen=True)
class PricePoint:
    timestamp: datetime
    price: float


@dataclass(frozen=True)
class Bottom:
    timestamp: pd.Timestamp
    price: float
    index: int  # position in the source price series


@dataclass(frozen=True)
class DoubleBottomPattern:
    first_bottom: Bottom
    second_bottom: Bottom
    neckline: float
    depth: float  # |first - second| / first
    timespan_days: float


class PairingPolicy(ABC):
    """Chooses which two bottoms the validator should test."""

    name: str = "base_pairing"

    @abstractmethod
    def candidates(self, bottoms: list[Bottom]) -> list[tuple[Bottom, Bottom]]:
        """Ordered pairs to try; the validator accepts the first one that passes."""
        ...


def empty_price_series() -> pd.Series:
    return pd.Series(dtype=float, index=pd.DatetimeIndex([], name="timestamp"), name="price")


def validate_price_series(prices: pd.Series) -> pd.Series:
    """
    Normalise a fetched series to the canonical shape (float "price" values on an
    ascending "timestamp" index). Duplicate timestamps and non-positive or missing
    prices raise DataFormatError.
    """
    if not isinstance(prices.index, pd.DatetimeIndex):
        raise DataFormatError(f"Price series needs a DatetimeIndex, got {type(prices.index).__name__}")
    try:
        prices = prices.astype(float)
    except (TypeError, ValueError) as e:
        raise DataFormatError(f"Non-numeric prices: {e}") from e

    prices = prices.sort_index().rename("price")
    prices.index.name = "timestamp"
    if prices.index.has_duplicates:
        raise DataFormatError("Duplicate timestamps in price series")
    if prices.isna().any() or (prices <= 0).any():
        raise DataFormatError("Price series contains non-positive or missing prices")
    return prices


def to_price_series(points: Iterable[PricePoint | tuple]) -> pd.Series:
    """Build the canonical price series from (timestamp, price) points."""
    rows = [(p.timestamp, p.price) if isinstance(p, PricePoint) else tuple(p) for p in points]
    if not rows:
        return empty_price_series()

    try:
        timestamps = pd.to_datetime([r[0] for r in rows])
        prices = pd.Series([float(r[1]) for r in rows], index=timestamps)
    except (TypeError, ValueError, IndexError) as e:
        raise DataFormatError(f"Malformed price points: {e}") from e
    return validate_price_series(prices)
