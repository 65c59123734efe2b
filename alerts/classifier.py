from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from data.models import Asset
from patterns.base import DoubleBottomPattern
from utils.errors import ComputationError

SECOND_BOTTOM_BAND = 1.05  # within 5% of the second trough
NECKLINE_BAND = 0.95  # within 5% below the neckline
STOP_LOSS_FACTOR = 0.95


class AlertTier(Enum):
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    NONE = "none"

    @property
    def label(self) -> str:
        return {
            "yellow": "Second bottom forming",
            "orange": "Pattern completed",
            "red": "Breakout imminent",
            "none": "No alert",
        }[self.value]

    @property
    def marker(self) -> str:
        return {"yellow": "🟡", "orange": "🟠", "red": "🔴", "none": "⚪"}[self.value]


@dataclass(frozen=True)
class Alert:
    asset: Asset
    pattern: DoubleBottomPattern
    confidence: float
    tier: AlertTier
    stop_loss: float
    target_gain: float  # fraction, (neckline - current) / current


def classify(current_price: float, pattern: DoubleBottomPattern) -> AlertTier:
    """First matching rule wins; later rules are not consulted."""
    if current_price < pattern.second_bottom.price * SECOND_BOTTOM_BAND:
        return AlertTier.YELLOW
    if current_price < pattern.neckline * NECKLINE_BAND:
        return AlertTier.ORANGE
    if current_price >= pattern.neckline * NECKLINE_BAND:
        return AlertTier.RED
    return AlertTier.NONE


def build_alert(asset: Asset, pattern: DoubleBottomPattern, confidence: float) -> Alert:
    current = asset.current_price
    if current <= 0:
        raise ComputationError(f"{asset.display_symbol}: cannot compute target gain at price {current}")

    return Alert(
        asset=asset,
        pattern=pattern,
        confidence=confidence,
        tier=classify(current, pattern),
        stop_loss=pattern.second_bottom.price * STOP_LOSS_FACTOR,
        target_gain=(pattern.neckline - current) / current,
    )
