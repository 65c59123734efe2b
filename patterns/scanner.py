from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from patterns.base import Bottom, DoubleBottomPattern
from patterns.bottoms import find_bottoms
from patterns.double_bottom import DoubleBottomValidator


@dataclass
class DoubleBottomAnalysis:
    bottoms: list[Bottom] = field(default_factory=list)
    pattern: DoubleBottomPattern | None = None

    @property
    def has_double_bottom(self) -> bool:
        return self.pattern is not None


def scan_double_bottom(
    prices: pd.Series,
    validator: DoubleBottomValidator | None = None,
    window: int = 10,
) -> DoubleBottomAnalysis:
    """Detect bottoms in a price series and validate them as a double bottom."""
    validator = validator or DoubleBottomValidator()
    bottoms = find_bottoms(prices, window=window)
    return DoubleBottomAnalysis(bottoms=bottoms, pattern=validator.validate(prices, bottoms))
