from __future__ import annotations

import pandas as pd

from patterns.base import Bottom
from utils.errors import ComputationError


def calculate_neckline(prices: pd.Series, first: Bottom, second: Bottom) -> float:
    """Resistance level: highest price from the first bottom up to (excluding) the second."""
    if second.index <= first.index:
        raise ComputationError(
            f"Neckline span is empty: first bottom at {first.index}, second at {second.index}"
        )

    # Adjacent bottoms leave nothing in between
    if second.index - first.index == 1:
        return max(first.price, second.price)

    between = prices.iloc[first.index:second.index]
    return float(between.max())
