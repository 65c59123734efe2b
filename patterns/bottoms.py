from __future__ import annotations

import numpy as np
import pandas as pd

from patterns.base import Bottom


def find_bottoms(prices: pd.Series, window: int = 10) -> list[Bottom]:
    """
    Flag local minima: a point is a bottom when its price is <= every price in
    the `window` bars before it and the `window` bars after it.

    Plateaus yield several adjacent bottoms; nothing is deduplicated.
    Series shorter than 2 * window + 1 return an empty list.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    values = np.asarray(prices, dtype=float)
    bottoms: list[Bottom] = []

    for i in range(window, len(values) - window):
        current = values[i]
        left = values[i - window:i]
        right = values[i + 1:i + window + 1]
        if current <= left.min() and current <= right.min():
            bottoms.append(Bottom(
                timestamp=pd.Timestamp(prices.index[i]),
                price=float(current),
                index=i,
            ))

    return bottoms
