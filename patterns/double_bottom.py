from __future__ import annotations

from itertools import combinations

import pandas as pd

from patterns.base import Bottom, DoubleBottomPattern, PairingPolicy
from patterns.neckline import calculate_neckline
from utils.errors import ComputationError

_DAY = pd.Timedelta(days=1)


def bottom_depth(first: Bottom, second: Bottom) -> float:
    """Relative price difference between two troughs, measured against the first."""
    if first.price <= 0:
        raise ComputationError(f"Cannot compute depth against a non-positive price ({first.price})")
    return abs(first.price - second.price) / first.price


def timespan_days(first: Bottom, second: Bottom) -> float:
    return (second.timestamp - first.timestamp) / _DAY


class MostRecentPairing(PairingPolicy):
    """Only the last two detected bottoms are ever considered."""

    name = "most_recent"

    def candidates(self, bottoms: list[Bottom]) -> list[tuple[Bottom, Bottom]]:
        if len(bottoms) < 2:
            return []
        return [(bottoms[-2], bottoms[-1])]


class BestMatchPairing(PairingPolicy):
    """Every ordered pair, tightest depth first; ties favour the most recent pair."""

    name = "best_match"

    def candidates(self, bottoms: list[Bottom]) -> list[tuple[Bottom, Bottom]]:
        pairs = list(combinations(bottoms, 2))
        return sorted(pairs, key=lambda p: (bottom_depth(*p), -p[1].index, -p[0].index))


PAIRING_POLICIES: dict[str, type[PairingPolicy]] = {
    cls.name: cls for cls in (MostRecentPairing, BestMatchPairing)
}


def get_pairing_policy(name: str) -> PairingPolicy:
    if name not in PAIRING_POLICIES:
        raise ValueError(
            f"Unknown pairing policy: {name}. Available: {list(PAIRING_POLICIES.keys())}"
        )
    return PAIRING_POLICIES[name]()


class DoubleBottomValidator:
    """Pairs detected bottoms and checks the price-similarity and spacing constraints."""

    def __init__(
        self,
        tolerance: float = 0.20,
        min_days: float = 21.0,
        max_days: float = 42.0,
        pairing: PairingPolicy | None = None,
    ):
        self.tolerance = tolerance
        self.min_days = min_days
        self.max_days = max_days
        self.pairing = pairing or MostRecentPairing()

    def validate(self, prices: pd.Series, bottoms: list[Bottom]) -> DoubleBottomPattern | None:
        for first, second in self.pairing.candidates(bottoms):
            pattern = self._check_pair(prices, first, second)
            if pattern is not None:
                return pattern
        return None

    def _check_pair(
        self, prices: pd.Series, first: Bottom, second: Bottom
    ) -> DoubleBottomPattern | None:
        if second.timestamp <= first.timestamp:
            return None

        depth = bottom_depth(first, second)
        if depth > self.tolerance:
            return None

        span = timespan_days(first, second)
        if span < self.min_days or span > self.max_days:
            return None

        return DoubleBottomPattern(
            first_bottom=first,
            second_bottom=second,
            neckline=calculate_neckline(prices, first, second),
            depth=depth,
            timespan_days=span,
        )
