from __future__ import annotations

import numpy as np
import pandas as pd

from data.data_manager import BaseDataFeed
from data.models import Asset
from utils.errors import DataFetchError

BAR = pd.Timedelta(hours=4)
START = pd.Timestamp("2024-01-01")


def make_series(values, start: pd.Timestamp = START, freq: pd.Timedelta = BAR) -> pd.Series:
    index = pd.DatetimeIndex([start + i * freq for i in range(len(values))], name="timestamp")
    return pd.Series(np.asarray(values, dtype=float), index=index, name="price")


def w_series(
    n: int,
    first_idx: int,
    second_idx: int,
    first_price: float,
    second_price: float,
    peak_price: float,
    start_price: float = 150.0,
    end_price: float = 140.0,
) -> pd.Series:
    """Piecewise-linear W: strictly monotone legs, so the only bottoms are the two troughs."""
    peak_idx = (first_idx + second_idx) // 2
    knots = [0, first_idx, peak_idx, second_idx, n - 1]
    levels = [start_price, first_price, peak_price, second_price, end_price]
    return make_series(np.interp(np.arange(n), knots, levels))


def make_asset(coin_id: str, price: float, market_cap: float = 5e8, volume: float = 5e7) -> Asset:
    return Asset(
        id=coin_id,
        symbol=coin_id[:3],
        name=coin_id.title(),
        current_price=price,
        market_cap=market_cap,
        volume_24h=volume,
    )


class FakeFeed(BaseDataFeed):
    def __init__(self, assets: list[Asset], histories: dict[str, pd.Series], fail_on: str | None = None):
        self.assets = assets
        self.histories = histories
        self.fail_on = fail_on
        self.fetched: list[str] = []

    def list_eligible_assets(self, min_volume: float, min_market_cap: float) -> list[Asset]:
        return [a for a in self.assets if a.volume_24h >= min_volume and a.market_cap >= min_market_cap]

    def price_history(self, asset: Asset, window_days: int, interval_hours: int) -> pd.Series:
        self.fetched.append(asset.id)
        if asset.id == self.fail_on:
            raise DataFetchError(f"provider down for {asset.id}")
        return self.histories[asset.id]
