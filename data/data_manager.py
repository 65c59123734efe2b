from __future__ import annotations

from abc import ABC, abstractmethod

import pandas as pd

from config.settings import AppSettings, settings as default_settings
from config.timeframes import Timeframe
from data.fetcher_coingecko import CoinGeckoFetcher
from data.fetcher_yahoo import YahooFetcher
from data.models import Asset


class BaseDataFeed(ABC):
    """Source of eligible assets and their price histories."""

    @abstractmethod
    def list_eligible_assets(self, min_volume: float, min_market_cap: float) -> list[Asset]:
        ...

    @abstractmethod
    def price_history(self, asset: Asset, window_days: int, interval_hours: int) -> pd.Series:
        ...


class DataManager(BaseDataFeed):
    """Unified data access. Listings from CoinGecko, prices from the configured source."""

    def __init__(
        self,
        config: AppSettings | None = None,
        coingecko: CoinGeckoFetcher | None = None,
        yahoo: YahooFetcher | None = None,
    ):
        self.config = config or default_settings
        self.coingecko = coingecko or CoinGeckoFetcher(
            base_url=self.config.coingecko_base_url,
            api_key=self.config.coingecko_api_key,
            vs_currency=self.config.vs_currency,
            per_page=self.config.markets_per_page,
            timeout=self.config.http_timeout_seconds,
        )
        self.yahoo = yahoo or YahooFetcher()

    def list_eligible_assets(self, min_volume: float, min_market_cap: float) -> list[Asset]:
        return [
            a for a in self.coingecko.list_markets()
            if a.volume_24h >= min_volume and a.market_cap >= min_market_cap
        ]

    def price_history(self, asset: Asset, window_days: int, interval_hours: int) -> pd.Series:
        tf = Timeframe.from_hours(interval_hours)
        if self.config.price_source == "yahoo":
            return self.yahoo.fetch_prices(asset.symbol, window_days, tf)
        return self.coingecko.fetch_prices(asset.id, window_days, tf)
