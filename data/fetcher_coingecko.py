from __future__ import annotations

from typing import Any

import pandas as pd
import requests

from config.timeframes import Timeframe
from data.models import Asset
from patterns.base import empty_price_series, validate_price_series
from utils.errors import DataFetchError, DataFormatError
from utils.logger import get_logger

logger = get_logger(__name__)


class CoinGeckoFetcher:
    """Market listings and price history from the CoinGecko public API."""

    BASE_URL = "https://api.coingecko.com/api/v3"
    MARKETS_PATH = "/coins/markets"
    MARKET_CHART_PATH = "/coins/{coin_id}/market_chart"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str = "",
        vs_currency: str = "usd",
        per_page: int = 250,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.vs_currency = vs_currency
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["x-cg-demo-api-key"] = api_key

    def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise DataFetchError(f"Error calling {path}: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DataFormatError(f"Non-JSON response from {path}") from exc

    def list_markets(self) -> list[Asset]:
        """Top coins by 24h volume. Entries with missing figures are dropped."""
        payload = self._request(self.MARKETS_PATH, params={
            "vs_currency": self.vs_currency,
            "order": "volume_desc",
            "per_page": self.per_page,
        })
        if not isinstance(payload, list):
            raise DataFormatError(f"Expected a list from {self.MARKETS_PATH}, got {type(payload).__name__}")

        assets: list[Asset] = []
        for entry in payload:
            try:
                figures = (entry["current_price"], entry["market_cap"], entry["total_volume"])
                if any(v is None for v in figures):
                    continue
                assets.append(Asset(
                    id=entry["id"],
                    symbol=entry["symbol"],
                    name=entry.get("name", entry["id"]),
                    current_price=float(figures[0]),
                    market_cap=float(figures[1]),
                    volume_24h=float(figures[2]),
                ))
            except (KeyError, TypeError, ValueError) as exc:
                raise DataFormatError(f"Malformed market entry: {exc!r}") from exc

        logger.debug(f"Fetched {len(assets)} markets")
        return assets

    def fetch_prices(self, coin_id: str, days: int, timeframe: Timeframe) -> pd.Series:
        """Price series for `days` of history, resampled to `timeframe` bars (last price per bar)."""
        payload = self._request(
            self.MARKET_CHART_PATH.format(coin_id=coin_id),
            params={"vs_currency": self.vs_currency, "days": days},
        )
        if not isinstance(payload, dict) or "prices" not in payload:
            raise DataFormatError(f"Missing 'prices' in market chart for {coin_id}")

        try:
            raw = pd.DataFrame(payload["prices"], columns=["timestamp", "price"])
        except ValueError as exc:
            raise DataFormatError(f"Malformed price rows for {coin_id}: {exc}") from exc

        if raw.empty:
            return empty_price_series()

        try:
            raw["timestamp"] = pd.to_datetime(raw["timestamp"], unit="ms")
            prices = raw.set_index("timestamp")["price"].astype(float)
        except (TypeError, ValueError) as exc:
            raise DataFormatError(f"Non-numeric price rows for {coin_id}: {exc}") from exc

        prices = prices[~prices.index.duplicated(keep="last")].sort_index()
        prices = prices.resample(timeframe.resample_rule).last().dropna()
        prices = validate_price_series(prices)
        prices.attrs["symbol"] = coin_id
        prices.attrs["timeframe"] = timeframe.value
        return prices
