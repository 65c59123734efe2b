from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pandas as pd
import yfinance as yf

from config.timeframes import Timeframe
from patterns.base import empty_price_series, validate_price_series
from utils.errors import DataFetchError


class YahooFetcher:
    """Crypto price history from Yahoo Finance (tickers like BTC-USD)."""

    # yfinance limits hourly bars to the last 730 days
    MAX_HOURLY_DAYS = 730

    def ticker_for(self, symbol: str) -> str:
        return f"{symbol.upper()}-USD"

    def fetch_prices(self, symbol: str, days: int, timeframe: Timeframe) -> pd.Series:
        """
        Fetch closing prices for the last `days` days. Hourly bars are pulled and
        resampled to `timeframe`, since Yahoo has no native 4h interval.
        """
        days = min(days, self.MAX_HOURLY_DAYS)
        end = datetime.now(timezone.utc)
        start = end - timedelta(days=days)
        ticker = self.ticker_for(symbol)

        try:
            df = yf.Ticker(ticker).history(
                start=start.strftime("%Y-%m-%d"),
                end=(end + timedelta(days=1)).strftime("%Y-%m-%d"),
                interval="1h",
                auto_adjust=True,
            )
        except Exception as exc:
            raise DataFetchError(f"Yahoo download failed for {ticker}: {exc}") from exc

        if df.empty:
            return empty_price_series()

        df.columns = [c.lower() for c in df.columns]
        prices = df["close"].astype(float)
        if prices.index.tz is not None:
            prices.index = prices.index.tz_convert("UTC").tz_localize(None)
        prices = prices[~prices.index.duplicated(keep="last")].sort_index()
        prices = prices.resample(timeframe.resample_rule).last().dropna()
        prices = validate_price_series(prices)
        prices.attrs["symbol"] = ticker
        prices.attrs["timeframe"] = timeframe.value
        return prices
