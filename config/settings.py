from __future__ import annotations

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

from config.timeframes import Timeframe


_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Paths
    project_root: Path = _PROJECT_ROOT
    outcomes_file: str = ""  # optional CSV (depth,outcome) seeding the confidence estimator

    # Eligibility filters
    min_volume_usd: float = 1_000_000.0
    min_market_cap_usd: float = 40_000_000.0

    # Pattern detection
    tolerance: float = 0.20
    min_days_between_bottoms: float = 21.0
    max_days_between_bottoms: float = 42.0
    bottom_window: int = 10
    pairing_policy: str = "most_recent"  # "most_recent" or "best_match"
    similarity_window: float = 0.10

    # Price history
    history_days: int = 60
    interval_hours: int = 4
    price_source: str = "coingecko"  # "coingecko" or "yahoo"

    # Scheduling
    cycle_interval_minutes: float = 30.0

    # CoinGecko
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: str = ""
    vs_currency: str = "usd"
    markets_per_page: int = 250
    http_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "json" or "text"
    log_file: str = ""  # empty = storage/logs/double_bottom_agent.log

    @field_validator("tolerance")
    @classmethod
    def _check_tolerance(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("tolerance must be in (0, 1]")
        return v

    @field_validator("bottom_window", "history_days", "markets_per_page")
    @classmethod
    def _check_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("interval_hours")
    @classmethod
    def _check_interval(cls, v: int) -> int:
        Timeframe.from_hours(v)
        return v

    @field_validator("cycle_interval_minutes", "similarity_window", "http_timeout_seconds")
    @classmethod
    def _check_positive_float(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("pairing_policy")
    @classmethod
    def _check_pairing(cls, v: str) -> str:
        if v not in ("most_recent", "best_match"):
            raise ValueError(f"Unknown pairing policy: {v}")
        return v

    @field_validator("price_source")
    @classmethod
    def _check_source(cls, v: str) -> str:
        if v not in ("coingecko", "yahoo"):
            raise ValueError(f"Unknown price source: {v}")
        return v

    @model_validator(mode="after")
    def _check_spacing(self) -> "AppSettings":
        if self.min_days_between_bottoms > self.max_days_between_bottoms:
            raise ValueError("min_days_between_bottoms must not exceed max_days_between_bottoms")
        return self

    @property
    def timeframe(self) -> Timeframe:
        return Timeframe.from_hours(self.interval_hours)

    @property
    def cycle_interval_seconds(self) -> float:
        return self.cycle_interval_minutes * 60


settings = AppSettings()
