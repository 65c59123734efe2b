from __future__ import annotations

import pytest
from pydantic import ValidationError

from config.settings import AppSettings
from config.timeframes import Timeframe


class TestAppSettings:
    def test_defaults(self, test_settings):
        assert test_settings.min_volume_usd == 1_000_000
        assert test_settings.min_market_cap_usd == 40_000_000
        assert test_settings.tolerance == 0.20
        assert (test_settings.min_days_between_bottoms, test_settings.max_days_between_bottoms) == (21, 42)
        assert test_settings.history_days == 60
        assert test_settings.interval_hours == 4
        assert test_settings.cycle_interval_seconds == 1800
        assert test_settings.pairing_policy == "most_recent"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TOLERANCE", "0.1")
        monkeypatch.setenv("MAX_DAYS_BETWEEN_BOTTOMS", "50")
        cfg = AppSettings(_env_file=None)
        assert cfg.tolerance == 0.1
        assert cfg.max_days_between_bottoms == 50

    @pytest.mark.parametrize("field,value", [
        ("tolerance", 0.0),
        ("tolerance", 1.5),
        ("bottom_window", 0),
        ("interval_hours", 0),
        ("interval_hours", 2),
        ("cycle_interval_minutes", -1),
        ("pairing_policy", "random"),
        ("price_source", "bloomberg"),
    ])
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, **{field: value})

    def test_rejects_inverted_spacing(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, min_days_between_bottoms=30, max_days_between_bottoms=20)


class TestTimeframe:
    def test_from_hours(self):
        assert Timeframe.from_hours(4) is Timeframe.HOUR_4
        assert Timeframe.DAILY.resample_rule == "24h"

    def test_unknown_hours(self):
        with pytest.raises(ValueError):
            Timeframe.from_hours(3)

    def test_timeframe_follows_interval(self):
        assert AppSettings(_env_file=None, interval_hours=12).timeframe is Timeframe.HOUR_12
