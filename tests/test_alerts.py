from __future__ import annotations

import io

import pandas as pd
import pytest
from rich.console import Console

from alerts.classifier import AlertTier, build_alert, classify
from alerts.notifier import CollectingNotifier, ConsoleNotifier, LogNotifier, format_alert
from config.timeframes import Timeframe
from patterns.base import Bottom, DoubleBottomPattern
from helpers import START, make_asset
from utils.errors import ComputationError


def _pattern(second_price: float = 90.0, neckline: float = 100.0) -> DoubleBottomPattern:
    first = Bottom(timestamp=START, price=92.0, index=10)
    second = Bottom(timestamp=START + pd.Timedelta(days=30), price=second_price, index=190)
    return DoubleBottomPattern(
        first_bottom=first,
        second_bottom=second,
        neckline=neckline,
        depth=abs(92.0 - second_price) / 92.0,
        timespan_days=30.0,
    )


class TestClassify:
    def test_yellow_near_second_bottom(self):
        assert classify(94.0, _pattern()) is AlertTier.YELLOW

    def test_yellow_takes_priority_over_orange(self):
        # 93 < 94.5 (yellow) and 93 < 95 (orange): first rule wins
        assert classify(93.0, _pattern()) is AlertTier.YELLOW

    def test_orange_between_bands(self):
        assert classify(94.8, _pattern()) is AlertTier.ORANGE

    def test_red_at_neckline_band(self):
        assert classify(95.0, _pattern()) is AlertTier.RED
        assert classify(130.0, _pattern()) is AlertTier.RED

    def test_yellow_even_when_above_neckline_band(self):
        # overlapping bands: a second bottom close to the neckline keeps YELLOW
        assert classify(99.0, _pattern(second_price=95.0, neckline=100.0)) is AlertTier.YELLOW

    def test_nan_price_matches_nothing(self):
        assert classify(float("nan"), _pattern()) is AlertTier.NONE


class TestBuildAlert:
    def test_stop_loss_and_target_gain(self):
        alert = build_alert(make_asset("bitcoin", 80.0), _pattern(), confidence=0.75)
        assert alert.tier is AlertTier.YELLOW
        assert alert.stop_loss == pytest.approx(85.5)
        assert alert.target_gain == pytest.approx(0.25)
        assert alert.confidence == 0.75

    def test_zero_price_raises(self):
        with pytest.raises(ComputationError):
            build_alert(make_asset("bitcoin", 0.0), _pattern(), confidence=0.5)

    def test_pure(self):
        asset = make_asset("bitcoin", 96.0)
        assert build_alert(asset, _pattern(), 0.5) == build_alert(asset, _pattern(), 0.5)


class TestNotifiers:
    def test_format_alert(self):
        alert = build_alert(make_asset("ethereum", 96.0, market_cap=2.5e9, volume=1.2e8), _pattern(), 0.6)
        text = format_alert(alert, Timeframe.HOUR_4)
        assert "RED ALERT - ETH" in text
        assert "Breakout imminent" in text
        assert "$2500.00M" in text
        assert "$120.00M" in text
        assert "Timeframe: 4h" in text
        assert "(2024-01-31)" in text
        assert "Suggested Stop Loss: $85.5000" in text
        assert "Upside Potential: 4.17%" in text
        assert "Confidence: 60.0%" in text

    def test_console_notifier_prints_panel(self):
        buffer = io.StringIO()
        notifier = ConsoleNotifier(Console(file=buffer, width=100))
        notifier.notify(build_alert(make_asset("solana", 94.0), _pattern(), 0.5))
        out = buffer.getvalue()
        assert "Double Bottom: SOL" in out
        assert "YELLOW ALERT" in out

    def test_log_notifier(self, caplog):
        with caplog.at_level("INFO", logger="alerts.notifier"):
            LogNotifier().notify(build_alert(make_asset("solana", 94.8), _pattern(), 0.5))
        assert "ORANGE alert for SOL" in caplog.text

    def test_collecting_notifier(self):
        notifier = CollectingNotifier()
        alert = build_alert(make_asset("solana", 94.8), _pattern(), 0.5)
        notifier.notify(alert)
        assert notifier.alerts == [alert]
