from __future__ import annotations

from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

import main
from alerts.notifier import ConsoleNotifier, LogNotifier
from config.timeframes import Timeframe
from helpers import FakeFeed, make_asset

runner = CliRunner()


class TestNotifierOption:
    def test_console(self):
        notifier = main._notifier("console", Timeframe.HOUR_4)
        assert isinstance(notifier, ConsoleNotifier)

    def test_log(self):
        notifier = main._notifier("log", Timeframe.HOUR_12)
        assert isinstance(notifier, LogNotifier)
        assert notifier.timeframe is Timeframe.HOUR_12

    def test_unknown(self):
        with pytest.raises(typer.BadParameter):
            main._notifier("email", Timeframe.HOUR_4)

    def test_run_wires_log_notifier(self, test_settings):
        with patch("main.settings", test_settings), \
                patch("main.DataManager", return_value=FakeFeed([], {})), \
                patch("main.CycleScheduler") as scheduler:
            result = runner.invoke(main.app, ["run", "--notifier", "log"])

        assert result.exit_code == 0
        cycle = scheduler.call_args[0][0]
        assert isinstance(cycle.notifier, LogNotifier)
        scheduler.return_value.run_forever.assert_called_once()

    def test_run_rejects_unknown_notifier(self, test_settings):
        with patch("main.settings", test_settings), \
                patch("main.DataManager", return_value=FakeFeed([], {})), \
                patch("main.CycleScheduler") as scheduler:
            result = runner.invoke(main.app, ["run", "--notifier", "email"])

        assert result.exit_code == 2
        scheduler.assert_not_called()


class TestScanCommand:
    def test_alerts_listed(self, test_settings, double_bottom_prices):
        feed = FakeFeed([make_asset("bitcoin", 120.0)], {"bitcoin": double_bottom_prices})
        with patch("main.settings", test_settings), patch("main.DataManager", return_value=feed):
            result = runner.invoke(main.app, ["scan"])

        assert result.exit_code == 0
        assert "Scanned 1 assets." in result.output
        assert feed.fetched == ["bitcoin"]

    def test_fetch_error_exits_1(self, test_settings, double_bottom_prices):
        assets = [make_asset("bitcoin", 120.0), make_asset("broken", 1.0)]
        feed = FakeFeed(assets, {"bitcoin": double_bottom_prices}, fail_on="broken")
        with patch("main.settings", test_settings), patch("main.DataManager", return_value=feed):
            result = runner.invoke(main.app, ["scan"])

        assert result.exit_code == 1
        assert "Cycle aborted" in result.output
