from __future__ import annotations

import pandas as pd
import pytest

from alerts.notifier import CollectingNotifier
from config.settings import AppSettings
from helpers import w_series


@pytest.fixture
def double_bottom_prices() -> pd.Series:
    # 4h bars: bottoms 180 bars (30 days) apart, 108 then 100, neckline 130
    return w_series(n=300, first_idx=60, second_idx=240, first_price=108.0, second_price=100.0, peak_price=130.0)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def test_settings() -> AppSettings:
    return AppSettings(_env_file=None)
