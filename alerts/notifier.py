from __future__ import annotations

from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel

from alerts.classifier import Alert, AlertTier
from config.timeframes import Timeframe
from utils.logger import get_logger

logger = get_logger(__name__)

_TIER_STYLE = {
    AlertTier.YELLOW: "yellow",
    AlertTier.ORANGE: "dark_orange",
    AlertTier.RED: "red",
    AlertTier.NONE: "white",
}


def format_alert(alert: Alert, timeframe: Timeframe = Timeframe.HOUR_4) -> str:
    asset, pattern = alert.asset, alert.pattern
    first, second = pattern.first_bottom, pattern.second_bottom
    return "\n".join([
        f"🚨 {alert.tier.marker} {alert.tier.name} ALERT - {asset.display_symbol}",
        alert.tier.label,
        "",
        f"📊 Current Price: ${asset.current_price:.4f}",
        f"📈 Market Cap: ${asset.market_cap / 1_000_000:.2f}M",
        f"💹 Volume 24h: ${asset.volume_24h / 1_000_000:.2f}M",
        f"⏱️ Timeframe: {timeframe.value}",
        f"📍 First Bottom: ${first.price:.4f} ({first.timestamp:%Y-%m-%d})",
        f"📍 Second Bottom: ${second.price:.4f} ({second.timestamp:%Y-%m-%d})",
        f"🎯 Breakout Target: ${pattern.neckline:.4f}",
        f"📉 Suggested Stop Loss: ${alert.stop_loss:.4f}",
        f"⚡ Upside Potential: {alert.target_gain * 100:.2f}%",
        f"🤖 Confidence: {alert.confidence * 100:.1f}%",
    ])


class BaseNotifier(ABC):
    """Delivers alerts; the detection cycle does not depend on delivery succeeding."""

    @abstractmethod
    def notify(self, alert: Alert) -> None:
        ...


class ConsoleNotifier(BaseNotifier):
    def __init__(self, console: Console | None = None, timeframe: Timeframe = Timeframe.HOUR_4):
        self.console = console or Console()
        self.timeframe = timeframe

    def notify(self, alert: Alert) -> None:
        self.console.print(Panel(
            format_alert(alert, self.timeframe),
            title=f"Double Bottom: {alert.asset.display_symbol}",
            border_style=_TIER_STYLE[alert.tier],
        ))


class LogNotifier(BaseNotifier):
    def __init__(self, timeframe: Timeframe = Timeframe.HOUR_4):
        self.timeframe = timeframe

    def notify(self, alert: Alert) -> None:
        logger.info(
            f"{alert.tier.name} alert for {alert.asset.display_symbol}",
            extra={"extra_data": {
                "neckline": round(alert.pattern.neckline, 6),
                "depth": round(alert.pattern.depth, 4),
                "confidence": round(alert.confidence, 3),
            }},
        )
        logger.debug(format_alert(alert, self.timeframe))


class CollectingNotifier(BaseNotifier):
    """Keeps alerts in memory."""

    def __init__(self):
        self.alerts: list[Alert] = []

    def notify(self, alert: Alert) -> None:
        self.alerts.append(alert)
