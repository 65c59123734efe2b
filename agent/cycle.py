from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from alerts.classifier import Alert, build_alert
from alerts.notifier import BaseNotifier
from config.settings import AppSettings, settings as default_settings
from data.data_manager import BaseDataFeed
from data.models import Asset
from learning.confidence import ConfidenceEstimator
from patterns.double_bottom import DoubleBottomValidator, get_pairing_policy
from patterns.scanner import DoubleBottomAnalysis, scan_double_bottom
from utils.logger import get_cycle_id, get_logger, log_cycle

logger = get_logger(__name__)


@dataclass
class CycleReport:
    cycle_id: str
    started_at: datetime
    assets_scanned: int = 0
    alerts: list[Alert] = field(default_factory=list)


class DetectionCycle:
    """
    One pass over every eligible asset: fetch prices, detect, score, classify, notify.

    At most one pass runs at a time; an invocation that finds another pass in
    flight is skipped and returns None. Any error aborts the whole pass.
    """

    def __init__(
        self,
        feed: BaseDataFeed,
        notifier: BaseNotifier,
        estimator: ConfidenceEstimator,
        config: AppSettings | None = None,
    ):
        self.feed = feed
        self.notifier = notifier
        self.estimator = estimator
        self.config = config or default_settings
        self.validator = DoubleBottomValidator(
            tolerance=self.config.tolerance,
            min_days=self.config.min_days_between_bottoms,
            max_days=self.config.max_days_between_bottoms,
            pairing=get_pairing_policy(self.config.pairing_policy),
        )
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run(self) -> CycleReport | None:
        if not self._lock.acquire(blocking=False):
            logger.warning("Detection cycle already in progress, skipping this run")
            return None
        try:
            return self._run()
        finally:
            self._lock.release()

    @log_cycle
    def _run(self) -> CycleReport:
        report = CycleReport(cycle_id=get_cycle_id(), started_at=datetime.now(timezone.utc))
        assets = self.feed.list_eligible_assets(
            self.config.min_volume_usd, self.config.min_market_cap_usd
        )
        logger.info(f"Scanning {len(assets)} eligible assets")

        for asset in assets:
            analysis = self.analyze(asset)
            report.assets_scanned += 1
            if not analysis.has_double_bottom:
                continue

            confidence = self.estimator.predict(analysis.pattern)
            alert = build_alert(asset, analysis.pattern, confidence)
            logger.info(
                f"Double bottom on {asset.display_symbol}: {alert.tier.name} "
                f"(depth={analysis.pattern.depth:.4f}, confidence={confidence:.2f})"
            )
            self.notifier.notify(alert)
            report.alerts.append(alert)

        logger.info(f"Cycle found {len(report.alerts)} alerts across {report.assets_scanned} assets")
        return report

    def analyze(self, asset: Asset) -> DoubleBottomAnalysis:
        prices = self.feed.price_history(
            asset, self.config.history_days, self.config.interval_hours
        )
        return scan_double_bottom(prices, self.validator, window=self.config.bottom_window)
