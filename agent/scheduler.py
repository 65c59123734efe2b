from __future__ import annotations

import threading
import time

from agent.cycle import CycleReport, DetectionCycle
from utils.logger import get_logger

logger = get_logger(__name__)


class CycleScheduler:
    """Runs a detection cycle immediately, then every `interval_seconds`."""

    def __init__(self, cycle: DetectionCycle, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.cycle = cycle
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    def tick(self) -> CycleReport | None:
        """Run one cycle; errors end the cycle but never the scheduler."""
        self.ticks += 1
        try:
            return self.cycle.run()
        except Exception:
            logger.exception(f"Detection cycle #{self.ticks} aborted")
            return None

    def run_forever(self) -> None:
        next_run = time.monotonic()
        while not self._stop.is_set():
            self.tick()
            next_run += self.interval_seconds
            now = time.monotonic()
            if next_run <= now:
                # Overran one or more periods; drop the missed ticks
                skipped = int((now - next_run) // self.interval_seconds) + 1
                logger.warning(f"Cycle overran its period, skipping {skipped} tick(s)")
                next_run += skipped * self.interval_seconds
            self._stop.wait(next_run - now)
        logger.info("Scheduler stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Scheduler already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="cycle-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
