from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import pandas as pd

from patterns.base import DoubleBottomPattern
from utils.logger import get_logger

logger = get_logger(__name__)

NEUTRAL_CONFIDENCE = 0.5


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class LearningRecord:
    depth: float
    outcome: Outcome


class ConfidenceEstimator:
    """
    Append-only store of (depth, outcome) records.

    A new pattern is scored as the success ratio among stored records whose
    depth lies strictly within `similarity_window` of the pattern's depth,
    or 0.5 when no record is close enough. Depth is the only feature.

    Appends and scans are serialised by a lock, so `predict` is safe to call
    while another thread is learning.
    """

    def __init__(self, similarity_window: float = 0.10):
        self.similarity_window = similarity_window
        self._records: list[LearningRecord] = []
        self._lock = threading.Lock()

    def learn(self, pattern: DoubleBottomPattern | float, outcome: Outcome | str) -> LearningRecord:
        depth = pattern.depth if isinstance(pattern, DoubleBottomPattern) else float(pattern)
        record = LearningRecord(depth=depth, outcome=_coerce_outcome(outcome))
        with self._lock:
            self._records.append(record)
        logger.debug(f"Learned depth={record.depth:.4f} outcome={record.outcome.value}")
        return record

    def predict(self, pattern: DoubleBottomPattern | float) -> float:
        depth = pattern.depth if isinstance(pattern, DoubleBottomPattern) else float(pattern)
        similar = [r for r in self.records if abs(r.depth - depth) < self.similarity_window]
        if not similar:
            return NEUTRAL_CONFIDENCE
        successes = sum(1 for r in similar if r.outcome is Outcome.SUCCESS)
        return successes / len(similar)

    @property
    def records(self) -> tuple[LearningRecord, ...]:
        with self._lock:
            return tuple(self._records)

    @property
    def success_rate(self) -> float | None:
        """Overall fraction of successful outcomes, or None before anything is learned."""
        records = self.records
        if not records:
            return None
        return sum(1 for r in records if r.outcome is Outcome.SUCCESS) / len(records)

    def load_outcomes(self, path: str | Path) -> int:
        """Learn every row of a CSV outcome feed with columns depth,outcome."""
        df = pd.read_csv(path)
        missing = {"depth", "outcome"} - set(df.columns)
        if missing:
            raise ValueError(f"Outcome file {path} is missing columns: {sorted(missing)}")

        for row in df.itertuples(index=False):
            self.learn(float(row.depth), str(row.outcome).strip())
        logger.info(f"Loaded {len(df)} outcomes from {path}")
        return len(df)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _coerce_outcome(outcome: Outcome | str) -> Outcome:
    if isinstance(outcome, Outcome):
        return outcome
    try:
        return Outcome(outcome.lower())
    except ValueError:
        raise ValueError(
            f"Unknown outcome: {outcome}. Available: {[o.value for o in Outcome]}"
        ) from None
