from enum import Enum


class Timeframe(Enum):
    HOUR_1 = "1h"
    HOUR_4 = "4h"
    HOUR_12 = "12h"
    DAILY = "1d"

    @property
    def hours(self) -> int:
        mapping = {"1h": 1, "4h": 4, "12h": 12, "1d": 24}
        return mapping[self.value]

    @property
    def resample_rule(self) -> str:
        return f"{self.hours}h"

    @classmethod
    def from_hours(cls, hours: int) -> "Timeframe":
        for tf in cls:
            if tf.hours == hours:
                return tf
        raise ValueError(f"Unsupported interval: {hours}h. Available: {[tf.value for tf in cls]}")
