from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Union

MetricValue = Union[int, float, Decimal, str]


def render_value(value: MetricValue) -> str:
    """Render a metric value as its wire token.

    Floats use the shortest repr that round-trips, strings are assumed to be
    pre-formatted and pass through untouched.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return repr(value)
    return str(value)


@dataclass(frozen=True)
class Metric:
    path: str = ""
    value: MetricValue = 0
    # None and datetime.min both mean "not provided"; neither is a valid instant.
    timestamp: datetime | None = None

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp is not None and self.timestamp.replace(tzinfo=None) != datetime.min

    @property
    def unix_seconds(self) -> int:
        if not self.has_timestamp:
            raise ValueError("metric has no timestamp")
        return math.floor(self.timestamp.timestamp())

    def __str__(self) -> str:
        if not self.has_timestamp:
            ts = "<unset>"
        else:
            try:
                ts = self.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            except (ValueError, OverflowError, OSError):
                ts = self.timestamp.isoformat()
        return f"{self.path} {render_value(self.value)} {ts}"
