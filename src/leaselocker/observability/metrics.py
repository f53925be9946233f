"""
Lease activity counters and timings.

Lockers record ``lease.*`` counters (obtained, contention, not_obtained,
renewed, lost, heartbeat_failed) and the ``lease.scan.duration_ms`` timing;
the SQL engine listener records ``db.query.*``.
"""

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Optional


@dataclass
class Timing:
    """Running summary of observed durations in milliseconds."""

    count: int = 0
    total: float = 0.0
    fastest: Optional[float] = None
    slowest: Optional[float] = None

    def record(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.fastest = value if self.fastest is None else min(self.fastest, value)
        self.slowest = value if self.slowest is None else max(self.slowest, value)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "fastest": self.fastest,
            "slowest": self.slowest,
        }


class MetricsRegistry:
    """
    Counters and timings for one or more lockers.

    Lockers not given their own registry share the module-level ``metrics``,
    possibly from several threads, so every access holds the lock.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: defaultdict[str, float] = defaultdict(float)
        self._timings: defaultdict[str, Timing] = defaultdict(Timing)

    def inc_counter(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[name] += amount

    def observe(self, name: str, value: float) -> None:
        with self._lock:
            self._timings[name].record(value)

    def counter_value(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0.0)

    def timing(self, name: str) -> Optional[Timing]:
        with self._lock:
            return self._timings.get(name)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {name: t.as_dict() for name, t in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = MetricsRegistry()
