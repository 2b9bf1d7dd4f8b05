"""
Timing utilities for iTEBD runs.

Provides a hierarchical wall-clock timer: nested ``region`` blocks are
recorded under slash-separated names (``"step/gates"``), and a plain-text
report summarizes where the time went.
"""

from __future__ import annotations

import time
import functools
from typing import Dict, List, Optional, Callable, Tuple
from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class TimingStats:
    """Accumulated timings of one region."""
    name: str
    total_time: float = 0.0
    call_count: int = 0
    min_time: float = float('inf')
    max_time: float = 0.0

    @property
    def avg_time(self) -> float:
        if self.call_count == 0:
            return 0.0
        return self.total_time / self.call_count

    def add_sample(self, dt: float) -> None:
        self.total_time += dt
        self.call_count += 1
        self.min_time = min(self.min_time, dt)
        self.max_time = max(self.max_time, dt)


class Timer:
    """
    Hierarchical timer.

    Examples
    --------
    >>> timer = Timer()
    >>> with timer.region("step"):
    ...     with timer.region("gates"):
    ...         pass
    >>> sorted(timer.stats)
    ['step', 'step/gates']
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.stats: Dict[str, TimingStats] = {}
        self._stack: List[Tuple[str, float]] = []

    @contextmanager
    def region(self, name: str):
        """Time the enclosed block under ``name``, nested in any open region."""
        if not self.enabled:
            yield
            return

        full_name = f"{self._stack[-1][0]}/{name}" if self._stack else name
        if full_name not in self.stats:
            self.stats[full_name] = TimingStats(name=full_name)

        start = time.perf_counter()
        self._stack.append((full_name, start))
        try:
            yield
        finally:
            self._stack.pop()
            self.stats[full_name].add_sample(time.perf_counter() - start)

    def time_function(self, name: Optional[str] = None) -> Callable:
        """Decorator timing every call of a function."""
        def decorator(func: Callable) -> Callable:
            region_name = name or func.__name__

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                with self.region(region_name):
                    return func(*args, **kwargs)

            return wrapper

        return decorator

    def reset(self) -> None:
        self.stats.clear()
        self._stack.clear()

    def get_stats(self, name: str) -> Optional[TimingStats]:
        return self.stats.get(name)

    def report(self, sort_by: str = "total") -> str:
        """
        Format the collected timings.

        Parameters
        ----------
        sort_by : str
            "total", "avg", "calls" or "name"
        """
        if not self.stats:
            return "No timing data collected."

        keys = {
            "total": lambda s: -s.total_time,
            "avg": lambda s: -s.avg_time,
            "calls": lambda s: -s.call_count,
            "name": lambda s: s.name,
        }
        if sort_by not in keys:
            raise ValueError(f"Unknown sort key: {sort_by}")
        items = sorted(self.stats.values(), key=keys[sort_by])

        lines = [
            "=" * 72,
            "TIMING REPORT",
            "=" * 72,
            f"{'Region':<32} {'Total (s)':>10} {'Avg (ms)':>10} {'Calls':>8} {'%':>6}",
            "-" * 72,
        ]

        # Top-level regions only, nested ones are already included
        total = sum(s.total_time for s in items if '/' not in s.name)
        for s in items:
            pct = 100 * s.total_time / total if total > 0 else 0
            lines.append(
                f"{s.name:<32} {s.total_time:>10.3f} {s.avg_time * 1000:>10.2f} "
                f"{s.call_count:>8} {pct:>5.1f}%"
            )

        lines.extend([
            "-" * 72,
            f"{'Total':<32} {total:>10.3f}",
            "=" * 72,
        ])
        return "\n".join(lines)
