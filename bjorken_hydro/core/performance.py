"""
Performance monitoring utilities for Bjorken flow evolution.

Hierarchical wall-clock timing of named operations (run driver, evolution
loop, kinetic-theory quadratures) and cache statistics for the equation of
state inversion.
"""

import functools
import time
from collections import Counter, defaultdict
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class OperationStats:
    """Durations of one named operation and of the operations nested in it."""

    durations: list[float] = field(default_factory=list)
    children: dict[str, list[float]] = field(default_factory=lambda: defaultdict(list))
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.durations)

    @property
    def total(self) -> float:
        return float(sum(self.durations))


class EvolutionProfiler:
    """
    Profiler with hierarchical timing and call counting.

    Nested operations are attributed to the operation that was active when
    they started, so the report breaks each operation down into its callees.
    """

    def __init__(self) -> None:
        self._active: list[str] = []
        self.operations: dict[str, OperationStats] = defaultdict(OperationStats)
        self.cache_counts: dict[str, Counter] = defaultdict(Counter)

    @property
    def operation_counts(self) -> dict[str, int]:
        return {name: stats.count for name, stats in self.operations.items()}

    @contextmanager
    def timed(
        self, operation_name: str, metadata: dict[str, Any] | None = None
    ) -> Generator[None, None, None]:
        """
        Time the enclosed block under operation_name.

        Args:
            operation_name: Name of the operation to profile
            metadata: Optional metadata about the operation (step count, closure)
        """
        parent = self._active[-1] if self._active else None
        if metadata:
            self.operations[operation_name].metadata.update(metadata)

        self._active.append(operation_name)
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self._active.pop()
            self.operations[operation_name].durations.append(elapsed)
            if parent is not None:
                self.operations[parent].children[operation_name].append(elapsed)

    def record_cache_hit(self, cache_name: str) -> None:
        self.cache_counts[cache_name]["hits"] += 1

    def record_cache_miss(self, cache_name: str) -> None:
        self.cache_counts[cache_name]["misses"] += 1

    def report(self) -> dict[str, Any]:
        """
        Summary, per-parent timing breakdown and cache hit rates.

        Returns:
            Dictionary with keys 'summary', 'hierarchical_timing' and
            'cache_analysis'
        """
        by_total = sorted(self.operations.items(), key=lambda item: item[1].total, reverse=True)
        summary = {
            "total_operations": sum(stats.count for stats in self.operations.values()),
            "unique_operations": len(self.operations),
            "slowest_operations": [(name, stats.total) for name, stats in by_total[:5]],
        }

        hierarchy = {}
        for name, stats in self.operations.items():
            if not stats.children:
                continue
            children = {
                child: {
                    "total_time": sum(times),
                    "percentage": 100.0 * sum(times) / stats.total if stats.total > 0 else 0.0,
                    "call_count": len(times),
                    "avg_time": float(np.mean(times)),
                }
                for child, times in stats.children.items()
            }
            hierarchy[name] = {
                "parent_total_time": stats.total,
                "call_count": stats.count,
                "metadata": dict(stats.metadata),
                "children": dict(
                    sorted(children.items(), key=lambda item: item[1]["total_time"], reverse=True)
                ),
            }

        caches = {}
        for cache_name, counts in self.cache_counts.items():
            lookups = counts["hits"] + counts["misses"]
            caches[cache_name] = {
                "hits": counts["hits"],
                "misses": counts["misses"],
                "hit_rate": counts["hits"] / lookups if lookups else 0.0,
            }

        return {"summary": summary, "hierarchical_timing": hierarchy, "cache_analysis": caches}

    def reset(self) -> None:
        self._active.clear()
        self.operations.clear()
        self.cache_counts.clear()


_profiler = EvolutionProfiler()


def get_profiler() -> EvolutionProfiler:
    """Process-wide profiler instance."""
    return _profiler


def monitor_performance(operation_name: str) -> Callable[[Callable], Callable]:
    """
    Decorator for monitoring performance of an operation.

    Args:
        operation_name: Name to use for tracking this operation

    Returns:
        Decorator function
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with _profiler.timed(operation_name):
                return func(*args, **kwargs)

        return wrapper

    return decorator


def profile_operation(operation_name: str, metadata: dict[str, Any] | None = None):
    """Context manager timing a block under operation_name."""
    return _profiler.timed(operation_name, metadata)


def performance_report() -> dict[str, Any]:
    return _profiler.report()


def reset_performance_stats() -> None:
    """Reset all performance monitoring statistics."""
    _profiler.reset()
