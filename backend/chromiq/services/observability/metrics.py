"""
Observability metrics collection for the ChromiQ color engine.

Times engine operations (histogram extraction, quantization, clustering,
regional picks), records process memory and keeps per-operation aggregates.
Metrics are side information only: they never change engine results.
"""

import inspect
import time
import threading
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from functools import wraps
from typing import Dict, Any, Optional, List

import numpy as np
import psutil
from loguru import logger

from chromiq.config import config


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single engine operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    pixel_count: int
    color_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


class MetricsCollector:
    """Thread-safe metrics collector for engine operations."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._durations = defaultdict(lambda: deque(maxlen=100))
        self._memory = defaultdict(lambda: deque(maxlen=100))

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1

            if metrics.error:
                self._error_counts[metrics.operation_name] += 1

            self._durations[metrics.operation_name].append(metrics.duration_ms)
            self._memory[metrics.operation_name].append(metrics.memory_usage_mb)

    def _operation_stats_locked(self, operation_name: str) -> Dict[str, Any]:
        durations = list(self._durations.get(operation_name, ()))
        if not durations:
            return {}
        memory_usage = list(self._memory[operation_name])
        calls = self._operation_counts[operation_name]
        errors = self._error_counts[operation_name]

        return {
            'operation_name': operation_name,
            'total_calls': calls,
            'error_count': errors,
            'error_rate': errors / max(1, calls),
            'duration_stats': {
                'mean_ms': float(np.mean(durations)),
                'median_ms': float(np.median(durations)),
                'p95_ms': float(np.percentile(durations, 95)),
                'min_ms': float(np.min(durations)),
                'max_ms': float(np.max(durations))
            },
            'memory_stats': {
                'mean_mb': float(np.mean(memory_usage)),
                'peak_mb': float(np.max(memory_usage))
            }
        }

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            return self._operation_stats_locked(operation_name)

    def get_all_stats(self) -> Dict[str, Any]:
        """Get aggregated statistics for all operations."""
        with self._lock:
            operations = {
                name: self._operation_stats_locked(name)
                for name in self._operation_counts
            }
            total = sum(self._operation_counts.values())
            total_errors = sum(self._error_counts.values())
            return {
                'operations': operations,
                'total_operations': total,
                'total_errors': total_errors,
                'overall_error_rate': total_errors / max(1, total)
            }

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent performance metrics."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
            return [asdict(metric) for metric in recent]

    def reset(self) -> None:
        """Drop all recorded metrics."""
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._durations.clear()
            self._memory.clear()


# Global metrics collector instance
_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return _metrics_collector


def reset_metrics() -> None:
    """Reset the global metrics collector."""
    _metrics_collector.reset()


def _process_memory_mb() -> float:
    return psutil.Process().memory_info().rss / 1024 / 1024


@contextmanager
def performance_monitor(operation_name: str, pixel_count: int = 0,
                        color_count: int = 0, cluster_count: int = 0):
    """Context manager for monitoring performance of engine operations."""
    if not config.METRICS_ENABLED:
        yield
        return

    start_time = time.perf_counter()
    start_memory = _process_memory_mb()
    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        end_memory = _process_memory_mb()

        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=duration_ms,
            memory_usage_mb=max(end_memory, start_memory),
            pixel_count=pixel_count,
            color_count=color_count,
            cluster_count=cluster_count,
            timestamp=time.time(),
            error=error_msg
        )

        _metrics_collector.record_performance(metrics)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Operation {operation_name} completed in {duration_ms:.1f}ms "
                         f"(memory: {metrics.memory_usage_mb:.1f}MB)")


def performance_tracked(operation_name: str):
    """Decorator for automatically tracking function performance."""
    def decorator(func):
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            # Positional and keyword calls report the same counts
            arguments = signature.bind_partial(*args, **kwargs).arguments
            cluster_count = int(arguments.get('k') or arguments.get('max_colors') or 0)

            color_count = 0
            for value in arguments.values():
                if isinstance(value, (list, tuple)):
                    color_count = len(value)
                    break

            with performance_monitor(operation_name, color_count=color_count,
                                     cluster_count=cluster_count):
                return func(*args, **kwargs)
        return wrapper
    return decorator
