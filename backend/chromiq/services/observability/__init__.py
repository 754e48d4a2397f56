"""
Observability module for the ChromiQ color engine.

Provides performance monitoring and metrics collection around engine
operations. Logging itself goes through loguru directly.
"""

from .metrics import (
    PerformanceMetrics,
    MetricsCollector,
    get_metrics_collector,
    reset_metrics,
    performance_monitor,
    performance_tracked
)

__all__ = [
    'PerformanceMetrics',
    'MetricsCollector',
    'get_metrics_collector',
    'reset_metrics',
    'performance_monitor',
    'performance_tracked'
]
