"""
Tests for engine performance monitoring.

Verifies that engine operations are recorded, that failures are counted
and re-raised, and that monitoring can be switched off without changing
results.
"""

import pytest

from chromiq.config import config
from chromiq.errors import OutOfRangeError
from chromiq.services.colors.dominant import extract_dominant_colors
from chromiq.services.observability import (
    MetricsCollector, PerformanceMetrics, get_metrics_collector,
    performance_monitor, performance_tracked,
)


@pytest.fixture
def metrics_on(monkeypatch):
    monkeypatch.setattr(config, "METRICS_ENABLED", True)
    return get_metrics_collector()


class TestMetricsCollector:
    """Test the collector in isolation"""

    def _metric(self, name, duration, error=None):
        return PerformanceMetrics(
            operation_name=name, duration_ms=duration, memory_usage_mb=10.0,
            pixel_count=0, color_count=0, cluster_count=0, timestamp=0.0, error=error,
        )

    def test_operation_stats(self):
        collector = MetricsCollector()
        for duration in (1.0, 2.0, 3.0):
            collector.record_performance(self._metric("op", duration))
        collector.record_performance(self._metric("op", 4.0, error="boom"))

        stats = collector.get_operation_stats("op")
        assert stats["total_calls"] == 4
        assert stats["error_count"] == 1
        assert stats["error_rate"] == 0.25
        assert stats["duration_stats"]["mean_ms"] == pytest.approx(2.5)
        assert stats["duration_stats"]["min_ms"] == 1.0
        assert stats["duration_stats"]["max_ms"] == 4.0

    def test_unknown_operation(self):
        assert MetricsCollector().get_operation_stats("nothing") == {}

    def test_recent_and_reset(self):
        collector = MetricsCollector()
        for i in range(5):
            collector.record_performance(self._metric(f"op{i}", 1.0))
        recent = collector.get_recent_metrics(limit=2)
        assert [m["operation_name"] for m in recent] == ["op3", "op4"]

        collector.reset()
        assert collector.get_all_stats()["total_operations"] == 0


class TestPerformanceMonitor:
    """Test monitoring of engine operations"""

    def test_engine_operations_recorded(self, metrics_on, gradient_image):
        extract_dominant_colors(gradient_image, 5)
        operations = metrics_on.get_all_stats()["operations"]
        assert "histogram_extraction" in operations
        assert "kmeans_clustering" in operations
        assert "dominant_color_extraction" in operations

    def test_failure_recorded_and_reraised(self, metrics_on):
        with pytest.raises(RuntimeError):
            with performance_monitor("failing_op"):
                raise RuntimeError("boom")
        stats = metrics_on.get_operation_stats("failing_op")
        assert stats["error_count"] == 1

    def test_decorator_counts_entries(self, metrics_on):
        @performance_tracked("tracked_op")
        def work(entries, k=0):
            return len(entries)

        assert work([1, 2, 3], k=2) == 3
        recent = metrics_on.get_recent_metrics(limit=1)[0]
        assert recent["operation_name"] == "tracked_op"
        assert recent["color_count"] == 3
        assert recent["cluster_count"] == 2

    def test_decorator_reads_positional_arguments(self, metrics_on):
        @performance_tracked("tracked_op")
        def work(entries, k):
            return len(entries)

        work([1, 2, 3, 4], 3)
        recent = metrics_on.get_recent_metrics(limit=1)[0]
        assert recent["color_count"] == 4
        assert recent["cluster_count"] == 3

    def test_clustering_records_requested_k(self, metrics_on, gradient_image):
        extract_dominant_colors(gradient_image, 5)
        kmeans = [m for m in metrics_on.get_recent_metrics(limit=20)
                  if m["operation_name"] == "kmeans_clustering"]
        assert kmeans[0]["cluster_count"] == 5
        assert kmeans[0]["color_count"] == 64

    def test_validation_errors_propagate(self, metrics_on, split_image):
        with pytest.raises(OutOfRangeError):
            extract_dominant_colors(split_image, 0)

    def test_disabled_monitoring(self, monkeypatch, split_image):
        monkeypatch.setattr(config, "METRICS_ENABLED", False)
        colors = extract_dominant_colors(split_image)
        assert len(colors) == 2
        assert get_metrics_collector().get_all_stats()["total_operations"] == 0
