"""
Metrics Collection
Prometheus metrics for screen generation, persistence and board export
"""

import time

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the pipeline.

    Each collector owns its registry so tests can build fresh instances
    without duplicate-timeseries errors.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        # Generation metrics
        self.generation_total = Counter(
            "screenflow_generation_total",
            "Screen generation attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.generation_duration = Histogram(
            "screenflow_generation_duration_seconds",
            "Screen generation duration in seconds",
            ["source"],
            buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
            registry=self.registry,
        )

        # Persistence metrics
        self.store_fallback_total = Counter(
            "screenflow_store_fallback_total",
            "Operations served by the local store after a primary failure",
            ["op"],
            registry=self.registry,
        )
        self.local_cache_size = Gauge(
            "screenflow_local_cache_entries",
            "Screen sets held by the local fallback store",
            registry=self.registry,
        )

        # Export metrics
        self.export_cards_total = Counter(
            "screenflow_export_cards_total",
            "Board cards by creation status",
            ["status"],
            registry=self.registry,
        )
        self.export_retries_total = Counter(
            "screenflow_export_retries_total",
            "Card creation retries after 429/409 responses",
            registry=self.registry,
        )

        # System metrics
        self.uptime = Gauge(
            "screenflow_uptime_seconds",
            "Process uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_generation(self, outcome: str, duration: float, source: str = "ai") -> None:
        """Record one generation call (outcome: ai, fallback, timeout, failed)."""
        self.generation_total.labels(outcome=outcome).inc()
        self.generation_duration.labels(source=source).observe(duration)

    def record_store_fallback(self, op: str) -> None:
        self.store_fallback_total.labels(op=op).inc()

    def set_local_cache_size(self, entries: int) -> None:
        self.local_cache_size.set(entries)

    def record_card(self, status: str) -> None:
        """Record a card outcome (created, failed, skipped)."""
        self.export_cards_total.labels(status=status).inc()

    def record_retry(self) -> None:
        self.export_retries_total.inc()

    def update_uptime(self) -> None:
        """Update the uptime metric."""
        self.uptime.set(time.time() - self.start_time)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one sample (0.0 if never recorded)."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
