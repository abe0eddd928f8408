"""
Prometheus metrics for the safety scoring engine.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class ScoringMetrics:
    """Encapsulates Prometheus metrics for safety score computation."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.computations = Counter(
            "safety_score_computations_total",
            "Total safety score computations",
            ["transport_mode", "outcome"],
            registry=self.registry,
        )

        self.computation_latency = Histogram(
            "safety_score_computation_duration_seconds",
            "Safety score computation latency in seconds",
            ["transport_mode"],
            registry=self.registry,
        )

        self.oracle_calls = Counter(
            "safety_oracle_calls_total",
            "Route prediction calls by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.oracle_fallbacks = Counter(
            "safety_oracle_fallbacks_total",
            "Route segments scored rule-based after a prediction failure",
            registry=self.registry,
        )

    def record_computation(self, transport_mode: str, outcome: str, duration: float):
        self.computations.labels(transport_mode=transport_mode, outcome=outcome).inc()
        self.computation_latency.labels(transport_mode=transport_mode).observe(duration)

    def record_oracle_call(self, outcome: str):
        self.oracle_calls.labels(outcome=outcome).inc()

    def record_fallback(self):
        self.oracle_fallbacks.inc()

    def get_metrics_prometheus(self) -> str:
        """Get Prometheus-formatted metrics."""
        return generate_latest(self.registry).decode("utf-8")
