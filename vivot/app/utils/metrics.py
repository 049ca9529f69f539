"""Prometheus metrics for generator calls, geocoding and mood pivots."""

from prometheus_client import Counter, Histogram

# Generator metrics
generator_latency_ms = Histogram(
    "generator_latency_ms",
    "Generator call latency in milliseconds",
    ["purpose", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000, 64000],
)

generator_errors_total = Counter(
    "generator_errors_total",
    "Total generator call failures",
    ["purpose", "reason"],
)

# Geocoder metrics
geocode_lookups_total = Counter(
    "geocode_lookups_total",
    "Total geocoder lookups",
    ["outcome"],
)

# Mood pivot metrics
mood_readings_total = Counter(
    "mood_readings_total",
    "Total mood readings recorded",
    ["energy_level", "should_pivot"],
)

pivot_proposals_total = Counter(
    "pivot_proposals_total",
    "Total pivot proposals",
    ["source"],
)

pivot_commits_total = Counter(
    "pivot_commits_total",
    "Total confirmed pivots",
    ["trigger"],
)


class PrometheusGeneratorMetrics:
    """Prometheus-based generator metrics implementation."""

    def record_latency(self, purpose: str, outcome: str, latency_ms: float) -> None:
        """Record generator call latency."""
        generator_latency_ms.labels(purpose=purpose, outcome=outcome).observe(latency_ms)

    def inc_error(self, purpose: str, reason: str) -> None:
        """Increment error counter."""
        generator_errors_total.labels(purpose=purpose, reason=reason).inc()
