"""
Prometheus metrics collection for pet-provider

This module provides metrics instrumentation for monitoring gateway
traffic, rejected writes and change notifications.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Registry for this package's metrics
REGISTRY = CollectorRegistry()


# =======================
# GATEWAY METRICS
# =======================

# Operations counter
gateway_operations_total = Counter(
    name="pet_provider_operations_total",
    documentation="Total number of gateway operations",
    labelnames=["operation", "shape", "status"],  # status: success, rejected, error
    registry=REGISTRY,
)

# Operation latency
gateway_operation_duration_seconds = Histogram(
    name="pet_provider_operation_duration_seconds",
    documentation="Time spent in gateway operations in seconds",
    labelnames=["operation"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

# Validation failures counter
validation_failures_total = Counter(
    name="pet_provider_validation_failures_total",
    documentation="Total number of write payloads rejected by a field rule",
    labelnames=["operation", "field_name"],
    registry=REGISTRY,
)

# Soft insert failures
insert_failures_total = Counter(
    name="pet_provider_insert_failures_total",
    documentation="Total number of inserts the store refused (no row id returned)",
    registry=REGISTRY,
)

# =======================
# NOTIFICATION METRICS
# =======================

change_notifications_total = Counter(
    name="pet_provider_change_notifications_total",
    documentation="Total number of change notifications published",
    labelnames=["shape"],
    registry=REGISTRY,
)

observer_errors_total = Counter(
    name="pet_provider_observer_errors_total",
    documentation="Total number of change observers that raised during delivery",
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(gateway_operation_duration_seconds, operation="query"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)
