"""
Prometheus metrics for recordgate

Counts records as they move through classification, validation and
filtering, plus request validation errors and enrichment fetches.
Metrics live in a registry private to recordgate; batch callers (the CLI,
short-lived functions) dump it to a textfile after a run.
"""
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)


REGISTRY = CollectorRegistry()


# =======================
# EVENT PIPELINE METRICS
# =======================

records_classified_total = Counter(
    name="recordgate_records_classified_total",
    documentation="Total number of raw event records classified",
    labelnames=["source"],  # aws:dynamodb, aws:s3, aws:sqs, or the unrecognized tag
    registry=REGISTRY,
)

records_validated_total = Counter(
    name="recordgate_records_validated_total",
    documentation="Total number of records validated against a schema",
    labelnames=["status"],  # valid, invalid
    registry=REGISTRY,
)

records_dropped_total = Counter(
    name="recordgate_records_dropped_total",
    documentation="Total number of records dropped before reaching the caller",
    labelnames=["reason"],  # invalid, operation
    registry=REGISTRY,
)

enrichment_fetches_total = Counter(
    name="recordgate_enrichment_fetches_total",
    documentation="Total number of object payloads fetched for enrichment",
    labelnames=["mode"],  # json, csv, raw
    registry=REGISTRY,
)

pipeline_duration_seconds = Histogram(
    name="recordgate_pipeline_duration_seconds",
    documentation="Time spent computing the final record sequence",
    labelnames=["mode"],  # basic, full
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
    registry=REGISTRY,
)

# =======================
# REQUEST VALIDATION METRICS
# =======================

request_validation_errors_total = Counter(
    name="recordgate_request_validation_errors_total",
    documentation="Total number of error entries attached to responses",
    labelnames=["mode"],  # openapi, requirements, response
    registry=REGISTRY,
)


# =======================
# HELPERS
# =======================

def generate_metrics() -> bytes:
    """Current registry contents in the Prometheus text format"""
    return generate_latest(REGISTRY)


def write_metrics(path: str) -> None:
    """
    Write the registry to a file for the node exporter textfile collector

    Args:
        path: Destination file (written atomically)
    """
    write_to_textfile(path, REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a labelled counter; non-positive amounts are ignored

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if value <= 0:
        return
    counter.labels(**labels).inc(value)


def record_validation(valid: bool) -> None:
    """Count one record validation by outcome"""
    increment_counter(records_validated_total, status="valid" if valid else "invalid")


def get_counter_value(counter: Counter, **labels) -> float:
    """
    Read the current value of a labelled counter

    Returns:
        Current counter value (0.0 if never incremented)
    """
    value = REGISTRY.get_sample_value(f"{counter._name}_total", labels)
    return value or 0.0


class track_duration:
    """
    Observe the wall-clock time of a block in a labelled histogram

    The observation is made whether or not the block raises.

    Usage:
        with track_duration(pipeline_duration_seconds, mode="full"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.elapsed = 0.0
        self._started = 0.0

    def __enter__(self) -> "track_duration":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        self.histogram.labels(**self.labels).observe(self.elapsed)
        return False
