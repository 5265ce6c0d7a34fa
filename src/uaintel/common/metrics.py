"""Prometheus metrics for UAIntel.

Provides pre-defined metrics for monitoring classification volume,
cache efficiency and dataset health.
"""

from prometheus_client import Counter, Gauge, Histogram

CLASSIFICATIONS = Counter(
    "uaintel_classifications_total",
    "Total number of classifications computed (cache misses only)",
    ["target"],
)

CACHE_HITS = Counter(
    "uaintel_cache_hits_total",
    "Total number of result cache hits",
)

CACHE_MISSES = Counter(
    "uaintel_cache_misses_total",
    "Total number of result cache misses",
)

CACHE_EVICTIONS = Counter(
    "uaintel_cache_evictions_total",
    "Total number of entries evicted from the result cache",
)

CACHE_SIZE = Gauge(
    "uaintel_cache_size",
    "Current number of entries in the result cache",
)

REGEX_TIMEOUTS = Counter(
    "uaintel_regex_timeouts_total",
    "Total number of pattern searches aborted by the time budget",
    ["table"],
)

DATASET_LOAD_SECONDS = Histogram(
    "uaintel_dataset_load_seconds",
    "Time to build and validate the reference dataset",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
