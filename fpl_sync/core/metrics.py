"""
Prometheus metrics for fpl-sync-api.

Metrics exposed:
- Sync workflow run counters and duration histograms per entity kind
- Cache hit/miss counters per cache prefix
- FPL API request success/failure counters
- Circuit breaker state gauge
"""
from prometheus_client import Counter, Gauge, Histogram

# Sync Metrics
sync_runs_total = Counter(
    "fpl_sync_runs_total",
    "Total sync workflow runs",
    ["entity", "status"]
)

sync_duration_seconds = Histogram(
    "fpl_sync_duration_seconds",
    "Sync workflow duration in seconds",
    ["entity"]
)

sync_records_total = Counter(
    "fpl_sync_records_total",
    "Records persisted by sync workflows",
    ["entity"]
)

# Cache Metrics
cache_hits_total = Counter(
    "fpl_cache_hits_total",
    "Cache hits",
    ["prefix", "operation"]
)

cache_misses_total = Counter(
    "fpl_cache_misses_total",
    "Cache misses (provider fallbacks)",
    ["prefix", "operation"]
)

cache_corrupt_entries_total = Counter(
    "fpl_cache_corrupt_entries_total",
    "Cache entries dropped because they failed to deserialize",
    ["prefix"]
)

# External API Metrics
fpl_api_requests_success_total = Counter(
    "fpl_api_requests_success_total",
    "Total successful FPL API requests",
    ["endpoint"]
)

fpl_api_requests_failure_total = Counter(
    "fpl_api_requests_failure_total",
    "Total failed FPL API requests",
    ["endpoint", "error_type"]
)

# Circuit breaker state: 0 = closed, 1 = half open, 2 = open
circuit_breaker_state = Gauge(
    "fpl_circuit_breaker_state",
    "Circuit breaker state",
    ["name"]
)
