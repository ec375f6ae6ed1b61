"""Prometheus metrics for monitoring."""

from prometheus_client import Counter, Gauge, Histogram

fetch_attempts_total = Counter(
    "navtracker_fetch_attempts_total", "Upstream fetch attempts", ["outcome"])
fetch_failures_total = Counter(
    "navtracker_fetch_failures_total", "Fetches that exhausted all attempts", ["kind"])
fetch_latency_seconds = Histogram(
    "navtracker_fetch_latency_seconds", "Single upstream request latency", buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 15.0])

cycles_total = Counter("navtracker_cycles_total",
                       "Sampling cycles completed", ["outcome"])
cycles_skipped_total = Counter(
    "navtracker_cycles_skipped_total", "Ticks skipped because a cycle was still running")
cycle_duration_seconds = Histogram(
    "navtracker_cycle_duration_seconds", "Sampling cycle duration", buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0])

window_size = Gauge("navtracker_window_size", "Samples currently held in the window")
latest_difference = Gauge(
    "navtracker_latest_difference", "Most recent NAV minus price")
