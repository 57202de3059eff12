"""
Prometheus metrics registration and helpers.

Exports:
- observe_request(...): record HTTP request metrics
- observe_ai_call(...): record outbound AI call metrics
- metrics_latest(): return text exposition from correct registry (handles multiprocess)
- CONTENT_TYPE_LATEST: correct Prometheus content type
"""

import os
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess


REQUEST_COUNTER = Counter(
    'sm_http_requests_total', 'Total HTTP requests', ['endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'sm_http_request_latency_seconds', 'HTTP request latency seconds', ['endpoint']
)

AI_CALLS = Counter(
    'sm_ai_calls_total', 'Total AI provider calls', ['operation', 'outcome']
)

AI_CALL_LATENCY = Histogram(
    'sm_ai_call_latency_seconds', 'AI provider call latency seconds', ['operation']
)


def observe_request(endpoint: str, status: int, latency_seconds: float) -> None:
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency_seconds)


def observe_ai_call(operation: str, success: bool, latency_seconds: float) -> None:
    AI_CALLS.labels(operation=operation, outcome='success' if success else 'error').inc()
    AI_CALL_LATENCY.labels(operation=operation).observe(latency_seconds)


def metrics_latest() -> bytes:
    """Return the Prometheus text exposition, multiprocess-aware if configured."""
    prom_mp_dir = os.getenv('PROMETHEUS_MULTIPROC_DIR')
    if prom_mp_dir:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return generate_latest(registry)
    # Default registry
    return generate_latest()


__all__ = ['observe_request', 'observe_ai_call', 'metrics_latest', 'CONTENT_TYPE_LATEST']
