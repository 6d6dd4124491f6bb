"""
Prometheus metrics for the fan-site API.
Request counters/latency plus storage upload and cleanup outcomes.
"""

import time
from fastapi import Request
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUESTS_TOTAL = Counter(
    "fansite_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "fansite_http_request_seconds",
    "Request duration in seconds",
    ["method", "path"],
)

UPLOADS_TOTAL = Counter(
    "fansite_uploads_total",
    "Object storage uploads",
    ["resource", "status"],
)

CLEANUP_FAILURES = Counter(
    "fansite_storage_cleanup_failures_total",
    "Stored objects that could not be removed and were left as orphans",
    ["resource", "reason"],
)


async def metrics_endpoint(enabled: bool):
    """Prometheus metrics endpoint"""
    if not enabled:
        return Response(b"metrics disabled", media_type="text/plain")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def metrics_middleware(app, enabled: bool):
    """Add metrics middleware to FastAPI app"""
    if not enabled:
        return

    @app.middleware("http")
    async def _metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)

        # Route template keeps label cardinality bounded
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        REQUESTS_TOTAL.labels(
            method=request.method,
            path=path,
            status=str(response.status_code),
        ).inc()
        REQUEST_DURATION.labels(method=request.method, path=path).observe(time.time() - start)
        return response


def record_upload(resource: str, status: str):
    UPLOADS_TOTAL.labels(resource=resource, status=status).inc()


def record_cleanup_failure(resource: str, reason: str):
    CLEANUP_FAILURES.labels(resource=resource, reason=reason).inc()
