# Centralized Prometheus metrics. The middleware below records timing
# and counts for every request; the record_* helpers are called from
# the verification and webhook code paths so dashboards can track how
# many checks succeed and how many deliveries fail.

from time import monotonic

from fastapi import Request
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_DURATION_MS = Histogram(
    "request_duration_ms",
    "API request duration in milliseconds",
    ["method", "route"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 2000, 5000, 10000],
)
REQUESTS_TOTAL = Counter(
    "requests_total",
    "Total API requests",
    ["method", "route", "status_code"],
)

VERIFICATIONS_CREATED_TOTAL = Counter(
    "verifications_created_total",
    "Domain verifications created",
    ["method"],
)
VERIFICATION_CHECKS_TOTAL = Counter(
    "verification_checks_total",
    "Domain verification checks by outcome",
    ["method", "outcome"],  # outcome: verified|failed|skipped|superseded
)
CHALLENGE_LOOKUP_MS = Histogram(
    "challenge_lookup_ms",
    "Time spent looking up the external proof in milliseconds",
    ["method"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 2000, 5000, 10000],
)

WEBHOOK_DELIVERIES_TOTAL = Counter(
    "webhook_deliveries_total",
    "Outbound webhook delivery attempts by outcome",
    ["event", "outcome"],  # outcome: success|failure
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = monotonic()
        response = await call_next(request)
        duration_ms = (monotonic() - start) * 1000.0

        route = request.scope.get("route")
        route_path = getattr(route, "path", None) or request.url.path
        REQUEST_DURATION_MS.labels(request.method, route_path).observe(duration_ms)
        REQUESTS_TOTAL.labels(request.method, route_path, str(response.status_code)).inc()
        return response


def _label(value: object | None, default: str = "unknown") -> str:
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    return str(value)


def record_verification_created(*, method: str | None) -> None:
    VERIFICATIONS_CREATED_TOTAL.labels(method=_label(method)).inc()


def record_verification_check(*, method: str | None, outcome: str) -> None:
    VERIFICATION_CHECKS_TOTAL.labels(method=_label(method), outcome=_label(outcome)).inc()


def record_challenge_lookup(*, method: str | None, duration_ms: float) -> None:
    CHALLENGE_LOOKUP_MS.labels(method=_label(method)).observe(duration_ms)


def record_webhook_delivery(*, event: str | None, success: bool) -> None:
    WEBHOOK_DELIVERIES_TOTAL.labels(
        event=_label(event),
        outcome="success" if success else "failure",
    ).inc()
