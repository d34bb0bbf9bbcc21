"""
Prometheus metrics for Flagdeck API
"""

from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST

from ..config import API_VERSION

# Build info
BUILD_INFO = Gauge(
    'flagdeck_build_info',
    'Build information',
    ['version']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'flagdeck_requests_total',
    'Total number of requests',
    ['status_class']
)

# Authentication failures, by reason
AUTH_FAILURES_TOTAL = Counter(
    'flagdeck_auth_failures_total',
    'Total number of rejected API key authentications',
    ['reason']
)

# Feature flag resolutions, by the cascade tier that matched
FLAG_RESOLUTIONS_TOTAL = Counter(
    'flagdeck_flag_resolutions_total',
    'Total number of feature flag name resolutions',
    ['tier']
)


class PrometheusMetrics:
    """Thin facade over the module level collectors"""

    def __init__(self):
        BUILD_INFO.labels(version=API_VERSION).set(1)

    def record_request(self, status: int):
        REQUESTS_TOTAL.labels(status_class=f"{status // 100}xx").inc()

    def record_auth_failure(self, reason: str):
        AUTH_FAILURES_TOTAL.labels(reason=reason).inc()

    def record_flag_resolution(self, tier: str):
        FLAG_RESOLUTIONS_TOTAL.labels(tier=tier).inc()

    def get_metrics(self) -> bytes:
        return generate_latest()

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST


# Global instance
prometheus_metrics = PrometheusMetrics()
