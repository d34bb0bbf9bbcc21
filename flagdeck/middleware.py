import time
import uuid
import random
import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import trace_id_var, get_log_policy
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("flagdeck")


class TracingMiddleware(BaseHTTPMiddleware):
    """ASGI middleware for request tracing and structured logging"""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.log_config = get_log_policy()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or reuse trace ID
        trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        trace_id_var.set(trace_id)
        request.state.request_id = trace_id

        client_ip = request.client.host if request.client else "unknown"
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            logger.error("Request failed", extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": latency_ms,
                "client_ip": client_ip,
                "tenant_id": _tenant_of(request),
                "request_id": trace_id,
                "exception": str(e),
            })
            prometheus_metrics.record_request(500)
            raise
        finally:
            trace_id_var.set(None)

        latency_ms = round((time.time() - start_time) * 1000, 2)
        self._log_request(
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=latency_ms,
            client_ip=client_ip,
            tenant_id=_tenant_of(request),
            trace_id=trace_id,
        )
        prometheus_metrics.record_request(response.status_code)

        response.headers["X-Request-ID"] = trace_id
        return response

    def _log_request(self, method: str, path: str, status: int, latency_ms: float,
                     client_ip: str, tenant_id, trace_id: str):
        """Log HTTP request with structured data and sampling"""
        if path in self.log_config["exclude_paths"]:
            return

        fields = {
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
            "tenant_id": tenant_id,
            "request_id": trace_id,
        }

        # Always log errors
        if status >= 400:
            log_level = logging.ERROR if status >= 500 else logging.WARNING
            logger.log(log_level, "HTTP Request", extra=fields)
            return

        if random.random() > self.log_config["sample_rate"]:
            return

        logger.info("HTTP Request", extra=fields)


def _tenant_of(request: Request):
    ctx = getattr(request.state, "auth_context", None)
    return ctx.tenant_id if ctx is not None else None
