"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from eco_moderation.telemetry import observe_request

UNMATCHED_ROUTE = "<unmatched>"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:  # pragma: no cover - defensive
            observe_request(
                request.method,
                self._route_label(request),
                500,
                time.perf_counter() - start_time,
            )
            raise

        observe_request(
            request.method,
            self._route_label(request),
            response.status_code,
            time.perf_counter() - start_time,
        )
        return response

    @staticmethod
    def _route_label(request: Request) -> str:
        """Route template for metric labels.

        Raw paths are never used so scanners hitting random URLs cannot
        blow up label cardinality.
        """

        route = request.scope.get("route")
        path = getattr(route, "path", None)
        return path or UNMATCHED_ROUTE
