"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.telemetry import observe_request

UNMATCHED_ROUTE = "unmatched"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus, labelled by route template."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        method = request.method

        try:
            response = await call_next(request)
        except Exception:  # pragma: no cover
            observe_request(method, self._resolve_route(request), 500, time.perf_counter() - start_time)
            raise

        # The router fills scope["route"] while handling the request.
        route = self._resolve_route(request)
        observe_request(method, route, response.status_code, time.perf_counter() - start_time)
        return response

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Route template such as ``/api/feedback/{feedback_id}``.

        Requests that match no route share one label so arbitrary paths
        cannot grow the metric's cardinality.
        """

        scope_route: Any = request.scope.get("route")
        path = getattr(scope_route, "path", None)
        return path or UNMATCHED_ROUTE
