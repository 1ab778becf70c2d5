# Copyright 2026 castline.fm
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Per-request logging and correlation ids."""

import time
import uuid
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probed by load balancers every few seconds
QUIET_PATHS = frozenset({"/", "/health"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id, method, endpoint and client_ip as structlog context
    variables for the lifetime of a request and logs its outcome.

    A client-supplied X-Request-ID is reused; otherwise a short one is
    generated. Either way it is echoed in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        quiet = request.url.path in QUIET_PATHS

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            endpoint=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )
        started = time.perf_counter()
        if not quiet:
            logger.info("http_request_started", query_params=dict(request.query_params))

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "http_request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
                exc_info=True,
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "method", "endpoint", "client_ip")

        status = response.status_code
        fields = {"request_id": request_id, "status_code": status, "duration_ms": _elapsed_ms(started)}
        if status >= 500:
            logger.error("http_request_completed", **fields)
        elif status >= 400:
            logger.warning("http_request_completed", **fields)
        elif not quiet:
            logger.info("http_request_completed", **fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
