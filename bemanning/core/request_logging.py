# bemanning/core/request_logging.py
"""
Middleware som loggar varje HTTP-anrop med request-id och svarstid.
"""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from bemanning.core.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

#: Sökvägar som bara loggas på DEBUG.
QUIET_PATHS = frozenset({"/health"})


def _level_for(status_code: int, path: str) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Loggar metod, sökväg, status och tid för varje anrop.

    Ett inkommande X-Request-ID återanvänds, annars skapas ett nytt. Id:t
    sätts på request.state och skickas tillbaka i svaret.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        def fields(status_code: int) -> dict:
            return {
                "extra_fields": {
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            }

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"{request.method} {request.url.path} failed", extra=fields(500))
            raise

        extra = fields(response.status_code)
        logger.log(
            _level_for(response.status_code, request.url.path),
            f"{request.method} {request.url.path} -> {response.status_code} ({extra['extra_fields']['duration_ms']}ms)",
            extra=extra,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
