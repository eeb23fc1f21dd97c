from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from reply_gateway.core.config import settings
from reply_gateway.core.logging import (
    bind_client_ip,
    bind_request_id,
    reset_client_ip,
    reset_request_id,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Bind the correlation ID and client address for the request and log its outcome.

    The request ID is taken from the configured header when the caller sends
    one and echoed back on the response either way.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._logger = logging.getLogger("reply_gateway.request")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(settings.request_id_header) or uuid.uuid4().hex
        request_token = bind_request_id(request_id)
        ip_token = bind_client_ip(client_address(request))
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._logger.exception(
                "request failed", extra=_request_fields(request, 500, started)
            )
            raise
        else:
            # Turn failures arrive here already mapped to 4xx/5xx by the exception handlers.
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            self._logger.log(
                level,
                "request completed",
                extra=_request_fields(request, response.status_code, started),
            )
        finally:
            reset_client_ip(ip_token)
            reset_request_id(request_token)

        response.headers[settings.request_id_header] = request_id
        return response


def client_address(request: Request) -> str:
    """First hop of the forwarded header when trusted, else the socket peer, else ``-``."""
    if settings.trust_client_ip_header:
        forwarded = request.headers.get(settings.client_ip_header, "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "-"


def _request_fields(request: Request, status_code: int, started: float) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
    }
