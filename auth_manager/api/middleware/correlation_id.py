"""
Correlation ID middleware.

- Accepts X-Correlation-ID from the client or generates one
- Stores it in request.state and on the response headers
- Sets the context var so every log line in the request carries it
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth_manager.logging_config import correlation_id_var, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
MAX_INCOMING_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Assign a correlation ID to each request for tracing across logs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = (request.headers.get(CORRELATION_ID_HEADER) or "").strip()
        if incoming and len(incoming) <= MAX_INCOMING_LENGTH:
            correlation_id = incoming
        else:
            correlation_id = str(uuid.uuid4())

        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            response.headers[CORRELATION_ID_HEADER] = correlation_id

            logger.info(
                "%s %s -> %s",
                request.method,
                request.url.path,
                response.status_code,
                extra={"duration_ms": round(duration_ms, 1)},
            )
            return response
        finally:
            correlation_id_var.reset(token)
