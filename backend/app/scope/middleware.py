"""
Middleware for request-scoped correlation ids.
"""

import logging
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Attaches a request_id to request.state for correlation and adds it to responses.
    """

    async def dispatch(self, request, call_next):
        request_id = (
            getattr(request.state, "request_id", None)
            or request.headers.get("X-Request-ID")
            or request.headers.get("X-Request-Id")
            or str(uuid4())
        )
        request.state.request_id = request_id
        request.state.organization_id = None

        logger.debug(
            "request.start",
            extra={"request_id": request_id, "path": request.url.path},
        )
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response
