"""
Request tracing middleware
"""
import time
import uuid
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log its outcome and duration.

    A client-supplied ``X-Request-ID`` is reused so calls can be correlated
    across services; otherwise a fresh UUID is issued. The id is exposed to
    handlers as ``request.state.request_id`` and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        route = f"{request.method} {request.url.path}"
        client_host = request.client.host if request.client else "unknown"

        logger.info(f"[{request_id}] --> {route} from {client_host}")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(f"[{request_id}] {route} raised {type(e).__name__} after {elapsed:.3f}s")
            raise

        elapsed = time.perf_counter() - started
        logger.info(f"[{request_id}] <-- {route} {response.status_code} in {elapsed:.3f}s")

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.3f}"
        return response
