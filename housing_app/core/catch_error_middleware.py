import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort 500 handler. Also echoes a request id for log correlation."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error | TraceID=%s | %s %s",
                request_id,
                request.method,
                request.url.path,
            )
            response = JSONResponse(
                {"success": False, "error": "Internal server error"},
                status_code=500,
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
