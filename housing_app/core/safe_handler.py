import logging
from functools import wraps

from fastapi import HTTPException, Request

from .breaker import CircuitOpenError
from .friendly_msg import get_friendly_message

logger = logging.getLogger(__name__)


def _request_context(args, kwargs):
    for arg in list(args) + list(kwargs.values()):
        if isinstance(arg, Request):
            client_ip = arg.client.host if arg.client else "unknown"
            trace_id = arg.headers.get("X-Request-ID", "none")
            return f"TraceID={trace_id} | Path: {arg.url.path} | Client: {client_ip}"
    return None


def safe_handler(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HTTPException as e:
            context = _request_context(args, kwargs)
            logger.warning(
                f"[HTTPException] {e.status_code} in {func.__name__}"
                f"{' | ' + context if context else ''}: {e.detail}"
            )
            raise
        except CircuitOpenError as e:
            logger.warning(f"[CircuitOpen] in {func.__name__}: {e}")
            raise HTTPException(status_code=503, detail=get_friendly_message(e))
        except Exception as e:
            context = _request_context(args, kwargs)
            logger.error(
                f"[Unhandled Error] in {func.__name__}"
                f"{' | ' + context if context else ''} | Error: {e}",
                exc_info=True,
            )
            raise HTTPException(status_code=500, detail=get_friendly_message(e))

    return wrapper
