import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

REQUEST_SECTIONS = {"body", "query", "path", "header", "cookie"}


def _field(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in REQUEST_SECTIONS:
        parts = parts[1:]
    return ".".join(parts)


class ValidationErrorHandler:
    async def __call__(self, request: Request, exc: RequestValidationError):
        details = [
            {
                "loc": list(err.get("loc", ())),
                "field": _field(err.get("loc", ())),
                "msg": str(err.get("msg")),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]
        logger.info(
            "Validation failed on %s %s: %s",
            request.method,
            request.url.path,
            ", ".join(d["field"] or "request" for d in details),
        )
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Validation failed", "details": details},
        )
