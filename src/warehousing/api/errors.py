"""HTTP error mapping for the warehousing API.

Validation problems, stock shortfalls and forbidden transitions answer 400;
unresolved ids answer 404. The body is ``{"error": <messages>}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from warehousing.errors import InsufficientStockError, InvalidTransitionError

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    InsufficientStockError: 400,
    InvalidStateError: 400,
    InvalidTransitionError: 400,
    ObjectNotFoundError: 404,
}


def _error_response(status_code):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            status_code=status_code,
            error=type(exc).__name__,
        )
        return JSONResponse(status_code=status_code, content={"error": getattr(exc, "messages", str(exc))})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's default handlers, then pin the warehousing status codes."""
    register_exception_handlers(app)
    for exc_class, status_code in _STATUS_BY_ERROR.items():
        app.add_exception_handler(exc_class, _error_response(status_code))
