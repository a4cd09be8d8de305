"""Convert service errors to JSON responses at the request boundary."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from blogcms.core.errors import ServiceError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    code: str,
    *,
    errors: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"detail": message, "code": code}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for ServiceError subclasses and unexpected exceptions."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        logger.info(
            "Request rejected",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
                "error_code": exc.error_code,
            },
        )
        return error_response(
            exc.status_code,
            exc.message,
            exc.error_code,
            errors=exc.detail,
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            extra={"path": request.url.path, "method": request.method, "error_type": type(exc).__name__},
        )
        return error_response(500, "Internal server error", "server_error")
