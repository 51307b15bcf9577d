"""Exception handlers for structured error responses."""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..exceptions import VaultException, ValidationError

logger = logging.getLogger(__name__)


async def vault_exception_handler(request: Request, exc: VaultException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Logs error details and converts exception to standardized JSON format.

    Args:
        request: FastAPI request object
        exc: VaultException instance

    Returns:
        JSONResponse with error details
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"VaultException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI body/query validation failures as a 400 VALIDATION_ERROR."""
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return await vault_exception_handler(request, ValidationError(message, errors=errors))
