"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from multicut.models.errors import (
    ConflictError,
    ErrorResponse,
    MulticutError,
    NotFoundError,
    PreconditionError,
    TranscodeError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def multicut_error_handler(request: Request, exc: MulticutError) -> JSONResponse:
    """Handle MulticutError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    response = ErrorResponse.from_exception(
        exc, guidance=_get_guidance(exc), retry=_is_retryable(exc)
    )
    return JSONResponse(status_code=status_code, content=response.model_dump())


def _get_status_code(exc: MulticutError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, (ValidationError, PreconditionError)):
        return 400
    elif isinstance(exc, NotFoundError):
        return 404
    elif isinstance(exc, ConflictError):
        return 409
    return 500


def _get_guidance(exc: MulticutError) -> str:
    """Generate actionable guidance based on error type."""
    if isinstance(exc, ValidationError):
        return "Fix the export config and submit it again."
    if isinstance(exc, PreconditionError):
        return "Make sure every source file exists on the export server."
    if isinstance(exc, ConflictError):
        return "Wait for the other export to finish or choose another output path."
    if isinstance(exc, NotFoundError):
        return "Check the job id; cancelled jobs are removed."
    return "Please try again or contact support."


def _is_retryable(exc: MulticutError) -> bool:
    """Determine if the error is retryable."""
    return isinstance(exc, (ConflictError, TranscodeError))
