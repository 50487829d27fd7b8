"""
FastAPI exception handlers for structured error responses.

Maps domain exceptions to appropriate HTTP status codes. Every error body
has the same shape:

    {"success": false, "error": str, "error_type": str, "timestamp": iso8601}

plus "details" when the exception carries structured data.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from generation_layer.design.exceptions import DesignSourceError, InvalidFigmaUrl
from generation_layer.evaluation.exceptions import AllEvaluationSourcesFailed, EvaluationError
from generation_layer.llm.exceptions import AllProvidersExhausted, PermanentProviderError
from generation_layer.models.artifacts import PipelineRun
from generation_layer.pipeline.exceptions import InvalidGenerationRequest
from generation_layer.recovery.exceptions import StructuredOutputUnrecoverable

logger = structlog.get_logger(__name__)

# Status for a pipeline run that ended in ERROR, keyed by the failing error class
PIPELINE_ERROR_STATUS: dict[str, int] = {
    "InvalidGenerationRequest": status.HTTP_400_BAD_REQUEST,
    "StructuredOutputUnrecoverable": status.HTTP_502_BAD_GATEWAY,
    "ProviderAuthenticationError": status.HTTP_502_BAD_GATEWAY,
    "ProviderInvalidRequestError": status.HTTP_502_BAD_GATEWAY,
    "InvalidGeneratedPath": status.HTTP_502_BAD_GATEWAY,
    "EmptyGeneration": status.HTTP_502_BAD_GATEWAY,
    "AllEvaluationSourcesFailed": status.HTTP_502_BAD_GATEWAY,
    "AllProvidersExhausted": status.HTTP_503_SERVICE_UNAVAILABLE,
}


class PipelineFailed(Exception):
    """
    A generation run ended in ERROR.

    Raised by routes so the run's error reaches the client through the
    same handler chain as every other failure.
    """

    def __init__(self, run: PipelineRun):
        self.run = run
        self.error = run.error
        super().__init__(run.error.message if run.error else "Pipeline failed")

    @property
    def status_code(self) -> int:
        if self.error is None:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
        return PIPELINE_ERROR_STATUS.get(
            self.error.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
        )


def error_response(
    status_code: int,
    message: str,
    error_type: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Build the standard error body."""
    content: dict[str, Any] = {
        "success": False,
        "error": message,
        "error_type": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def pipeline_failed_handler(request: Request, exc: PipelineFailed) -> JSONResponse:
    """
    Handle generation runs that ended in ERROR.

    Status follows the error that ended the run (400/502/503/500).
    """
    error = exc.error
    logger.warning(
        "Generation run failed",
        run_id=exc.run.run_id,
        error_type=error.error_type if error else None,
        failed_state=error.failed_state.value if error else None,
        status_code=exc.status_code,
    )
    details = {"runId": exc.run.run_id}
    if error is not None:
        details["failedState"] = error.failed_state.value
        details.update(error.details)
    return error_response(
        exc.status_code,
        str(exc),
        error.error_type if error else "PipelineFailed",
        details,
    )


async def invalid_request_handler(request: Request, exc: InvalidGenerationRequest) -> JSONResponse:
    """Maps to 400 Bad Request."""
    logger.warning("Invalid generation request", error=exc.message)
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message, type(exc).__name__, exc.details)


async def invalid_figma_url_handler(request: Request, exc: InvalidFigmaUrl) -> JSONResponse:
    """Maps to 400 Bad Request."""
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message, type(exc).__name__, exc.details)


async def unrecoverable_output_handler(
    request: Request, exc: StructuredOutputUnrecoverable
) -> JSONResponse:
    """
    Handle model output that stayed unparseable through every recovery round.

    Maps to 502 Bad Gateway (upstream returned garbage).
    """
    logger.error("Structured output unrecoverable", attempts=len(exc.attempts))
    return error_response(status.HTTP_502_BAD_GATEWAY, exc.message, type(exc).__name__)


async def permanent_provider_error_handler(
    request: Request, exc: PermanentProviderError
) -> JSONResponse:
    """
    Handle permanent provider failures (bad credential, rejected request).

    Maps to 502 Bad Gateway.
    """
    logger.error("Permanent provider error", error_type=type(exc).__name__, error=exc.message)
    return error_response(status.HTTP_502_BAD_GATEWAY, exc.message, type(exc).__name__)


async def providers_exhausted_handler(request: Request, exc: AllProvidersExhausted) -> JSONResponse:
    """
    Handle an exhausted credential/model pool.

    Maps to 503 Service Unavailable (temporary failure).
    """
    logger.error("Provider pool exhausted", provider=exc.provider, attempts=exc.attempts)
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, exc.message, type(exc).__name__, exc.details
    )


async def evaluation_error_handler(request: Request, exc: EvaluationError) -> JSONResponse:
    """Maps to 502 Bad Gateway: every rater depends on upstream output."""
    status_code = (
        status.HTTP_502_BAD_GATEWAY
        if isinstance(exc, AllEvaluationSourcesFailed)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    logger.error("Evaluation failed", error=exc.message)
    return error_response(status_code, exc.message, type(exc).__name__, exc.details)


async def design_source_error_handler(request: Request, exc: DesignSourceError) -> JSONResponse:
    """Maps to 502 Bad Gateway (Figma API failure)."""
    logger.error("Design source error", error=exc.message)
    return error_response(status.HTTP_502_BAD_GATEWAY, exc.message, type(exc).__name__, exc.details)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    """
    Handle invalid request payloads.

    Maps to 400 Bad Request (client error).
    """
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning("Invalid request format", errors=errors)
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Request validation failed", "RequestValidationError", errors
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep the standard body for HTTPException raised by routes (e.g. 404)."""
    return error_response(exc.status_code, str(exc.detail), "HTTPException")


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception("Unexpected error", error_type=type(exc).__name__)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred", "internal_error"
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    PipelineFailed: pipeline_failed_handler,
    InvalidGenerationRequest: invalid_request_handler,
    InvalidFigmaUrl: invalid_figma_url_handler,
    StructuredOutputUnrecoverable: unrecoverable_output_handler,
    PermanentProviderError: permanent_provider_error_handler,
    AllProvidersExhausted: providers_exhausted_handler,
    EvaluationError: evaluation_error_handler,
    DesignSourceError: design_source_error_handler,
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: request_validation_error_handler,
    StarletteHTTPException: http_exception_handler,
    Exception: generic_error_handler,
}
