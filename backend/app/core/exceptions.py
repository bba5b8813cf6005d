"""
Typed pipeline errors and their HTTP rendering.

SECURITY PRINCIPLE: Don't expose internal details to users.
Each error carries a user-safe message; the original cause is logged
internally. Every error is rendered as {"success": false, "error": message}.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Base class for every error the message pipeline knows how to report."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An internal error occurred. Please try again later."

    def __init__(self, message: str = "", *, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthError(PipelineError):
    """Missing or invalid access token."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authorization header with API token is required"


class ValidationError(PipelineError):
    """A required request field is missing."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(PipelineError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConfigError(PipelineError):
    """Generation backend credentials are absent."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "AI backend configuration is missing"


class UpstreamError(PipelineError):
    """Generation backend unreachable, non-success, or empty result."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "AI backend request failed"


class ParseError(PipelineError):
    """Classifier answer is not valid JSON or lacks a recognized intent."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Invalid intent classification result format"


class DeliveryError(PipelineError):
    """Outbound channel message could not be sent."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to send WhatsApp message"


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Framework-level body errors (e.g. unparseable JSON) in the same envelope."""
    logger.info(f"Request validation failed on {request.url.path}: {len(exc.errors())} error(s)")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("Invalid request body"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
