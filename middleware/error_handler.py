# middleware/error_handler.py
import logging
import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from attachments import AttachmentError
from commands import CommandFailedError, CommandValidationError, RecordNotFoundError
from security import AuthenticationError

logger = logging.getLogger(__name__)


async def catch_exceptions_middleware(request: Request, call_next):
    """
    Global exception handler that catches all unhandled exceptions
    and returns a generic error response without exposing stack traces.
    """
    try:
        response = await call_next(request)
        return response
    except HTTPException:
        # Let FastAPI handle expected HTTP exceptions
        raise
    except Exception as e:
        logger.error(
            f"Unhandled exception: {str(e)}\n"
            f"URL: {request.url}\n"
            f"Method: {request.method}\n"
            f"Traceback: {traceback.format_exc()}"
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "type": "internal_error"
            }
        )


async def _validation_notice(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"},
    )


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc), "type": "not_found"},
    )


async def _command_failed(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Command failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": "command_failed"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate command errors into user-facing HTTP responses."""
    app.add_exception_handler(CommandValidationError, _validation_notice)
    app.add_exception_handler(AttachmentError, _validation_notice)
    app.add_exception_handler(AuthenticationError, _validation_notice)
    app.add_exception_handler(RecordNotFoundError, _not_found)
    app.add_exception_handler(CommandFailedError, _command_failed)
