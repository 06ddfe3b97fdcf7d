"""
Error Handler Middleware

"""
import logging
from typing import Callable, Dict, Optional, Tuple, Type
from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from medchat.shared.exceptions import (
    DomainException,
    ValidationError,
    AuthenticationError,
    ProfileNotFoundError,
    DuplicateProfileError,
    UnknownSpecialtyError,
    ChatSessionNotFoundError,
    InvalidSessionStateError,
    MessageGenerationError,
    AttachmentNotFoundError,
    AttachmentValidationError,
    PrescriptionNotFoundError,
    RateLimitExceededError,
    ConfigurationError,
    RepositoryError,
    FileStorageError,
)

logger = logging.getLogger(__name__)


# Checked in order, so subclasses come before their bases
_ERROR_STATUS: Tuple[Tuple[Type[DomainException], int, str], ...] = (
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "Authentication Error"),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS, "Rate Limit Exceeded"),
    (AttachmentValidationError, status.HTTP_400_BAD_REQUEST, "Attachment Error"),
    (ProfileNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (ChatSessionNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (AttachmentNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (PrescriptionNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (DuplicateProfileError, status.HTTP_409_CONFLICT, "Conflict"),
    (InvalidSessionStateError, status.HTTP_409_CONFLICT, "Conflict"),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error"),
    (UnknownSpecialtyError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error"),
    (MessageGenerationError, status.HTTP_502_BAD_GATEWAY, "Generation Error"),
    (FileStorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "File Storage Error"),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Configuration Error"),
    (RepositoryError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage Error"),
)


def error_status(error: DomainException) -> Tuple[int, str]:
    """HTTP status code and title for a domain error."""
    for error_type, status_code, title in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code, title
    return status.HTTP_400_BAD_REQUEST, "Domain Error"


def error_headers(error: DomainException) -> Optional[Dict[str, str]]:
    if isinstance(error, RateLimitExceededError):
        return {"Retry-After": str(error.retry_after_seconds)}
    return None


def public_message(error: DomainException, status_code: int) -> str:
    """Error text safe to return to the client."""
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR and not isinstance(error, MessageGenerationError):
        return "Internal server error"
    if isinstance(error, MessageGenerationError):
        return "Failed to generate a reply, please try again"
    return error.message


def http_exception_for(error: DomainException) -> HTTPException:
    """
    Translate a domain error into an HTTPException.

    Server-side failures are logged with their details; the client only
    sees a generic message for them.
    """
    status_code, _ = error_status(error)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{type(error).__name__}: {error.message}")
    else:
        logger.warning(f"{type(error).__name__}: {error.message}")

    return HTTPException(
        status_code=status_code,
        detail=public_message(error, status_code),
        headers=error_headers(error)
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for handling global errors in the application."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process the request and handle any errors that occur.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware or route handler

        Returns:
            Response: HTTP response, potentially an error response
        """
        try:
            response = await call_next(request)
            return response

        except DomainException as e:
            status_code, title = error_status(e)
            if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
                logger.error(f"{title}: {str(e)}")
            else:
                logger.warning(f"{title}: {str(e)}")
            return JSONResponse(
                status_code=status_code,
                content={
                    "error": title,
                    "message": public_message(e, status_code),
                    "type": type(e).__name__,
                    "error_code": e.error_code
                },
                headers=error_headers(e)
            )

        except ValueError as e:
            logger.warning(f"Value error: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Validation Error",
                    "message": str(e),
                    "type": "ValueError",
                    "error_code": "VALIDATION_ERROR"
                }
            )

        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal Server Error",
                    "message": "An unexpected error occurred",
                    "type": "InternalServerError",
                    "error_code": "INTERNAL_ERROR"
                }
            )
