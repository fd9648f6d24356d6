"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    SESSION_MISMATCH = "session_mismatch"
    VIDEO_NOT_FOUND = "video_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    ENTITY_CREATION_FAILED = "entity_creation_failed"
    STORAGE_SESSION_FAILED = "storage_session_failed"
    PART_URL_FAILED = "part_url_failed"
    FINALIZATION_FAILED = "finalization_failed"
    SESSION_FINALIZED = "session_finalized"
    DISPATCH_FAILED = "dispatch_failed"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.SESSION_MISMATCH: {
        "title": "Upload Session Mismatch",
        "message": "The upload key or session id does not belong to this video.",
        "action": "Use the key and upload id returned when the video was created.",
    },
    ErrorCategory.VIDEO_NOT_FOUND: {
        "title": "Video Not Found",
        "message": "The requested video could not be found.",
        "action": "Check the video id or create a new video.",
    },
    ErrorCategory.SESSION_NOT_FOUND: {
        "title": "Upload Session Not Found",
        "message": "No upload session exists for this video.",
        "action": "Reopen the upload session for this video before uploading parts.",
    },
    ErrorCategory.ENTITY_CREATION_FAILED: {
        "title": "Video Creation Failed",
        "message": "The video record could not be saved.",
        "action": "Please try again later.",
    },
    ErrorCategory.STORAGE_SESSION_FAILED: {
        "title": "Upload Session Failed",
        "message": "The storage service could not open an upload session for this video.",
        "action": "Reopen the upload session for this video or try again later.",
    },
    ErrorCategory.PART_URL_FAILED: {
        "title": "Upload URLs Unavailable",
        "message": "Upload URLs could not be generated for the requested parts.",
        "action": "Request the full batch of part URLs again.",
    },
    ErrorCategory.FINALIZATION_FAILED: {
        "title": "Upload Completion Failed",
        "message": "The storage service rejected the uploaded parts.",
        "action": "Check that every part was uploaded and its ETag reported, then retry.",
    },
    ErrorCategory.SESSION_FINALIZED: {
        "title": "Upload Already Finalized",
        "message": "This upload session has already been completed or aborted.",
        "action": "Create a new video to upload again.",
    },
    ErrorCategory.DISPATCH_FAILED: {
        "title": "Processing Could Not Start",
        "message": "The upload completed but the processing job could not be started.",
        "action": "Please contact support with the video id.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """
    Raised when input to a boundary operation is malformed.

    Always raised before any side effect is performed.
    """
    pass


class SessionMismatchError(ValidationError):
    """Raised when a storage key / upload id pair does not match the video's session."""
    pass


class VideoNotFoundError(DomainError):
    """Raised when a video is not found."""
    pass


class UploadSessionNotFoundError(DomainError):
    """Raised when a video has no upload session."""
    pass


class EntityCreationError(DomainError):
    """Raised when the video record cannot be persisted."""
    pass


class StorageSessionError(DomainError):
    """
    Raised when the storage backend cannot begin or abort a multipart session.

    When raised by video creation the video record already exists
    in CREATED state without a session.
    """
    pass


class PartUrlError(DomainError):
    """Raised when any part URL of a batch cannot be generated."""
    pass


class FinalizationError(DomainError):
    """Raised when the storage backend rejects the part set of a session."""
    pass


class SessionAlreadyFinalizedError(DomainError):
    """Raised when a completed or aborted session is used again."""
    pass


class DispatchError(DomainError):
    """Raised when the compute job launcher refuses a job."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        result = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.technical_message:
            result["details"] = self.technical_message
        return result


# Ordered most specific first: SessionMismatchError must win over ValidationError.
_DOMAIN_ERROR_MAP = (
    (SessionMismatchError, ErrorCategory.SESSION_MISMATCH, 400),
    (ValidationError, ErrorCategory.INVALID_REQUEST, 400),
    (VideoNotFoundError, ErrorCategory.VIDEO_NOT_FOUND, 404),
    (UploadSessionNotFoundError, ErrorCategory.SESSION_NOT_FOUND, 404),
    (EntityCreationError, ErrorCategory.ENTITY_CREATION_FAILED, 500),
    (StorageSessionError, ErrorCategory.STORAGE_SESSION_FAILED, 502),
    (PartUrlError, ErrorCategory.PART_URL_FAILED, 502),
    (FinalizationError, ErrorCategory.FINALIZATION_FAILED, 409),
    (SessionAlreadyFinalizedError, ErrorCategory.SESSION_FINALIZED, 409),
    (DispatchError, ErrorCategory.DISPATCH_FAILED, 502),
)


def categorize_domain_error(error: Exception) -> tuple[ErrorCategory, int]:
    """
    Map an exception to its error category and HTTP status code.

    Args:
        error: Exception raised by a domain or application service

    Returns:
        Tuple of (category, status_code); SYSTEM_ERROR/500 for unknown errors
    """
    for error_type, category, status_code in _DOMAIN_ERROR_MAP:
        if isinstance(error, error_type):
            return category, status_code
    return ErrorCategory.SYSTEM_ERROR, 500


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
