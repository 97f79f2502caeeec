"""
Error taxonomy for gitnotes.

Every failure the document store can surface is one of:
- NotFoundError: path or entity absent (also the bootstrap signal)
- ConflictError: blob-hash precondition failed
- AlreadyExistsError: create attempted on an existing path
- NotReadyError: used before authentication / tree initialization
- RemoteError: any other non-2xx response from the remote

Nothing here retries. Callers decide whether to reload and try again.
"""

from typing import Any, Dict, Optional


# User-facing text for common remote status codes
STATUS_MESSAGES = {
    400: "Bad request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    409: "The remote changed since it was last read",
    413: "Content exceeds the allowed size",
    422: "The remote rejected the request",
    429: "Rate limit exceeded, try again later",
    500: "Unknown remote error",
    503: "Service unavailable",
}


def message_for_status(status: Optional[int]) -> str:
    """
    Get a user-facing message for a remote status code.

    Args:
        status: HTTP status code, or None for network failures

    Returns:
        Human readable message
    """
    if status is None:
        return "Could not reach the remote"
    return STATUS_MESSAGES.get(status, STATUS_MESSAGES[500])


class GitNotesError(Exception):
    """
    Base exception for all gitnotes errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result = {
            'error': self.message,
            'type': type(self).__name__,
        }
        if self.details:
            result['details'] = self.details
        return result


class NotReadyError(GitNotesError):
    """Raised when an operation runs before the session is initialized."""


class MetadataParseError(GitNotesError):
    """Raised when the metadata index file is not valid JSON."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Metadata index at {path} is malformed: {reason}",
            details={'path': path},
        )
        self.path = path


class RemoteError(GitNotesError):
    """
    Raised for any non-2xx response from the remote.

    Attributes:
        status: HTTP status code (None when the request never completed)
    """

    def __init__(
        self,
        status: Optional[int],
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message or message_for_status(status), details=details)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['status'] = self.status
        return result

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"[{self.status}] {self.message}"


class NetworkError(RemoteError):
    """Raised when the remote could not be reached at all."""

    def __init__(self, message: str):
        super().__init__(None, message)


class AuthenticationError(RemoteError):
    """Raised when the token is missing, invalid or expired."""


class RateLimitError(RemoteError):
    """Raised when the remote rejects a request because of rate limiting."""


class NotFoundError(RemoteError):
    """Raised when a path or entity does not exist."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(404, message, details=details)


class ConflictError(RemoteError):
    """Raised when a blob-hash precondition does not match the remote."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(409, message, details=details)


class AlreadyExistsError(RemoteError):
    """Raised when creating something that already exists."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(422, message, details=details)


class NoteNotFoundError(NotFoundError):
    """Raised when a note id is not in the metadata index."""

    def __init__(self, note_id: str):
        super().__init__(f"Note with ID '{note_id}' not found", details={'note_id': note_id})
        self.note_id = note_id


class TagNotFoundError(NotFoundError):
    """Raised when a tag id is not in the metadata index."""

    def __init__(self, tag_id: str):
        super().__init__(f"Tag with ID '{tag_id}' not found", details={'tag_id': tag_id})
        self.tag_id = tag_id
