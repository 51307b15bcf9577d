"""Custom exception hierarchy for PDF Vault."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Local record errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    DUPLICATE_NAME = "DUPLICATE_NAME"

    # Remote storage errors
    REMOTE_NODE_NOT_FOUND = "REMOTE_NODE_NOT_FOUND"
    REMOTE_CONNECTION_FAILED = "REMOTE_CONNECTION_FAILED"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"
    REMOTE_ERROR = "REMOTE_ERROR"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class VaultException(Exception):
    """
    Base exception for all PDF Vault errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class FolderNotFoundError(VaultException):
    """Folder missing or not owned by the caller."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class FileRecordNotFoundError(VaultException):
    """File record missing or not owned by the caller."""

    def __init__(self, file_id: str):
        super().__init__(
            f"File not found: {file_id}",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"file_id": file_id}
        )


class UserNotFoundError(VaultException):
    """User account does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            ErrorCode.USER_NOT_FOUND,
            status_code=404,
            details={"user_id": user_id}
        )


class DuplicateNameError(VaultException):
    """A sibling folder with the same name already exists for this owner."""

    def __init__(self, name: str, parent_id: Optional[str] = None):
        super().__init__(
            "Folder with this name already exists in this location",
            ErrorCode.DUPLICATE_NAME,
            status_code=400,
            details={"name": name, "parent_id": parent_id}
        )


class RemoteNodeNotFoundError(VaultException):
    """The remote node named by a stored locator cannot be resolved (drift)."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Remote storage node not found: {node_id}",
            ErrorCode.REMOTE_NODE_NOT_FOUND,
            status_code=404,
            details={"node_id": node_id}
        )


class RemoteConnectionError(VaultException):
    """Could not open a session with the remote storage provider."""

    def __init__(self, message: str = "Could not connect to remote storage"):
        super().__init__(
            message,
            ErrorCode.REMOTE_CONNECTION_FAILED,
            status_code=502,
        )


class RemoteTransientError(VaultException):
    """Remote storage is rate limiting or temporarily unreachable.

    Retried internally; surfaces only once the retry budget is spent.
    """

    def __init__(self, message: str = "Remote storage is temporarily unavailable", retry_after: Optional[float] = None):
        self.retry_after = retry_after
        details = {"retry_after": retry_after} if retry_after is not None else {}
        super().__init__(
            message,
            ErrorCode.REMOTE_UNAVAILABLE,
            status_code=503,
            details=details
        )


class RemoteFatalError(VaultException):
    """Remote storage rejected the operation for a non-transient reason."""

    def __init__(self, message: str, status: Optional[int] = None):
        details = {"remote_status": status} if status is not None else {}
        super().__init__(
            message,
            ErrorCode.REMOTE_ERROR,
            status_code=500,
            details=details
        )


class ValidationError(VaultException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None, errors: Optional[list] = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(VaultException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class DatabaseError(VaultException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
