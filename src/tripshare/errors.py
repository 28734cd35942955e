"""
Custom exceptions and error handling for Trip Share.

Defines application-specific exceptions with error codes for consistent
error handling across services, Lambda handlers and client communication.

Usage:
    from tripshare.errors import NotFoundError, ErrorCode

    raise NotFoundError("No companion edge a -> b", code=ErrorCode.COMPANION_NOT_FOUND)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_PERMISSION_LEVEL = "INVALID_PERMISSION_LEVEL"
    INVALID_ITEM_TYPE = "INVALID_ITEM_TYPE"
    SELF_COMPANION = "SELF_COMPANION"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    COMPANION_NOT_FOUND = "COMPANION_NOT_FOUND"
    ATTENDEE_NOT_FOUND = "ATTENDEE_NOT_FOUND"

    # Uniqueness errors
    CONFLICT = "CONFLICT"
    COMPANION_EXISTS = "COMPANION_EXISTS"
    ATTENDEE_EXISTS = "ATTENDEE_EXISTS"

    # Authorization errors
    PERMISSION_DENIED = "PERMISSION_DENIED"
    CREATOR_NOT_REMOVABLE = "CREATOR_NOT_REMOVABLE"

    # Cascade errors
    CASCADE_FAILED = "CASCADE_FAILED"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.INVALID_PERMISSION_LEVEL: "That permission level is not supported.",
    ErrorCode.INVALID_ITEM_TYPE: "That item type is not supported.",
    ErrorCode.SELF_COMPANION: "You cannot add yourself as a companion.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.USER_NOT_FOUND: "No user was found with that email, phone or id.",
    ErrorCode.ITEM_NOT_FOUND: "The requested trip or item was not found.",
    ErrorCode.COMPANION_NOT_FOUND: "Companion relationship not found.",
    ErrorCode.ATTENDEE_NOT_FOUND: "Attendee not found.",
    ErrorCode.CONFLICT: "This record already exists.",
    ErrorCode.COMPANION_EXISTS: "This person is already your companion.",
    ErrorCode.ATTENDEE_EXISTS: "This person is already an attendee.",
    ErrorCode.PERMISSION_DENIED: "You do not have permission to perform this action.",
    ErrorCode.CREATOR_NOT_REMOVABLE: "The creator cannot be removed as an attendee.",
    ErrorCode.CASCADE_FAILED: "Sharing changes could not be applied. No changes were saved; please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}


class TripShareError(Exception):
    """Base exception for all Trip Share errors."""

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])


class ValidationError(TripShareError):
    """Malformed enum value or id. Never retried."""

    default_code = ErrorCode.VALIDATION_ERROR


class NotFoundError(TripShareError):
    """Missing companion, attendee, user or item."""

    default_code = ErrorCode.NOT_FOUND


class ConflictError(TripShareError):
    """Uniqueness violation on add."""

    default_code = ErrorCode.CONFLICT


class PermissionDeniedError(TripShareError):
    """The permission resolver refused the requested action."""

    default_code = ErrorCode.PERMISSION_DENIED


class CascadeFailureError(TripShareError):
    """A multi-row cascade failed part way and was rolled back as a whole.

    Safe to retry: the rollback guarantees no partial attendee set was committed.
    """

    default_code = ErrorCode.CASCADE_FAILED

    def __init__(
        self,
        message: str,
        operation: str,
        trip_id: object = None,
        applied: int = 0,
        failed_item: tuple[str, object] | None = None,
        code: ErrorCode | None = None,
    ):
        super().__init__(message, code=code)
        self.operation = operation
        self.trip_id = trip_id
        self.applied = applied
        self.failed_item = failed_item


class AuthenticationError(TripShareError):
    """The request carried no authenticated user."""

    default_code = ErrorCode.AUTH_FAILED
