"""Domain-specific exceptions for service layer operations.

Services raise these inside an operation and convert them into result objects
at the operation boundary, so callers only ever see an ``error_code`` and a
message. Mapping a code to an HTTP status is left to the API layer.

Architecture:
- ServiceError: Base exception with correlation ID and context support
- Category Base Classes: AuthError, ValidationError, BusinessError, InfrastructureError
- Specific Exceptions: one class per failure kind of the sharing and friendship flows
"""

from enum import Enum
from typing import Any, Dict, Optional, Union


class ErrorSeverity(Enum):
    """Error severity levels for logging and monitoring."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"
    SYSTEM = "system"


class ServiceError(Exception):
    """Base exception for all service layer errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        correlation_id: Request correlation ID for tracing
        details: Additional error context (sanitized for logging)
        user_message: User-friendly message for client display
        severity: Error severity level for logging/monitoring
        category: Error category for classification
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SERVICE_ERROR",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.correlation_id = correlation_id
        self.details = details or {}
        self.user_message = user_message or message
        self.severity = severity
        self.category = category

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


# =============================================================================
# AUTHENTICATION & AUTHORIZATION ERRORS
# =============================================================================

class AuthError(ServiceError):
    """Base class for authentication and authorization errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.AUTHENTICATION
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            severity=severity,
            category=category
        )


class UnauthenticatedError(AuthError):
    """No caller identity was supplied for an operation that needs one."""

    def __init__(self, correlation_id: Optional[str] = None):
        super().__init__(
            message="Caller is not authenticated",
            error_code="UNAUTHENTICATED",
            correlation_id=correlation_id,
            user_message="Unauthorized. Please sign in.",
            severity=ErrorSeverity.LOW
        )


class NotOwnerError(AuthError):
    """Caller does not own the place being shared."""

    def __init__(
        self,
        place_id: int,
        user_id: int,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="Caller does not own the place",
            error_code="NOT_OWNER",
            correlation_id=correlation_id,
            details={"place_id": place_id, "user_id": user_id},
            user_message="You can only share your own pinories",
            category=ErrorCategory.AUTHORIZATION
        )


class ForbiddenError(AuthError):
    """Caller is not allowed to act on the resource."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[int, str],
        user_id: int,
        user_message: str = "Forbidden",
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"User may not act on {resource_type}",
            error_code="FORBIDDEN",
            correlation_id=correlation_id,
            details={"resource_type": resource_type, "resource_id": resource_id, "user_id": user_id},
            user_message=user_message,
            category=ErrorCategory.AUTHORIZATION
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(ServiceError):
    """Input validation failed."""

    def __init__(
        self,
        field: str,
        message: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Validation failed for {field}: {message}",
            error_code="INVALID_INPUT",
            correlation_id=correlation_id,
            details={"field": field, "validation_message": message},
            user_message=f"Invalid {field}: {message}",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION
        )


# =============================================================================
# BUSINESS DOMAIN ERRORS
# =============================================================================

class BusinessError(ServiceError):
    """Base class for business domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.BUSINESS_RULE
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            severity=severity,
            category=category
        )


class ResourceNotFoundError(BusinessError):
    """Base class for resource not found errors."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[int, str],
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"{resource_type} not found",
            error_code=f"{resource_type.upper()}_NOT_FOUND",
            correlation_id=correlation_id,
            details={"resource_type": resource_type, "resource_id": resource_id},
            user_message=f"{resource_type.capitalize()} not found",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.RESOURCE_NOT_FOUND
        )


class PlaceNotFoundError(ResourceNotFoundError):
    def __init__(self, place_id: int, correlation_id: Optional[str] = None):
        super().__init__("place", place_id, correlation_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: int, correlation_id: Optional[str] = None):
        super().__init__("user", user_id, correlation_id)


# =============================================================================
# FRIENDSHIP DOMAIN ERRORS
# =============================================================================

class FriendshipError(BusinessError):
    """Friendship-related errors."""
    pass


class FriendshipNotFoundError(ResourceNotFoundError):
    def __init__(self, friendship_id: int, correlation_id: Optional[str] = None):
        super().__init__("friendship", friendship_id, correlation_id)


class SelfRequestError(FriendshipError):
    """A user tried to befriend or block themselves."""

    def __init__(self, user_id: int, correlation_id: Optional[str] = None):
        super().__init__(
            message="Requester and addressee are the same user",
            error_code="SELF_REQUEST",
            correlation_id=correlation_id,
            details={"user_id": user_id},
            user_message="Cannot send friend request to yourself",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION
        )


class AlreadyFriendsError(FriendshipError):
    def __init__(self, friendship_id: int, correlation_id: Optional[str] = None):
        super().__init__(
            message="Users are already friends",
            error_code="ALREADY_FRIENDS",
            correlation_id=correlation_id,
            details={"friendship_id": friendship_id},
            user_message="Already friends",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.CONFLICT
        )


class RequestAlreadySentError(FriendshipError):
    def __init__(self, friendship_id: int, correlation_id: Optional[str] = None):
        super().__init__(
            message="A pending request already exists for this pair",
            error_code="REQUEST_ALREADY_SENT",
            correlation_id=correlation_id,
            details={"friendship_id": friendship_id},
            user_message="Friend request already sent",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.CONFLICT
        )


class RequestForbiddenError(FriendshipError):
    """The pair is blocked; no new request may be created."""

    def __init__(self, friendship_id: int, correlation_id: Optional[str] = None):
        super().__init__(
            message="Friendship is blocked",
            error_code="REQUEST_FORBIDDEN",
            correlation_id=correlation_id,
            details={"friendship_id": friendship_id},
            user_message="Cannot send friend request",
            category=ErrorCategory.AUTHORIZATION
        )


class RequestNotPendingError(FriendshipError):
    def __init__(self, friendship_id: int, status: str, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Friend request is {status}, not pending",
            error_code="REQUEST_NOT_PENDING",
            correlation_id=correlation_id,
            details={"friendship_id": friendship_id, "status": status},
            user_message="Request is not pending",
            severity=ErrorSeverity.LOW
        )


# =============================================================================
# SHARE DOMAIN ERRORS
# =============================================================================

class ShareError(BusinessError):
    """Share-link-related errors."""
    pass


class ShareNotFoundError(ResourceNotFoundError):
    def __init__(self, share_slug: str, correlation_id: Optional[str] = None):
        super().__init__("share", share_slug, correlation_id)
        self.user_message = "Share link not found"


class ShareAccessDeniedError(ShareError):
    """The access policy refused the viewer.

    ``reason`` is one of the ``AccessReason`` values; expired and revoked links
    get their own error codes so the transport can answer "gone".
    """

    CODES = {"expired": "SHARE_EXPIRED", "revoked": "SHARE_REVOKED"}

    def __init__(
        self,
        share_slug: str,
        reason: str,
        user_message: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Access to share denied: {reason}",
            error_code=self.CODES.get(reason, "ACCESS_DENIED"),
            correlation_id=correlation_id,
            details={"share_slug": share_slug, "reason": reason},
            user_message=user_message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.AUTHORIZATION
        )
        self.reason = reason


# =============================================================================
# INVITATION ERRORS
# =============================================================================

class InvitationNotFoundError(ResourceNotFoundError):
    def __init__(self, invite_code: str, correlation_id: Optional[str] = None):
        super().__init__("invitation", invite_code, correlation_id)
        self.user_message = "Invite not found"


class InvitationUnavailableError(FriendshipError):
    """The invitation exists but can no longer be used.

    ``reason`` is ``deactivated``, ``expired`` or ``usage-limit``.
    """

    MESSAGES = {
        "deactivated": "Invite has been deactivated",
        "expired": "Invite has expired",
        "usage-limit": "Invite has reached usage limit",
    }

    def __init__(self, invite_code: str, reason: str, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Invitation unavailable: {reason}",
            error_code="INVITATION_UNAVAILABLE",
            correlation_id=correlation_id,
            details={"invite_code": invite_code, "reason": reason},
            user_message=self.MESSAGES.get(reason, "Invite is no longer valid"),
            severity=ErrorSeverity.LOW
        )
        self.reason = reason


# =============================================================================
# INFRASTRUCTURE ERRORS
# =============================================================================

class InfrastructureError(ServiceError):
    """Base class for infrastructure-related errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message or "A temporary error occurred. Please try again.",
            severity=severity,
            category=ErrorCategory.INFRASTRUCTURE
        )


class SlugExhaustedError(InfrastructureError):
    """No collision-free share slug could be produced; safe to retry."""

    def __init__(self, attempts: int, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Could not generate a unique share slug after {attempts} attempts",
            error_code="SLUG_EXHAUSTED",
            correlation_id=correlation_id,
            details={"attempts": attempts},
            user_message="Failed to generate unique share link. Please try again."
        )


class InviteCodeExhaustedError(InfrastructureError):
    """No collision-free invite code could be produced; safe to retry."""

    def __init__(self, attempts: int, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Could not generate a unique invite code after {attempts} attempts",
            error_code="INVITE_CODE_EXHAUSTED",
            correlation_id=correlation_id,
            details={"attempts": attempts},
            user_message="Failed to generate unique invite code. Please try again."
        )
