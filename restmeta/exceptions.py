"""
Custom Exception Classes for RestMeta

Every request-time failure raised by the field callbacks or the post routes
is a RestMetaError carrying an HTTP status and a machine-readable
``error_code``. The global handlers in ``restmeta.exception_handlers``
render them into the standard error envelope.

Registration-time problems (unknown resource types, conflicting field
definitions) are plain ``ValueError`` subclasses: they surface at startup
and never reach a client.
"""

from typing import Any

from fastapi import status


class RestMetaError(Exception):
    """Base exception class for all request-time errors"""

    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Input Exceptions
# ============================================================================


class InvalidPostIdError(RestMetaError):
    """Raised when the request does not address a post by a positive integer id"""

    error_code = "invalid_post_id"

    def __init__(self, raw_id: Any = None, message: str = "Invalid post ID provided."):
        details = {"post_id": raw_id} if raw_id is not None else {}
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class FieldValidationError(RestMetaError):
    """Raised when a submitted field value cannot be represented as the field's type"""

    error_code = "invalid_param"

    def __init__(self, field: str, message: str, value_type: str | None = None):
        details: dict[str, Any] = {"field": field}
        if value_type:
            details["expected_type"] = value_type
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(RestMetaError):
    """Raised when a bearer token is missing, expired or invalid"""

    error_code = "unauthorized"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class FieldPermissionError(RestMetaError):
    """Raised when the caller may not edit the addressed post"""

    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to access this field.",
        post_id: int | None = None,
        capability: str = "edit_post",
    ):
        details: dict[str, Any] = {"required_capability": capability}
        if post_id is not None:
            details["post_id"] = post_id
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


# ============================================================================
# Resource & Persistence Exceptions
# ============================================================================


class PostNotFoundError(RestMetaError):
    """Raised when a post id does not resolve to a post"""

    error_code = "post_not_found"

    def __init__(self, post_id: int):
        super().__init__(
            message=f"Post with id '{post_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"post_id": post_id},
        )


class FieldUpdateError(RestMetaError):
    """Raised when the attribute store reports a genuine write failure"""

    error_code = "update_failed"

    def __init__(self, field: str, message: str = "Failed to update the custom meta field."):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"field": field},
        )


# ============================================================================
# Registration Exceptions
# ============================================================================


class UnknownResourceTypeError(ValueError):
    """Raised when a field is registered for a resource type the host does not know"""

    def __init__(self, resource_type: str, known: set[str] | frozenset[str]):
        self.resource_type = resource_type
        super().__init__(f"Unknown resource type '{resource_type}' (known: {', '.join(sorted(known))})")


class FieldConflictError(ValueError):
    """Raised when a field name is already taken on a resource type"""

    def __init__(self, resource_type: str, name: str, reason: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"Cannot register field '{name}' on '{resource_type}': {reason}")
