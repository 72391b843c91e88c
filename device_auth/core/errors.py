"""
Error taxonomy for the device authorization flow.

Every failure the core can produce is a subclass of DeviceAuthorizationError
carrying a machine-readable OAuth error code and the HTTP status the
protocol boundary should answer with.
"""

from typing import Any

from pydantic import BaseModel, Field


class OAuthErrorResponse(BaseModel):
    """
    Wire-level OAuth error body (RFC 6749 section 5.2).

    Example:
        {
            "error": "invalid_scope",
            "error_description": "Invalid scope: write"
        }
    """

    error: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["invalid_client", "invalid_scope", "server_error"],
    )
    error_description: str | None = Field(
        None,
        description="Human-readable error message",
        examples=["Given client ID does not match authenticated client"],
    )


class ErrorCode:
    """OAuth error codes used by the device authorization endpoint."""

    # Client errors (4xx)
    UNAUTHORIZED = "unauthorized"
    INVALID_CLIENT = "invalid_client"
    INVALID_SCOPE = "invalid_scope"
    METHOD_NOT_ALLOWED = "method_not_allowed"

    # Server errors (5xx)
    SERVER_ERROR = "server_error"


def create_error_detail(error_code: str, message: str | None = None) -> dict[str, Any]:
    """
    Build an OAuth error body.

    Args:
        error_code: Machine-readable error code
        message: Human-readable description, omitted when empty

    Returns:
        Dictionary with ``error`` and, when given, ``error_description``
    """
    content: dict[str, Any] = {"error": error_code}
    if message:
        content["error_description"] = message
    return content


# ========================================
# Device Authorization Exceptions
# ========================================


class DeviceAuthorizationError(Exception):
    """Base exception for device authorization failures."""

    error_code: str = ErrorCode.SERVER_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return create_error_detail(self.error_code, self.message)


class UnauthenticatedError(DeviceAuthorizationError):
    """The caller is not an authenticated principal."""

    error_code = ErrorCode.UNAUTHORIZED
    status_code = 401

    def __init__(
        self,
        message: str = "User must be authenticated before device authorization can be completed.",
    ):
        super().__init__(message)


class InvalidClientError(DeviceAuthorizationError):
    """Base for client identification failures."""

    error_code = ErrorCode.INVALID_CLIENT
    status_code = 401


class MissingClientIdError(InvalidClientError):
    """Neither the request nor the principal yields a client id."""

    def __init__(self, message: str = "A client id must be provided"):
        super().__init__(message)


class ClientMismatchError(InvalidClientError):
    """
    The requested client id differs from the authenticated one.

    Attributes:
        requested_client_id: client_id sent with the request
        authenticated_client_id: client id derived from the principal
    """

    def __init__(self, requested_client_id: str, authenticated_client_id: str):
        super().__init__("Given client ID does not match authenticated client")
        self.requested_client_id = requested_client_id
        self.authenticated_client_id = authenticated_client_id


class UnknownClientError(InvalidClientError):
    """The client id is not present in the client registry."""

    def __init__(self, client_id: str):
        super().__init__(f"No client with requested id: {client_id}")
        self.client_id = client_id


class ScopeNotAllowedError(DeviceAuthorizationError):
    """
    Requested scope is not a subset of the client's allowed scopes.

    Attributes:
        invalid_scopes: requested scopes outside the allowed set
        allowed_scopes: scopes registered for the client
    """

    error_code = ErrorCode.INVALID_SCOPE
    status_code = 400

    def __init__(self, invalid_scopes: set[str], allowed_scopes: set[str]):
        super().__init__(f"Invalid scope: {' '.join(sorted(invalid_scopes))}")
        self.invalid_scopes = frozenset(invalid_scopes)
        self.allowed_scopes = frozenset(allowed_scopes)


class CodeGenerationExhaustedError(DeviceAuthorizationError):
    """
    No unique (device_code, user_code) pair could be stored.

    Indicates a broken entropy source or an undersized code space,
    never a bad request.
    """

    error_code = ErrorCode.SERVER_ERROR
    status_code = 500

    def __init__(self, attempts: int):
        super().__init__(f"Unable to generate unique device codes after {attempts} attempts")
        self.attempts = attempts
