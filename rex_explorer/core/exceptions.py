"""
Custom exception hierarchy for the repository explorer.
Provides structured error handling with proper HTTP status codes.
"""

from typing import Any, Optional


class RexError(Exception):
    """Base exception for all repository explorer errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(RexError):
    """Request validation failed."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=details,
            status_code=400,
        )


class InvalidRequestError(ValidationError):
    """Invalid request parameters."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message=message, details=details)
        self.code = "INVALID_REQUEST"


# =============================================================================
# Not Found Errors (404)
# =============================================================================


class NotFoundError(RexError):
    """Requested resource not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        msg = message or f"{resource_type} not found"
        if resource_id:
            msg = f"{resource_type} with ID '{resource_id}' not found"

        super().__init__(
            message=msg,
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
            status_code=404,
        )


class ExplorerSessionNotFoundError(NotFoundError):
    """Explorer session not found."""

    def __init__(self, session_id: str) -> None:
        super().__init__(resource_type="Explorer session", resource_id=session_id)
        self.code = "SESSION_NOT_FOUND"


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class StateTransitionError(RexError):
    """Invalid state transition."""

    def __init__(self, from_state: str, to_state: str) -> None:
        super().__init__(
            message=f"Cannot move from '{from_state}' to '{to_state}'",
            code="INVALID_TRANSITION",
            details={"from": from_state, "to": to_state},
            status_code=409,
        )


# =============================================================================
# External Service Errors (502)
# =============================================================================


class ExternalServiceError(RexError):
    """Error communicating with external service."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=f"{service_name} error: {message}",
            code="EXTERNAL_SERVICE_ERROR",
            details={"service": service_name, **(details or {})},
            status_code=502,
        )


class PlatformError(ExternalServiceError):
    """Transport or HTTP failure talking to the platform or view-service."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(service_name=service_name, message=message, details=details)
        self.code = "PLATFORM_ERROR"


class GatewayResponseError(ExternalServiceError):
    """A response envelope reported failure or could not be understood."""

    def __init__(
        self,
        message: str,
        related_http_code: Optional[int] = None,
        system_action: Optional[str] = None,
        user_action: Optional[str] = None,
    ) -> None:
        details: dict[str, Any] = {"related_http_code": related_http_code}
        if system_action:
            details["system_action"] = system_action
        if user_action:
            details["user_action"] = user_action

        super().__init__(service_name="Repository services", message=message, details=details)
        # Keep the raw text; the service prefix is only for logs
        self.message = message
        self.code = "GATEWAY_RESPONSE_ERROR"
        self.related_http_code = related_http_code
