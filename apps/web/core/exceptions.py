"""
API error taxonomy.

Every error that can end a request carries a stable ``code`` and the HTTP
status the transport layer renders it with. None of them are retried.
"""

from typing import Any


class APIError(Exception):
    """Base exception for errors rendered as JSON responses."""

    status_code = 500
    code = "error"

    def __init__(
        self,
        message: str,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []

    def as_dict(self) -> dict[str, Any]:
        """Response body for this error."""
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class Unauthenticated(APIError):
    """Credential is absent, malformed, expired, or has a bad signature."""

    status_code = 401
    code = "unauthenticated"


class UnknownPrincipal(APIError):
    """Credential is valid but its account no longer exists."""

    status_code = 401
    code = "unknown_principal"


class Forbidden(APIError):
    """The authorization policy denied the action."""

    status_code = 403
    code = "forbidden"


class NotResourceOwner(Forbidden):
    """Principal does not own the restaurant behind the resource."""

    code = "not_resource_owner"


class RoleNotPermitted(Forbidden):
    """Principal's role may not perform the action at all."""

    code = "role_not_permitted"


class InvalidTransition(APIError):
    """Requested status is not reachable from the current one."""

    status_code = 409
    code = "invalid_transition"


class ResourceNotFound(APIError):
    """Referenced restaurant, menu item, order or account does not exist."""

    status_code = 404
    code = "not_found"


class RequestValidationError(APIError):
    """Request body failed validation."""

    status_code = 400
    code = "validation_error"
