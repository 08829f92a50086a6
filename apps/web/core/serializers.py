"""
Pydantic schemas for account API requests and responses.
"""

import json
from datetime import datetime
from typing import Literal, TypeVar

from django.http import HttpRequest

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from apps.web.core.exceptions import RequestValidationError

_S = TypeVar("_S", bound=BaseModel)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# =============================================================================
# Request Parsing
# =============================================================================


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str
    message: str


def parse_body(request: HttpRequest, schema: type[_S]) -> _S:
    """
    Parse and validate a JSON request body.

    Raises:
        RequestValidationError: If the body is not JSON or fails the schema
    """
    try:
        body = json.loads(request.body or b"{}")
    except json.JSONDecodeError as e:
        raise RequestValidationError("Invalid JSON in request body") from e

    try:
        return schema.model_validate(body)
    except PydanticValidationError as e:
        details = [
            ValidationErrorDetail(
                field=".".join(str(loc) for loc in err["loc"]),
                message=err["msg"],
            ).model_dump()
            for err in e.errors()
        ]
        raise RequestValidationError("Validation error", details=details) from e


# =============================================================================
# Account Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["customer", "owner"] = "customer"


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: str
    password: str


class UserSchema(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


class AdminUserSchema(UserSchema):
    """Account as listed to admins."""

    is_active: bool
    date_joined: datetime


class AuthResponse(BaseModel):
    """Response for register and login."""

    message: str
    token: str
    user: UserSchema


class UserListResponse(BaseModel):
    """Response for GET /api/admin/users."""

    users: list[AdminUserSchema]
