"""
Account API views - registration, login and admin user listing.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.web.core.decorators import principal_required, require_principal
from apps.web.core.exceptions import (
    RequestValidationError,
    ResourceNotFound,
    Unauthenticated,
)
from apps.web.core.identity import AuthConfig, TokenService
from apps.web.core.policy import Action, authorize
from apps.web.core.serializers import (
    AdminUserSchema,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserListResponse,
    UserSchema,
    ValidationErrorDetail,
    parse_body,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _duplicate_email() -> RequestValidationError:
    return RequestValidationError(
        "User already exists",
        details=[
            ValidationErrorDetail(
                field="email", message="An account with this email already exists"
            ).model_dump()
        ],
    )


def _auth_response(user: "User", message: str, status: int) -> JsonResponse:
    """Issue a token for the user and build the auth response."""
    token = TokenService(AuthConfig.from_settings()).issue(user.pk, user.role)
    response = AuthResponse(
        message=message,
        token=token,
        user=UserSchema.model_validate(user),
    )
    return JsonResponse(response.model_dump(mode="json"), status=status)


@csrf_exempt
@require_POST
def register(request: HttpRequest) -> JsonResponse:
    """
    POST /api/auth/register

    Create a customer or owner account and return a token for it.
    Admin accounts are never self-registered.

    Request body: RegisterRequest schema
    Response: AuthResponse schema (201) or validation error (400)
    """
    payload = parse_body(request, RegisterRequest)
    email = payload.email.lower()

    if User.objects.filter(email__iexact=email).exists():
        raise _duplicate_email()

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=payload.password,
                name=payload.name,
                role=payload.role,
            )
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        raise _duplicate_email() from e

    logger.info("Registered %s account %s", user.role, user.pk)

    return _auth_response(user, "User registered successfully", status=201)


@csrf_exempt
@require_POST
def login(request: HttpRequest) -> JsonResponse:
    """
    POST /api/auth/login

    Exchange email and password for a token.

    Response: AuthResponse schema (200) or 401
    """
    payload = parse_body(request, LoginRequest)

    user = User.objects.filter(email__iexact=payload.email, is_active=True).first()
    if user is None or not user.check_password(payload.password):
        logger.warning("Failed login for %s", payload.email)
        raise Unauthenticated("Invalid credentials")

    return _auth_response(user, "Login successful", status=200)


@require_GET
@principal_required
def me(request: HttpRequest) -> JsonResponse:
    """
    GET /api/auth/me

    Return the account behind the bearer token.
    """
    principal = require_principal(request)
    try:
        user = User.objects.get(pk=principal.id)
    except User.DoesNotExist as exc:
        raise ResourceNotFound("User not found") from exc

    return JsonResponse(UserSchema.model_validate(user).model_dump(mode="json"))


@require_GET
@principal_required
def admin_users(request: HttpRequest) -> JsonResponse:
    """
    GET /api/admin/users

    List every account. Admin only.
    """
    authorize(require_principal(request), Action.ADMIN_READ_ALL).enforce()

    response = UserListResponse(
        users=[AdminUserSchema.model_validate(u) for u in User.objects.all()]
    )
    return JsonResponse(response.model_dump(mode="json"))
