"""
API middleware - principal resolution and error rendering.
"""

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse, JsonResponse

from apps.web.core.exceptions import APIError, Unauthenticated, UnknownPrincipal
from apps.web.core.identity import (
    AuthConfig,
    IdentityResolver,
    TokenService,
    UserAccounts,
    bearer_credential,
)

logger = logging.getLogger(__name__)


class BearerTokenMiddleware:
    """
    Middleware that attaches the current principal to the request.

    Sets request.principal to the resolved Principal, or None when no valid
    credential was sent. A credential that was sent but rejected is kept in
    request.auth_error so views requiring a principal can report why.
    Catalog reads proceed anonymously either way.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response
        self.resolver = IdentityResolver(
            TokenService(AuthConfig.from_settings()),
            UserAccounts(),
        )

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.principal = None  # type: ignore[attr-defined]
        request.auth_error = None  # type: ignore[attr-defined]

        try:
            credential = bearer_credential(request.headers.get("Authorization"))
            if credential is not None:
                request.principal = self.resolver.resolve(credential)  # type: ignore[attr-defined]
        except (Unauthenticated, UnknownPrincipal) as e:
            logger.warning("Rejected credential on %s: %s", request.path, e.message)
            request.auth_error = e  # type: ignore[attr-defined]

        return self.get_response(request)


class APIErrorMiddleware:
    """
    Middleware that renders APIError exceptions raised by views as JSON.

    Any other exception falls through to Django's default handling.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(
        self, request: HttpRequest, exception: Exception
    ) -> HttpResponse | None:
        if not isinstance(exception, APIError):
            return None
        if exception.status_code >= 500:
            logger.error("API error on %s: %s", request.path, exception.message)
        return JsonResponse(exception.as_dict(), status=exception.status_code)
