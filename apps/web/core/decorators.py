"""
Decorators for request handling and validation.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.http import HttpRequest, JsonResponse

from apps.web.core.exceptions import Unauthenticated
from apps.web.core.identity import Principal


def require_principal(request: HttpRequest) -> Principal:
    """
    Return the principal attached by BearerTokenMiddleware.

    Raises:
        Unauthenticated: If no valid credential came with the request
        UnknownPrincipal: If the credential's account no longer exists
    """
    principal: Principal | None = getattr(request, "principal", None)
    if principal is None:
        error = getattr(request, "auth_error", None)
        if error is not None:
            raise error
        raise Unauthenticated("No token provided")
    return principal


def principal_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that rejects requests without a valid bearer token.

    Runs before the view touches any resource, so an anonymous request never
    triggers an ownership lookup.
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        require_principal(request)
        return view_func(request, *args, **kwargs)

    return wrapper


def idempotency_key_supported(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that replays responses for a repeated Idempotency-Key header.

    Requests without the header run normally. Keys are scoped to the
    requesting principal, so one account can never replay another's
    response. Cached responses are stored for 24 hours.

    Usage:
        @principal_required
        @idempotency_key_supported
        def create_order(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")
        if not key:
            return view_func(request, *args, **kwargs)

        principal = getattr(request, "principal", None)
        owner = principal.id if principal is not None else "anonymous"
        cache_key = f"idempotency:{owner}:{key}"
        cached = cache.get(cache_key)

        if cached:
            return JsonResponse(
                cached["data"],
                status=cached["status"],
            )

        response = view_func(request, *args, **kwargs)

        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                },
                timeout=86400,  # 24 hours
            )

        return response

    return wrapper
