"""Tests for API middleware and request decorators."""

from django.http import JsonResponse
from django.test import RequestFactory

import pytest

from apps.web.core.decorators import idempotency_key_supported, principal_required
from apps.web.core.exceptions import (
    APIError,
    InvalidTransition,
    Unauthenticated,
    UnknownPrincipal,
)
from apps.web.core.identity import Principal
from apps.web.core.middleware import APIErrorMiddleware, BearerTokenMiddleware
from apps.web.restaurant.tests.factories import UserFactory


def _ok(request):
    return JsonResponse({"ok": True})


class TestAPIErrorMiddleware:
    """Tests for APIErrorMiddleware."""

    def test_renders_api_error(self):
        request = RequestFactory().get("/api/orders/1")
        middleware = APIErrorMiddleware(_ok)

        response = middleware.process_exception(
            request, InvalidTransition("Order is already Delivered")
        )

        assert response.status_code == 409
        assert response["Content-Type"] == "application/json"

    def test_includes_details(self):
        request = RequestFactory().get("/")
        error = APIError("Boom", details=[{"field": "x", "message": "bad"}])

        response = APIErrorMiddleware(_ok).process_exception(request, error)

        assert response.status_code == 500
        assert b'"details"' in response.content

    def test_ignores_other_exceptions(self):
        request = RequestFactory().get("/")

        assert APIErrorMiddleware(_ok).process_exception(request, KeyError("x")) is None


@pytest.mark.django_db
class TestBearerTokenMiddleware:
    """Tests for BearerTokenMiddleware."""

    def test_attaches_principal(self, token_service):
        user = UserFactory(role="owner")
        token = token_service.issue(user.pk, user.role)
        request = RequestFactory().get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        BearerTokenMiddleware(_ok)(request)

        assert request.principal == Principal(id=user.pk, role="owner")
        assert request.auth_error is None

    def test_no_header_is_anonymous(self):
        request = RequestFactory().get("/")

        BearerTokenMiddleware(_ok)(request)

        assert request.principal is None
        assert request.auth_error is None

    def test_bad_token_recorded(self):
        request = RequestFactory().get("/", HTTP_AUTHORIZATION="Bearer garbage")

        response = BearerTokenMiddleware(_ok)(request)

        assert response.status_code == 200
        assert request.principal is None
        assert isinstance(request.auth_error, Unauthenticated)

    def test_deleted_account_recorded(self, token_service):
        user = UserFactory()
        token = token_service.issue(user.pk, user.role)
        user.delete()
        request = RequestFactory().get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        BearerTokenMiddleware(_ok)(request)

        assert isinstance(request.auth_error, UnknownPrincipal)


class TestPrincipalRequired:
    """Tests for principal_required."""

    def test_reraises_stored_auth_error(self):
        request = RequestFactory().get("/")
        request.principal = None
        request.auth_error = UnknownPrincipal("User not found")

        with pytest.raises(UnknownPrincipal):
            principal_required(_ok)(request)

    def test_missing_principal(self):
        request = RequestFactory().get("/")

        with pytest.raises(Unauthenticated, match="No token provided"):
            principal_required(_ok)(request)

    def test_passes_through_with_principal(self):
        request = RequestFactory().get("/")
        request.principal = Principal(id=1, role="customer")

        assert principal_required(_ok)(request).status_code == 200


class TestIdempotencyKeySupported:
    """Tests for idempotency_key_supported."""

    @pytest.fixture
    def counting_view(self):
        calls = []

        @idempotency_key_supported
        def view(request):
            calls.append(request)
            return JsonResponse({"call": len(calls)}, status=201)

        view.calls = calls
        return view

    def _request(self, key=None, principal_id=1):
        extra = {"HTTP_IDEMPOTENCY_KEY": key} if key else {}
        request = RequestFactory().post("/api/orders", **extra)
        request.principal = Principal(id=principal_id, role="customer")
        return request

    def test_without_key_always_runs(self, counting_view):
        counting_view(self._request())
        counting_view(self._request())

        assert len(counting_view.calls) == 2

    def test_repeated_key_replays(self, counting_view):
        first = counting_view(self._request("key-replay"))
        second = counting_view(self._request("key-replay"))

        assert len(counting_view.calls) == 1
        assert second.status_code == 201
        assert second.content == first.content

    def test_key_scoped_to_principal(self, counting_view):
        counting_view(self._request("key-shared", principal_id=1))
        counting_view(self._request("key-shared", principal_id=2))

        assert len(counting_view.calls) == 2

    def test_error_responses_not_cached(self):
        calls = []

        @idempotency_key_supported
        def failing(request):
            calls.append(request)
            return JsonResponse({"error": "validation_error"}, status=400)

        failing(self._request("key-failing"))
        failing(self._request("key-failing"))

        assert len(calls) == 2
