"""
Pytest configuration for Django app tests.
"""

from collections.abc import Callable

from django.core.cache import cache
from django.test import Client as DjangoClient

import pytest

from apps.web.core.identity import AuthConfig, TokenService
from apps.web.core.models import User
from apps.web.restaurant.tests.factories import UserFactory


@pytest.fixture
def api_client() -> DjangoClient:
    """Django test client for API requests."""
    return DjangoClient()


@pytest.fixture
def token_service() -> TokenService:
    """Token service configured from test settings."""
    return TokenService(AuthConfig.from_settings())


@pytest.fixture
def auth_headers(token_service: TokenService) -> Callable[[User], dict[str, str]]:
    """Build the test-client kwargs that authenticate as the given user."""

    def _headers(user: User) -> dict[str, str]:
        token = token_service.issue(user.pk, user.role)
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    return _headers


@pytest.fixture
def customer(db) -> User:
    """A customer account."""
    return UserFactory(role=User.Role.CUSTOMER)


@pytest.fixture
def owner(db) -> User:
    """An owner account."""
    return UserFactory(role=User.Role.OWNER)


@pytest.fixture
def other_owner(db) -> User:
    """An owner account that owns nothing the tests touch."""
    return UserFactory(role=User.Role.OWNER)


@pytest.fixture
def admin_user(db) -> User:
    """An admin account."""
    return UserFactory(role=User.Role.ADMIN)


@pytest.fixture(autouse=True)
def _clear_cache():
    """Idempotency replays live in the cache; start every test empty."""
    cache.clear()
    yield
    cache.clear()
