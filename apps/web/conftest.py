"""
Pytest configuration for Django app tests.
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import Client as DjangoClient

import pytest

from apps.web.core.models import Address, AuthToken


@pytest.fixture(autouse=True)
def clear_cache():
    """Idempotency and menu caches must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user():
    """Create a test customer."""
    User = get_user_model()
    return User.objects.create_user(
        username="testuser",
        email="testuser@example.com",
        password="testpass123",
    )


@pytest.fixture
def owner():
    """Create a restaurant owner."""
    User = get_user_model()
    return User.objects.create_user(
        username="owner",
        email="owner@example.com",
        password="testpass123",
        role=User.Role.RESTAURANT_OWNER,
    )


@pytest.fixture
def address(user) -> Address:
    """The customer's default delivery address."""
    return Address.objects.create(
        user=user,
        label="Home",
        address="12 MG Road",
        city="Bengaluru",
        pincode="560001",
        is_default=True,
    )


@pytest.fixture
def token(user) -> AuthToken:
    return AuthToken.objects.create(user=user)


@pytest.fixture
def owner_token(owner) -> AuthToken:
    return AuthToken.objects.create(user=owner)


@pytest.fixture
def api_client() -> DjangoClient:
    """Anonymous Django test client for API requests."""
    return DjangoClient()


@pytest.fixture
def customer_client(token: AuthToken) -> DjangoClient:
    """Test client authenticated as the customer."""
    return DjangoClient(HTTP_AUTHORIZATION=f"Bearer {token.key}")


@pytest.fixture
def owner_client(owner_token: AuthToken) -> DjangoClient:
    """Test client authenticated as the restaurant owner."""
    return DjangoClient(HTTP_AUTHORIZATION=f"Bearer {owner_token.key}")
