"""Shared helpers for tests (user creation, admin seeding, fake Redis)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from rest_framework.test import APIClient

from access_control.services import EntityStore
from authentication.managers import UserManager
from authentication.services import TokenService
from scripts.management.commands.seed_rbac import grant_admin, seed_admin_role

DEFAULT_PASSWORD = "StrongPass123"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class FakeRedisMixin:
    """Patch the Redis client factory with an in-memory fake for a test class."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()


def create_user(email: str, password: str = DEFAULT_PASSWORD):
    """Create a user with a bcrypt-hashed password through the entity store."""

    return EntityStore.create_user(email, UserManager.hash_password(password))


def create_admin(email: str = "admin@test.com", password: str = DEFAULT_PASSWORD):
    """Create a user holding the seeded admin role (every administrative action)."""

    user = create_user(email, password)
    grant_admin(user, seed_admin_role())
    return user


def auth_client(user) -> APIClient:
    """Return an APIClient authenticated with a fresh access token."""

    token, _ = TokenService.generate_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client
