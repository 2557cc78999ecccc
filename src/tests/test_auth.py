"""Identity endpoint tests: registration, token lifecycle, and account deletion."""

from __future__ import annotations

import time
from unittest import mock

import jwt
from django.conf import settings
from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from access_control import actions
from access_control.services import EntityStore
from authentication.models import User
from authentication.services import BlocklistUnavailable, TokenService
from tests.utils import DEFAULT_PASSWORD, FakeRedisMixin, create_admin, create_user


def bearer(access: str) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    return client


class RegistrationTests(FakeRedisMixin, TestCase):
    """POST /auth/register/ creates role-less users through the entity store."""

    def setUp(self):
        self.api_client = APIClient()

    def _register(self, email, password="NewPass123!", repeat=None):
        return self.api_client.post(
            "/auth/register/",
            {"email": email, "password": password, "repeat_password": repeat or password},
            format="json",
        )

    def test_new_user_has_no_actions(self):
        response = self._register("new@example.com")
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["errors"], [])
        self.assertEqual(body["data"]["email"], "new@example.com")
        self.assertEqual(body["data"]["actions"], [])
        self.assertNotIn("password_hash", body["data"])

        stored = User.objects.get(email="new@example.com")
        self.assertNotEqual(stored.password_hash, "NewPass123!")
        self.assertTrue(stored.check_password("NewPass123!"))

    def test_mismatched_passwords_are_rejected(self):
        response = self._register("new@example.com", "Password123", "Mismatch123")

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(response.json()["data"])
        self.assertFalse(User.objects.filter(email="new@example.com").exists())

    def test_email_stays_reserved_after_soft_delete(self):
        user = create_user("taken@example.com")

        self.assertEqual(self._register("taken@example.com").status_code, 409)

        EntityStore.soft_delete("user", user.pk)
        response = self._register("taken@example.com")
        self.assertEqual(response.status_code, 409)
        self.assertTrue(response.json()["errors"])


class TokenLifecycleTests(FakeRedisMixin, TestCase):
    """Login, refresh, logout and logout-all."""

    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("user@example.com")

    def setUp(self):
        self.api_client = APIClient()

    def _login(self, email=None, password=DEFAULT_PASSWORD):
        return self.api_client.post(
            "/auth/login/",
            {"email": email or self.user.email, "password": password},
            format="json",
        )

    def _tokens(self):
        return self._login().json()["data"]

    def _refresh(self, token):
        return self.api_client.post("/auth/refresh/", {"refresh": token}, format="json")

    def test_login_issues_token_pair_carrying_version(self):
        response = self._login()
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        payload = TokenService.decode_token(data["access"], expected_type="access")
        self.assertEqual(payload["sub"], str(self.user.pk))
        self.assertEqual(payload["ver"], self.user.token_version)
        TokenService.decode_token(data["refresh"], expected_type="refresh")

    def test_login_rejections_are_401(self):
        self.assertEqual(self._login(password="wrongpass").status_code, 401)
        self.assertEqual(self._login(email="nobody@example.com").status_code, 401)

        EntityStore.soft_delete("user", self.user.pk)
        response = self._login()
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(response.json()["data"])

    def test_refresh_rotates_tokens(self):
        tokens = self._tokens()

        response = self._refresh(tokens["refresh"])

        self.assertEqual(response.status_code, 200)
        self.assertNotEqual(response.json()["data"]["access"], tokens["access"])

    def test_refresh_rejects_access_tokens_and_expired_tokens(self):
        self.assertEqual(self._refresh(self._tokens()["access"]).status_code, 401)

        now = int(time.time())
        expired = jwt.encode(
            {
                "sub": str(self.user.pk),
                "jti": "expired-jti",
                "iat": now - 120,
                "exp": now - 60,
                "type": "refresh",
                "ver": self.user.token_version,
            },
            settings.SECRET_KEY,
            algorithm=TokenService.ALGORITHM,
        )
        response = self._refresh(expired)
        self.assertEqual(response.status_code, 401)
        self.assertTrue(response.json()["errors"])

    def test_logout_revokes_only_the_presented_token(self):
        first, second = self._tokens(), self._tokens()

        self.assertEqual(bearer(first["access"]).post("/auth/logout/").status_code, 204)

        self.assertEqual(bearer(first["access"]).get("/auth/me/").status_code, 401)
        self.assertEqual(bearer(second["access"]).get("/auth/me/").status_code, 200)

    def test_logout_all_revokes_every_device(self):
        first, second = self._tokens(), self._tokens()
        version = self.user.token_version

        self.assertEqual(bearer(first["access"]).post("/auth/logout-all/").status_code, 204)

        self.user.refresh_from_db()
        self.assertEqual(self.user.token_version, version + 1)
        self.assertEqual(bearer(second["access"]).get("/auth/me/").status_code, 401)
        self.assertEqual(self._refresh(first["refresh"]).status_code, 401)
        self.assertEqual(self._refresh(second["refresh"]).status_code, 401)
        self.assertEqual(self._login().status_code, 200)

    def test_blocklist_outage_fails_closed(self):
        client = bearer(self._tokens()["access"])

        with mock.patch.object(
                TokenService,
                "block_token",
                side_effect=BlocklistUnavailable("Redis unavailable while blocklisting"),
        ):
            response = client.post("/auth/logout/")

        self.assertEqual(response.status_code, 503)
        self.assertIsNone(response.json()["data"])

    def test_database_outage_during_refresh_is_503(self):
        refresh = self._tokens()["refresh"]

        with mock.patch("authentication.views._get_active_user", side_effect=DatabaseError("DB down")):
            response = self._refresh(refresh)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["errors"], ["Service temporarily unavailable."])


class AccountTests(FakeRedisMixin, TestCase):
    """GET and DELETE /auth/me/."""

    def setUp(self):
        self.api_client = APIClient()

    def _tokens_for(self, user):
        return self.api_client.post(
            "/auth/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        ).json()["data"]

    def test_me_reports_sorted_effective_actions(self):
        admin = create_admin()

        response = bearer(self._tokens_for(admin)["access"]).get("/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["actions"], sorted(actions.ADMIN_ACTIONS))

    def test_me_requires_authentication(self):
        self.assertEqual(self.api_client.get("/auth/me/").status_code, 401)

    def test_self_delete_requires_delete_user_action(self):
        user = create_user("plain@example.com")

        response = bearer(self._tokens_for(user)["access"]).delete("/auth/me/")

        self.assertEqual(response.status_code, 403)
        self.assertIsNone(response.json()["data"])
        user.refresh_from_db()
        self.assertIsNone(user.deleted_at)

    def test_self_delete_soft_deletes_and_revokes(self):
        user = create_admin("leaving@example.com")
        tokens = self._tokens_for(user)
        other_device = bearer(self._tokens_for(user)["access"])
        client = bearer(tokens["access"])

        self.assertEqual(client.delete("/auth/me/").status_code, 204)

        user.refresh_from_db()
        self.assertIsNotNone(user.deleted_at)
        self.assertFalse(User.active.filter(pk=user.pk).exists())
        self.assertEqual(client.get("/auth/me/").status_code, 401)
        self.assertEqual(other_device.delete("/auth/me/").status_code, 401)
        self.assertEqual(
            self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json").status_code,
            401,
        )
        relogin = self.api_client.post(
            "/auth/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        self.assertEqual(relogin.status_code, 401)
