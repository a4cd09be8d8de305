"""Endpoint tests for user administration and self-service profile routes."""

import unittest

from blogcms.models import Role
from tests.helpers import STRONG_PASSWORD, add_user, bearer, make_client, make_settings

NEW_PASSWORD = "N3wP@ssword!"


class TestSelfService(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()
        self.client, self.factory = make_client(self.settings)
        self.user = add_user(self.factory, email="ed@example.com", username="editor")
        self.headers = bearer(self.user, self.settings)

    def test_me(self) -> None:
        response = self.client.get("/api/users/me", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["id"], self.user.id)
        self.assertEqual(body["role"], Role.EDITOR.value)
        self.assertIn("created_at", body)

    def test_update_profile(self) -> None:
        response = self.client.put(
            "/api/users/me",
            json={"firstName": "Ed", "bio": "Writes things", "email": "Ed.New@Example.com"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["first_name"], "Ed")
        self.assertEqual(body["bio"], "Writes things")
        self.assertEqual(body["email"], "ed.new@example.com")

    def test_profile_email_taken(self) -> None:
        add_user(self.factory, email="taken@example.com", username="someone")
        response = self.client.put("/api/users/me", json={"email": "taken@example.com"}, headers=self.headers)
        self.assertEqual(response.status_code, 409)

    def test_change_password(self) -> None:
        wrong = self.client.put(
            "/api/users/me/password",
            json={"currentPassword": "Wr0ngP@ss!", "newPassword": NEW_PASSWORD},
            headers=self.headers,
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json()["detail"], "Current password is incorrect")

        ok = self.client.put(
            "/api/users/me/password",
            json={"currentPassword": STRONG_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=self.headers,
        )
        self.assertEqual(ok.status_code, 200)
        login = self.client.post("/api/auth/login", json={"email": "ed@example.com", "password": NEW_PASSWORD})
        self.assertEqual(login.status_code, 200)

    def test_new_password_policy(self) -> None:
        response = self.client.put(
            "/api/users/me/password",
            json={"currentPassword": STRONG_PASSWORD, "newPassword": "short"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 422)

    def test_activity_newest_first(self) -> None:
        self.client.put("/api/users/me", json={"bio": "hello"}, headers=self.headers)
        self.client.put(
            "/api/users/me/password",
            json={"currentPassword": STRONG_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=self.headers,
        )
        response = self.client.get("/api/users/me/activity", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        items = response.json()["items"]
        self.assertEqual([i["action"] for i in items], ["password.change", "profile.update"])
        self.assertEqual(items[1]["metadata"], {"fields": ["bio"]})

    def test_editor_cannot_list_users(self) -> None:
        self.assertEqual(self.client.get("/api/users", headers=self.headers).status_code, 403)


class TestAdminUsers(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()
        self.client, self.factory = make_client(self.settings)
        self.admin = add_user(self.factory, email="admin@example.com", username="admin", role=Role.ADMIN)
        self.headers = bearer(self.admin, self.settings)

    def _create(self, **overrides):
        payload = {"email": "new@example.com", "username": "newbie", "password": STRONG_PASSWORD}
        payload.update(overrides)
        return self.client.post("/api/users", json=payload, headers=self.headers)

    def test_create_defaults_to_editor(self) -> None:
        response = self._create()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], Role.EDITOR.value)

    def test_create_duplicate_username(self) -> None:
        self._create()
        response = self._create(email="other@example.com")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "User with this email or username already exists")

    def test_list_and_get(self) -> None:
        created = self._create().json()
        listed = self.client.get("/api/users", headers=self.headers)
        self.assertEqual(listed.status_code, 200)
        self.assertEqual([u["username"] for u in listed.json()["users"]], ["admin", "newbie"])
        fetched = self.client.get(f"/api/users/{created['id']}", headers=self.headers)
        self.assertEqual(fetched.json()["email"], "new@example.com")

    def test_update_role_and_deactivate(self) -> None:
        created = self._create().json()
        response = self.client.put(
            f"/api/users/{created['id']}",
            json={"role": "ADMIN", "isActive": False},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "ADMIN")
        self.assertFalse(response.json()["is_active"])
        login = self.client.post(
            "/api/auth/login", json={"email": "new@example.com", "password": STRONG_PASSWORD}
        )
        self.assertEqual(login.status_code, 401)

    def test_delete(self) -> None:
        created = self._create().json()
        response = self.client.delete(f"/api/users/{created['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "User deleted successfully"})
        missing = self.client.get(f"/api/users/{created['id']}", headers=self.headers)
        self.assertEqual(missing.status_code, 404)

    def test_delete_missing(self) -> None:
        response = self.client.delete("/api/users/9999", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"detail": "User not found", "code": "not_found"})
