"""Endpoint tests for settings listing, masking, typed upserts and the public resolved map."""

import unittest

from blogcms.models import Role, Setting
from blogcms.services.settings import MASK
from tests.helpers import add_user, bearer, make_client, make_settings


class TestSettingsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings(PUBLIC_API_URL="https://api.example.com/api")
        self.client, self.factory = make_client(self.settings)
        admin = add_user(self.factory, email="admin@example.com", username="admin", role=Role.ADMIN)
        self.admin_headers = bearer(admin, self.settings)

    def _put(self, key: str, payload: dict):
        return self.client.put(f"/api/settings/{key}", json=payload, headers=self.admin_headers)

    def _seed(self, *rows: tuple[str, str, str]) -> None:
        db = self.factory()
        try:
            for key, value, kind in rows:
                db.add(Setting(key=key, value=value, type=kind))
            db.commit()
        finally:
            db.close()

    def test_create_defaults_to_string(self) -> None:
        response = self._put("site_name", {"value": "My Blog"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["key"], "site_name")
        self.assertEqual(body["value"], "My Blog")
        self.assertEqual(body["type"], "string")

    def test_update_keeps_stored_type(self) -> None:
        self._put("comments_enabled", {"value": "yes", "type": "boolean"})
        response = self._put("comments_enabled", {"value": "off"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["type"], "boolean")
        self.assertEqual(response.json()["value"], "false")

    def test_value_must_match_type(self) -> None:
        self._put("comments_enabled", {"value": "true", "type": "boolean"})
        response = self._put("comments_enabled", {"value": "sometimes"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["code"], "validation_error")

    def test_unknown_type_rejected(self) -> None:
        self.assertEqual(self._put("site_name", {"value": "x", "type": "yaml"}).status_code, 422)

    def test_empty_value_rejected(self) -> None:
        self.assertEqual(self._put("site_name", {"value": ""}).status_code, 422)

    def test_smtp_password_masked_everywhere(self) -> None:
        written = self._put("smtp_password", {"value": "hunter2"})
        self.assertEqual(written.json()["value"], MASK)
        self._seed(("SMTP Password", "legacy-secret", "string"))
        listed = self.client.get("/api/settings").json()
        values = {row["key"]: row["value"] for row in listed}
        self.assertEqual(values["smtp_password"], MASK)
        self.assertEqual(values["SMTP Password"], MASK)
        self.assertNotIn("hunter2", str(listed))

    def test_listing_is_public_and_ordered(self) -> None:
        self._seed(("b_key", "2", "string"), ("a_key", "1", "string"))
        response = self.client.get("/api/settings")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["key"] for row in response.json()], ["a_key", "b_key"])

    def test_public_map_resolves_keys_and_assets(self) -> None:
        self._seed(
            ("Site Name", "Legacy Blog", "string"),
            ("site_name", "Canonical Blog", "string"),
            ("site_logo", "/api/uploads/logo.png", "string"),
            ("favicon", "https://cdn.example.com/favicon.ico", "string"),
            ("smtp-password", "hunter2", "string"),
        )
        response = self.client.get("/api/settings/public")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["api_base"], "https://api.example.com")
        resolved = body["settings"]
        self.assertEqual(resolved["site_name"], "Canonical Blog")
        self.assertEqual(resolved["site_logo"], "https://api.example.com/uploads/logo.png")
        self.assertEqual(resolved["favicon"], "https://cdn.example.com/favicon.ico")
        self.assertEqual(resolved["smtp_password"], MASK)


class TestPublicSettingsWithoutBase(unittest.TestCase):
    def test_assets_stay_relative(self) -> None:
        client, factory = make_client(make_settings(PUBLIC_API_URL=""))
        db = factory()
        try:
            db.add(Setting(key="logo", value="uploads/logo.png", type="string"))
            db.commit()
        finally:
            db.close()
        body = client.get("/api/settings/public").json()
        self.assertEqual(body["api_base"], "")
        self.assertEqual(body["settings"]["logo"], "/uploads/logo.png")


class TestSettingsWriteGuard(unittest.TestCase):
    """Only admins may write settings."""

    def setUp(self) -> None:
        self.settings = make_settings()
        self.client, self.factory = make_client(self.settings)

    def test_editor_forbidden(self) -> None:
        editor = add_user(self.factory, email="ed@example.com", username="editor", role=Role.EDITOR)
        response = self.client.put(
            "/api/settings/site_name", json={"value": "Blog"}, headers=bearer(editor, self.settings)
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "forbidden")

    def test_anonymous_unauthorized(self) -> None:
        response = self.client.put("/api/settings/site_name", json={"value": "Blog"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "unauthorized")

    def test_rejected_writes_leave_no_row(self) -> None:
        self.client.put("/api/settings/site_name", json={"value": "Blog"})
        db = self.factory()
        try:
            self.assertIsNone(db.query(Setting).filter(Setting.key == "site_name").first())
        finally:
            db.close()
