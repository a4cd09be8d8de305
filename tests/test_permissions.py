"""Unit tests for the route role table and the authorization stage."""

import unittest

from blogcms.api.deps import authorize, can_access, require_route
from blogcms.core.errors import Forbidden
from blogcms.core.permissions import ADMIN_ONLY, ANY_AUTHENTICATED, ROUTE_ROLES, STAFF, roles_for
from blogcms.models import Role
from blogcms.schemas.auth import CurrentUser


def _principal(role: Role) -> CurrentUser:
    return CurrentUser(id=1, email="a@example.com", username="alice", role=role)


class TestRolesFor(unittest.TestCase):
    def test_declared_routes(self) -> None:
        self.assertEqual(roles_for("settings.update"), ADMIN_ONLY)
        self.assertEqual(roles_for("upload.image"), STAFF)
        self.assertEqual(roles_for("users.me"), ANY_AUTHENTICATED)

    def test_unknown_route_raises(self) -> None:
        with self.assertRaises(KeyError):
            roles_for("settings.delete")
        with self.assertRaises(KeyError):
            require_route("no.such.route")

    def test_every_admin_route_excludes_editor(self) -> None:
        for route_id, roles in ROUTE_ROLES.items():
            if route_id.startswith("users.") and not route_id.startswith("users.me"):
                self.assertNotIn(Role.EDITOR, roles, route_id)


class TestAuthorize(unittest.TestCase):
    def test_admin_allowed_on_admin_route(self) -> None:
        principal = _principal(Role.ADMIN)
        self.assertIs(authorize(principal, ADMIN_ONLY), principal)

    def test_editor_forbidden_on_admin_route(self) -> None:
        with self.assertRaises(Forbidden) as ctx:
            authorize(_principal(Role.EDITOR), ADMIN_ONLY)
        self.assertEqual(ctx.exception.message, "Insufficient permissions")

    def test_empty_set_allows_any_role(self) -> None:
        for role in Role:
            authorize(_principal(role), ANY_AUTHENTICATED)

    def test_guard_applies_route_roles(self) -> None:
        guard = require_route("settings.update")
        self.assertEqual(guard.__name__, "require_settings_update")
        with self.assertRaises(Forbidden):
            guard(_principal(Role.EDITOR))
        guard(_principal(Role.ADMIN))


class TestContentRoutes(unittest.TestCase):
    def test_authoring_is_staff(self) -> None:
        for route_id in ("posts.create", "posts.update", "posts.drafts", "categories.reorder", "tags.merge"):
            self.assertEqual(roles_for(route_id), STAFF, route_id)

    def test_destructive_taxonomy_and_moderation_are_admin_only(self) -> None:
        for route_id in ("categories.delete", "tags.cleanup", "tags.delete", "comments.approve", "comments.delete"):
            self.assertEqual(roles_for(route_id), ADMIN_ONLY, route_id)


class TestCanAccess(unittest.TestCase):
    def test_anonymous_never_passes(self) -> None:
        self.assertFalse(can_access(None, "posts.drafts"))

    def test_role_checked_against_table(self) -> None:
        self.assertTrue(can_access(_principal(Role.EDITOR), "posts.drafts"))
        self.assertFalse(can_access(_principal(Role.EDITOR), "comments.approve"))
        self.assertTrue(can_access(_principal(Role.EDITOR), "users.me"))
