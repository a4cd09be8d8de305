"""Unit tests for the best-effort activity log."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from blogcms.services.activity import log_activity, recent_activity
from tests.helpers import add_user, make_session_factory


class TestLogActivity(unittest.TestCase):
    def test_write_failure_is_swallowed_and_rolled_back(self) -> None:
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        with self.assertLogs("blogcms.services.activity", level="WARNING"):
            log_activity(session, 1, "login")
        session.rollback.assert_called_once()

    def test_recent_activity_limit(self) -> None:
        factory = make_session_factory()
        user = add_user(factory, email="a@example.com", username="alice")
        db = factory()
        try:
            for n in range(25):
                log_activity(db, user.id, "login", {"n": n})
            items = recent_activity(db, user.id)
        finally:
            db.close()
        self.assertEqual(len(items), 20)
        self.assertEqual(items[0].details, {"n": 24})
