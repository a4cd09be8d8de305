"""Test environment: in-memory SQLite, throwaway upload dir, cheap bcrypt."""

import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="blogcms-uploads-"))
os.environ.setdefault("JWT_SECRET", "test-secret-with-at-least-32-bytes!")

import blogcms.core.security as security  # noqa: E402

# Production cost is 12; 4 is the bcrypt minimum and keeps the suite fast.
security.BCRYPT_ROUNDS = 4
