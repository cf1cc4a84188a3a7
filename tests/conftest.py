"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or mail provider
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-long-enough-for-hs256")
os.environ.pop("SENDGRID_API_KEY", None)
