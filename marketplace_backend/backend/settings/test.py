# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite (fast, isolated)
- Cheap password hashing
- Throttling off so API tests never trip rate limits
- Domain loggers quiet unless something goes wrong
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK  # explicit for Ruff (F405)

DEBUG = False

SECRET_KEY = "test-only-secret-key"
ALLOWED_HOSTS = ["testserver", "localhost", "127.0.0.1"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

ORDER_CANCELLATION_GRACE_SECONDS = 300
PAYOUT_DUE_DAYS = 2

for _name in ("orders", "settlement", "payouts"):
    LOGGING["loggers"][_name]["level"] = "WARNING"
