# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory sqlite, fast password hashing
- Throttling disabled
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = ()

RECEIPT_VOID_COMPENSATES_BOOKS = True
INVOICING_OUTBOX_MAX_ATTEMPTS = 3
COMPANY_VAT_CONDITION = "Responsable Inscripto"
