# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
- sqlite by default (row locks are no-ops there; use Postgres to test concurrency)
- receivables loggers at DEBUG unless LOG_LEVEL says otherwise
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:5173"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:5173"])
CORS_ALLOW_CREDENTIALS = True

_dev_level = env("LOG_LEVEL", default="DEBUG").upper()
for _logger in LOGGING["loggers"].values():
    _logger["level"] = _dev_level
