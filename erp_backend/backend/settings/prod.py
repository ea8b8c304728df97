# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS

- DEBUG forced off, SECRET_KEY / ALLOWED_HOSTS required
- Postgres only: receipts rely on row locks (SELECT ... FOR UPDATE),
  which SQLite silently ignores
- READ COMMITTED + row locks on customer and sales for settlement
- WhiteNoise for static files, hardened cookies and headers
- https-only CORS / CSRF origins
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, LOGGING, MIDDLEWARE, env  # explicit for Ruff (F405)

DEBUG = False


def _required(name: str, value):
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


def _https_origins(name: str) -> list[str]:
    origins = _required(name, env.list(name, default=[]))
    for origin in origins:
        if "localhost" in origin or "127.0.0.1" in origin:
            raise ImproperlyConfigured(f"Remove localhost from {name} in production.")
        if not origin.startswith("https://"):
            raise ImproperlyConfigured(f"{name} must be https:// in production.")
    return origins


# ----------------------------
# Secrets / hosts
# ----------------------------
SECRET_KEY = _required("SECRET_KEY", (env("SECRET_KEY", default="") or "").strip())
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")

ALLOWED_HOSTS = _required("ALLOWED_HOSTS", env.list("ALLOWED_HOSTS", default=[]))

# ----------------------------
# Database (Postgres only)
# ----------------------------
_database_url = _required("DATABASE_URL", (env("DATABASE_URL", default="") or "").strip())
if not _database_url.startswith(("postgres://", "postgresql://")):
    raise ImproperlyConfigured("Receivables require Postgres; DATABASE_URL must be a postgres URL.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)
DATABASES["default"]["ATOMIC_REQUESTS"] = False

# ----------------------------
# Static files
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# Proxy / SSL / HSTS
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env.bool("SECURE_HSTS_PRELOAD", default=False)

# ----------------------------
# Cookies / headers
# ----------------------------
SESSION_COOKIE_SECURE = CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"
SECURE_CROSS_ORIGIN_OPENER_POLICY = "same-origin"

# ----------------------------
# CORS / CSRF
# ----------------------------
CORS_ALLOWED_ORIGINS = _https_origins("CORS_ALLOWED_ORIGINS")
CSRF_TRUSTED_ORIGINS = _https_origins("CSRF_TRUSTED_ORIGINS")
CORS_ALLOW_CREDENTIALS = False

# ----------------------------
# Receivables
# ----------------------------
RECEIPT_VOID_COMPENSATES_BOOKS = env.bool("RECEIPT_VOID_COMPENSATES_BOOKS", default=True)
INVOICING_OUTBOX_MAX_ATTEMPTS = env.int("INVOICING_OUTBOX_MAX_ATTEMPTS", default=5)
LOGGING["root"]["level"] = env("LOG_LEVEL", default="INFO").upper()
