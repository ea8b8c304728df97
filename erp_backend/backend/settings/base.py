"""
PATH: backend/settings/base.py

BASE SETTINGS (shared by dev / prod / test)

Everything configurable comes from the environment (django-environ),
optionally loaded from a .env next to manage.py or one level up.

Sections:
- core / i18n (es-AR, Buenos Aires time)
- apps: users, customers, sales, receipts, treasury, invoicing
- DRF + SimpleJWT + drf-spectacular + django-filter
- receivables toggles (void compensation, invoicing outbox, issuer VAT)
- logging (one console logger per receivables app), optional Sentry
"""

from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

import environ
from corsheaders.defaults import default_headers, default_methods

BASE_DIR = Path(__file__).resolve().parent.parent.parent

TESTING = "test" in sys.argv or any("pytest" in arg for arg in sys.argv)

# -----------------------------------------
# ENVIRONMENT
# -----------------------------------------
env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, ""),
    TIME_ZONE=(str, "America/Argentina/Buenos_Aires"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    CORS_ALLOWED_ORIGINS=(list, ["http://localhost:5173"]),
    CSRF_TRUSTED_ORIGINS=(list, ["http://localhost:5173"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    ADMIN_PATH=(str, "admin/"),
    LOG_LEVEL=(str, "INFO"),
    THROTTLE_ANON_RATE=(str, "60/min"),
    THROTTLE_USER_RATE=(str, "600/min"),
    JWT_ACCESS_MINUTES=(int, 30),
    JWT_REFRESH_DAYS=(int, 1),
    SENTRY_DSN=(str, ""),
    SENTRY_ENVIRONMENT=(str, "development"),
    SENTRY_TRACES_SAMPLE_RATE=(float, 0.0),
    SENTRY_SEND_PII=(bool, False),
    RECEIPT_VOID_COMPENSATES_BOOKS=(bool, True),
    INVOICING_OUTBOX_MAX_ATTEMPTS=(int, 5),
    COMPANY_VAT_CONDITION=(str, "Responsable Inscripto"),
)

for _env_file in (BASE_DIR / ".env", BASE_DIR.parent / ".env"):
    if _env_file.exists():
        env.read_env(str(_env_file))
        break

# -----------------------------------------
# CORE
# -----------------------------------------
SECRET_KEY = (env("SECRET_KEY") or "dev-insecure-change-me").strip()
DEBUG = env.bool("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")
ADMIN_PATH = env("ADMIN_PATH")

LANGUAGE_CODE = "es-ar"
TIME_ZONE = (env("TIME_ZONE") or "UTC").strip()
USE_I18N = True
USE_TZ = True

AUTH_USER_MODEL = "users.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

ROOT_URLCONF = "backend.urls"
WSGI_APPLICATION = "backend.wsgi.application"

DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",
    "django_filters",
]

LOCAL_APPS = [
    "users.apps.UsersConfig",
    "customers.apps.CustomersConfig",
    "sales.apps.SalesConfig",
    "receipts.apps.ReceiptsConfig",
    "treasury.apps.TreasuryConfig",
    "invoicing.apps.InvoicingConfig",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# admin only
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

STATIC_URL = "static/"

# -----------------------------------------
# DATABASE
# -----------------------------------------
# Receipts and voids open their own atomic blocks; requests are not wrapped.
DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["ATOMIC_REQUESTS"] = False

# -----------------------------------------
# API (DRF / JWT / OpenAPI)
# -----------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ("rest_framework_simplejwt.authentication.JWTAuthentication",),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_THROTTLE_CLASSES": (
        ()
        if TESTING
        else (
            "rest_framework.throttling.AnonRateThrottle",
            "rest_framework.throttling.UserRateThrottle",
        )
    ),
    "DEFAULT_THROTTLE_RATES": {
        "anon": env("THROTTLE_ANON_RATE"),
        "user": env("THROTTLE_USER_RATE"),
    },
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env.int("JWT_ACCESS_MINUTES")),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env.int("JWT_REFRESH_DAYS")),
    "ROTATE_REFRESH_TOKENS": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "ERP Receivables API",
    "DESCRIPTION": "Customer receipts, sale collections, account ledger and cash book",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = list(default_methods)
CORS_ALLOW_HEADERS = list(default_headers)
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS")

# -----------------------------------------
# RECEIVABLES
# -----------------------------------------
# True: voiding a receipt also appends a reversal ledger entry and one
# outflow cash entry per original inflow. False: sales + receipt only.
RECEIPT_VOID_COMPENSATES_BOOKS = env.bool("RECEIPT_VOID_COMPENSATES_BOOKS")

INVOICING_OUTBOX_MAX_ATTEMPTS = env.int("INVOICING_OUTBOX_MAX_ATTEMPTS")

# Issuer VAT condition; decides the A / B / C voucher letter.
COMPANY_VAT_CONDITION = (env("COMPANY_VAT_CONDITION") or "").strip()

# -----------------------------------------
# LOGGING
# -----------------------------------------
LOG_LEVEL = (env("LOG_LEVEL") or "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "console"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        name: {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False}
        for name in ("receipts", "customers", "sales", "treasury", "invoicing")
    },
}

# -----------------------------------------
# SENTRY (optional, enabled by SENTRY_DSN)
# -----------------------------------------
SENTRY_DSN = (env("SENTRY_DSN") or "").strip()

if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=(env("SENTRY_ENVIRONMENT") or "development").strip(),
        integrations=[DjangoIntegration()],
        traces_sample_rate=env.float("SENTRY_TRACES_SAMPLE_RATE"),
        send_default_pii=env.bool("SENTRY_SEND_PII"),
    )
