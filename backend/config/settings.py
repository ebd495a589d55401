"""
Django settings for the nearby backend.

Two database aliases are configured:
- ``default``: relational store holding accounts, the business catalog and the
  authoritative location history (lat/lon columns).
- ``geo``: geometry-native store (PostGIS or SpatiaLite) holding one mutable
  point per user, mirrored from ``default`` after every location update.
"""
import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # backend/
load_dotenv(BASE_DIR / ".env")


def _env_list(name, default=""):
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "django-insecure-local-development-key-change-me-before-deploying",
)
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.gis",
    # third party
    "rest_framework",
    "corsheaders",
    # local apps
    "user",
    "locations",
    "geostore",
    "businesses",
    "recommendations",
]

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

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# Databases
GEO_DATABASE_ALIAS = "geo"

DATABASES = {
    "default": dj_database_url.config(
        default=os.environ.get("DATABASE_URL", f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
        conn_max_age=600,
    ),
    GEO_DATABASE_ALIAS: dj_database_url.parse(
        os.environ.get("GEO_DATABASE_URL", f"spatialite:///{BASE_DIR / 'geo.sqlite3'}"),
        conn_max_age=600,
    ),
}

DATABASE_ROUTERS = ["geostore.routers.GeoStoreRouter"]

if os.environ.get("SPATIALITE_LIBRARY_PATH"):
    SPATIALITE_LIBRARY_PATH = os.environ["SPATIALITE_LIBRARY_PATH"]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST framework / auth
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "EXCEPTION_HANDLER": "common.exceptions.custom_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=int(os.environ.get("JWT_ACCESS_HOURS", "24"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "SIGNING_KEY": os.environ.get("JWT_SECRET", SECRET_KEY),
}

CORS_ALLOW_ALL_ORIGINS = True

# Query tunables
LOCATION_DEFAULT_RADIUS_KM = float(os.environ.get("LOCATION_DEFAULT_RADIUS_KM", "10"))
NEARBY_DEFAULT_LIMIT = int(os.environ.get("NEARBY_DEFAULT_LIMIT", "20"))
RECOMMENDATION_DEFAULT_LIMIT = int(os.environ.get("RECOMMENDATION_DEFAULT_LIMIT", "10"))
QUERY_MAX_LIMIT = int(os.environ.get("QUERY_MAX_LIMIT", "100"))

# Location point feed: exact addresses or prefixes ("192.168.1.")
POINT_FEED_ALLOWED_IPS = _env_list("POINT_FEED_ALLOWED_IPS", "127.0.0.1,::1,192.168.1.")

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_LOG_LEVEL", "WARNING").upper(),
            "propagate": False,
        },
    },
}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
