# File: config/settings.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("TIMEFLOW_SECRET_KEY", "dev-only-insecure-key")
DEBUG = env_bool("TIMEFLOW_DEBUG", True)
ALLOWED_HOSTS = [h for h in os.environ.get("TIMEFLOW_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # third party
    "simple_history",
    "concurrency",
    "django_object_actions",
    # local
    "core",
    "people",
    "employees",
    "standins",
    "timesheets",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
]

ROOT_URLCONF = "config.urls"

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
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("TIMEFLOW_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en"
TIME_ZONE = os.environ.get("TIMEFLOW_TIME_ZONE", "Asia/Singapore")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "media/"
MEDIA_ROOT = Path(os.environ.get("TIMEFLOW_MEDIA_ROOT", BASE_DIR / "media"))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --- Access control (core.utils.authz) -------------------------------------
ACL_CONFIG_PATH = os.environ.get("TIMEFLOW_ACL_PATH", str(BASE_DIR / "config" / "access.yaml"))

# --- Timesheet engine ------------------------------------------------------
TIMESHEETS = {
    "PRIOR_MONTH_CUTOFF_DAY": 10,
    "COMPLETION_PERCENT": 80,
    "DOCUMENT_UPLOAD_TO": "timesheets/docs/%Y/%m/",
    "DEFAULT_WORKING_HOURS": ("09:00", "18:00"),
}

# --- History ---------------------------------------------------------------
SIMPLE_HISTORY_REVERT_DISABLED = True

# --- Logging ---------------------------------------------------------------
LOG_LEVEL = os.environ.get("TIMEFLOW_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "timeflow.auth": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "timeflow.admin": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "timesheets": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "standins": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
