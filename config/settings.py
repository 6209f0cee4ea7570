"""
Django settings for the membership service.
"""

import os
from pathlib import Path
import environ

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Environment variables
env = environ.Env(DEBUG=(bool, False))
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="django-insecure-change-this-key")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party apps
    "rest_framework",
    "corsheaders",
    # Local apps
    "membership",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

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

WSGI_APPLICATION = "config.wsgi.application"

# Database
DATABASES = {"default": env.db("DATABASE_URL", default="sqlite:///db.sqlite3")}

# Member passwords are hashed with the same hashers Django uses for staff accounts
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE", default="Asia/Dubai")
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Sessions carry only the logged-in member id
SESSION_MEMBER_KEY = "membership_member_id"
SESSION_COOKIE_AGE = env.int("SESSION_COOKIE_AGE", default=60 * 60 * 24 * 30)

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "membership.api.authentication.MemberSessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "membership.api.permissions.IsMember",
    ],
    "UNAUTHENTICATED_USER": None,
}

# CORS
CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
CORS_ALLOW_CREDENTIALS = True

# RabbitMQ Configuration
RABBITMQ_ENABLED = env.bool("RABBITMQ_ENABLED", default=True)
RABBITMQ_HOST = env("RABBITMQ_HOST", default="localhost")
RABBITMQ_PORT = env.int("RABBITMQ_PORT", default=5672)
RABBITMQ_USER = env("RABBITMQ_USER", default="guest")
RABBITMQ_PASSWORD = env("RABBITMQ_PASSWORD", default="guest")
RABBITMQ_VHOST = env("RABBITMQ_VHOST", default="/")

# RabbitMQ Queue Names
RABBITMQ_CHANGE_STREAM_QUEUE = env("RABBITMQ_CHANGE_STREAM_QUEUE", default="membership.changed")
RABBITMQ_YEAR_ROLLOVER_QUEUE = env(
    "RABBITMQ_YEAR_ROLLOVER_QUEUE", default="membership.year.rollover.requested"
)

# Bootstrap administrator, created by `manage.py seed_admin`
BOOTSTRAP_ADMIN_ID = env("BOOTSTRAP_ADMIN_ID", default="admin-master")
BOOTSTRAP_ADMIN_USERNAME = env("BOOTSTRAP_ADMIN_USERNAME", default="admin")
BOOTSTRAP_ADMIN_PASSWORD = env("BOOTSTRAP_ADMIN_PASSWORD", default="")
BOOTSTRAP_ADMIN_NAME = env("BOOTSTRAP_ADMIN_NAME", default="System Administrator")

# Membership rules
MEMBERSHIP_FEE = env.int("MEMBERSHIP_FEE", default=25)
MANDALAMS = env.list(
    "MANDALAMS",
    default=[
        "Thalassery",
        "Kuthuparamba",
        "Vatakara",
        "Kuttiady",
        "Nadapuram",
        "Koyilandy",
        "Perambra",
        "Mahe",
    ],
)
IMPORT_DEFAULT_MANDALAM = env("IMPORT_DEFAULT_MANDALAM", default="Vatakara")
IMPORT_DEFAULT_EMIRATE = env("IMPORT_DEFAULT_EMIRATE", default="DUBAI")

# When True every core identity field must be answered through the registration
# schema; when False unresolved fields fall back to placeholder values.
REGISTRATION_STRICT_IDENTITY = env.bool("REGISTRATION_STRICT_IDENTITY", default=True)
MIN_PASSWORD_LENGTH = env.int("MIN_PASSWORD_LENGTH", default=6)

# Year rollover payment reset
ROLLOVER_BATCH_SIZE = env.int("ROLLOVER_BATCH_SIZE", default=500)

# Logging Configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} - {message}",
            "style": "{",
        },
        "simple": {
            "format": "[{levelname}] {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "membership": {
            "handlers": ["console"],
            "level": env("MEMBERSHIP_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
