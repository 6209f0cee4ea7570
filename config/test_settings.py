"""
Test settings - Use SQLite for faster tests without a database server.
"""

from config.settings import *

# Use SQLite for testing
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",  # In-memory database for speed
    }
}


# Disable migrations for faster test database creation
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

# Speed up password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

DEBUG = False

# Never reach for a broker from the test suite
RABBITMQ_ENABLED = False

BOOTSTRAP_ADMIN_PASSWORD = "bootstrap-secret"
REGISTRATION_STRICT_IDENTITY = True
ROLLOVER_BATCH_SIZE = 2
