"""Settings for the test suite: in-memory SQLite unless DATABASE_URL is set, quiet logging."""

from .settings import *  # noqa: F401,F403

if not DATABASE_URL:  # noqa: F405
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

LOG_LEVEL = "WARNING"
LOGGING["loggers"]["access_control"]["level"] = LOG_LEVEL  # noqa: F405
LOGGING["loggers"]["authentication"]["level"] = LOG_LEVEL  # noqa: F405
LOGGING["loggers"]["core"]["level"] = LOG_LEVEL  # noqa: F405
