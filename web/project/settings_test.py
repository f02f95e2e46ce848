import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.pop("REDIS_URL", None)

from project.settings import *  # noqa: E402,F401,F403
from project.settings import REST_FRAMEWORK  # noqa: E402

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "department-site-tests",
    }
}

API_BASE = "https://cms.example.edu"
SCHEDULE_API_BASE = "https://schedule.example.edu/api"
DEPARTMENT_CODE = "doece"

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "anon": "1000/minute",
        "otp": "1000/minute",
        "otp_verify": "1000/minute",
        "submission": "1000/minute",
    },
}
