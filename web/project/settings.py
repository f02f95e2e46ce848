import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url
from django.core.exceptions import ImproperlyConfigured

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables
load_dotenv(BASE_DIR / ".env", override=False)

# Security
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ImproperlyConfigured("SECRET_KEY is not set")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

def _parse_csv(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


ALLOWED_HOSTS = _parse_csv(
    os.getenv("ALLOWED_HOSTS"),
    ["localhost", "127.0.0.1", "testserver"],
)

# Applications
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "corsheaders",
    "drf_spectacular",
    "upstream",
    "proxy",
    "verification",
    "submissions",
    "content",
]

# Middleware
MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# URLs
ROOT_URLCONF = "project.urls"

# Templates
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "project.context_processors.site",
            ],
        },
    }
]

# WSGI
WSGI_APPLICATION = "project.wsgi.application"

# Only Django internals touch the database; all content lives upstream.
DATABASES = {
    "default": dj_database_url.config(
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
    )
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kathmandu"
USE_I18N = True
USE_TZ = True

# Static files
STATIC_URL = "static/"

# Cache Configuration
REDIS_URL = os.getenv("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
            "KEY_PREFIX": "dept",
            "TIMEOUT": 300,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "department-site",
            "TIMEOUT": 300,
        }
    }

# Sessions carry the OTP hand-off between the verification page and the forms.
SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_COOKIE_AGE = int(os.getenv("SESSION_COOKIE_AGE", str(60 * 60 * 2)))
SESSION_COOKIE_SAMESITE = "Lax"

# Default primary key
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ALLOWED_ORIGINS = _parse_csv(
    os.getenv("CORS_ALLOWED_ORIGINS"),
    [
        FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
)
CORS_URLS_REGEX = r"^/api/.*$"
CSRF_TRUSTED_ORIGINS = _parse_csv(
    os.getenv("CSRF_TRUSTED_ORIGINS"),
    [
        "http://localhost",
        "http://127.0.0.1",
    ],
)

# drf_spectacular

SPECTACULAR_SETTINGS = {
    "TITLE": "Department Website API",
    "DESCRIPTION": "Proxy routes in front of the campus CMS and the submission OTP service",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# Django REST Framework
REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_ANON_RATE", "120/minute"),      # General anonymous limit
        "otp": os.getenv("THROTTLE_OTP_RATE", "5/minute"),          # Code requests (email cost)
        "otp_verify": os.getenv("THROTTLE_OTP_VERIFY_RATE", "10/minute"),  # Code guesses
        "submission": os.getenv("THROTTLE_SUBMISSION_RATE", "10/minute"),  # Final submissions
    },
}

# Upstream CMS
API_BASE = os.getenv("API_BASE", "https://cdn.tcioe.edu.np")
API_PUBLIC_PREFIX = os.getenv("API_PUBLIC_PREFIX", "/api/v1/public/department-mod")
API_NOTICE_PUBLIC_PREFIX = os.getenv("API_NOTICE_PUBLIC_PREFIX", "/api/v1/public/notice-mod")
API_WEBSITE_PUBLIC_PREFIX = os.getenv("API_WEBSITE_PUBLIC_PREFIX", "/api/v1/public/website-mod")
API_RESEARCH_PUBLIC_PREFIX = os.getenv("API_RESEARCH_PUBLIC_PREFIX", "/api/v1/public/research-mod")
API_PROJECT_PUBLIC_PREFIX = os.getenv("API_PROJECT_PUBLIC_PREFIX", "/api/v1/public/project-mod")
API_JOURNAL_PUBLIC_PREFIX = os.getenv("API_JOURNAL_PUBLIC_PREFIX", "/api/v1/public/journal-mod")
API_CONTACT_PUBLIC_PREFIX = os.getenv("API_CONTACT_PUBLIC_PREFIX", "/api/v1/public/contact-mod")
SCHEDULE_API_BASE = os.getenv("SCHEDULE_API_BASE", "https://schedule-backend.tcioe.edu.np/api")

DEPARTMENT_CODE = os.getenv("DEPARTMENT", "doece").lower()

UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))
UPSTREAM_CACHE_SECONDS = int(os.getenv("UPSTREAM_CACHE_SECONDS", "60"))
DEBUG_API = os.getenv("DEBUG_API", "false").lower() == "true"

# Submission OTP service
OTP_REQUEST_PATH = os.getenv(
    "OTP_REQUEST_PATH", f"{API_WEBSITE_PUBLIC_PREFIX}/submission-otp/request/"
)
OTP_VERIFY_PATH = os.getenv(
    "OTP_VERIFY_PATH", f"{API_WEBSITE_PUBLIC_PREFIX}/submission-otp/verify/"
)
PROJECT_SUBMIT_PATH = os.getenv(
    "PROJECT_SUBMIT_PATH", f"{API_PROJECT_PUBLIC_PREFIX}/projects/submit/"
)
RESEARCH_SUBMIT_PATH = os.getenv(
    "RESEARCH_SUBMIT_PATH", f"{API_RESEARCH_PUBLIC_PREFIX}/research/submit/"
)
JOURNAL_SUBMIT_PATH = os.getenv(
    "JOURNAL_SUBMIT_PATH", f"{API_JOURNAL_PUBLIC_PREFIX}/articles/submit/"
)
CONTACT_SUBMIT_PATH = os.getenv(
    "CONTACT_SUBMIT_PATH", f"{API_CONTACT_PUBLIC_PREFIX}/department-contacts/"
)

OTP_VERIFICATION_TTL_SECONDS = 30 * 60
OTP_RESEND_COOLDOWN_SECONDS = 60
VERIFICATION_REDIRECT_DELAY_SECONDS = 2

# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv("LOG_LEVEL", "INFO"),
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'ERROR',
            'propagate': False,
        },
        'upstream': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG_API else 'INFO',
            'propagate': False,
        },
    },
}
