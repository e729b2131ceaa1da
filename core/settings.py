from datetime import timedelta
from pathlib import Path
import os
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env", override=False)
load_dotenv(BASE_DIR / ".env.local", override=True)

def as_bool(v: str, default=False) -> bool:
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}

def as_list(v: str, sep=","):
    if not v:
        return []
    return [x.strip() for x in str(v).split(sep) if x.strip()]

def as_int(v: str, default: int) -> int:
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return default

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
DEBUG = as_bool(os.getenv("DEBUG", "true"), default=True)
ALLOWED_HOSTS = as_list(os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost"))

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_filters",
    "rest_framework_simplejwt",
    "src.shared.apps.SharedConfig",
    "src.accounts.apps.AccountsConfig",
    "src.listings.apps.ListingsConfig",
    "src.engagement.apps.EngagementConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

USE_WHITENOISE = as_bool(os.getenv("USE_WHITENOISE", "false"))
if USE_WHITENOISE:
    try:
        import whitenoise  # noqa: F401
        MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
    except ImportError:
        USE_WHITENOISE = False

ROOT_URLCONF = "core.urls"

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

WSGI_APPLICATION = "core.wsgi.application"

AUTH_USER_MODEL = "accounts.User"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
    ),
    "DEFAULT_PAGINATION_CLASS": "src.shared.pagination.ListingPagination",
    "EXCEPTION_HANDLER": "src.shared.exceptions.api_exception_handler",
    "COERCE_DECIMAL_TO_STRING": False,
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=as_int(os.getenv("JWT_ACCESS_MINUTES"), 60)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=as_int(os.getenv("JWT_REFRESH_DAYS"), 7)),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

IS_DOCKER = os.path.exists("/.dockerenv") or os.getenv("IN_DOCKER") == "1"

if as_bool(os.getenv("DB_USE_SQLITE", "false")):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }
else:
    env_db_host = os.getenv("DB_HOST", None)
    env_db_port = os.getenv("DB_PORT", "3306")
    default_host = "db" if IS_DOCKER else "127.0.0.1"
    if (not IS_DOCKER) and (env_db_host is None or env_db_host.strip().lower() == "db"):
        resolved_host = "127.0.0.1"
    else:
        resolved_host = env_db_host.strip() if env_db_host else default_host

    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.mysql",
            "NAME": os.getenv("DB_NAME", "estate_market"),
            "USER": os.getenv("DB_USER", "estate"),
            "PASSWORD": os.getenv("DB_PASSWORD", "estate123"),
            "HOST": resolved_host,
            "PORT": env_db_port,
            "OPTIONS": {
                "init_command": "SET sql_mode='STRICT_TRANS_TABLES'",
                "charset": "utf8mb4",
            },
        }
    }

LANGUAGE_CODE = "en"
# The calendar day used for authenticated view dedup follows this zone.
TIME_ZONE = os.getenv("TIME_ZONE", "Africa/Kampala")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
if USE_WHITENOISE and not DEBUG:
    STORAGES = {
        "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
        "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Engagement and listing query tuning
VIEW_DEDUP_WINDOW_HOURS = as_int(os.getenv("VIEW_DEDUP_WINDOW_HOURS"), 24)
ANONYMOUS_VIEW_RETENTION_DAYS = as_int(os.getenv("ANONYMOUS_VIEW_RETENTION_DAYS"), 30)
LISTINGS_PAGE_SIZE = as_int(os.getenv("LISTINGS_PAGE_SIZE"), 9)
LISTINGS_MAX_PAGE_SIZE = as_int(os.getenv("LISTINGS_MAX_PAGE_SIZE"), 100)
RECENT_LISTINGS_LIMIT = as_int(os.getenv("RECENT_LISTINGS_LIMIT"), 5)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "text": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "text",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {"level": "WARNING"},
        "src": {"level": LOG_LEVEL, "propagate": True},
    },
}

if LOG_FORMAT == "json":
    LOGGING["formatters"]["json"] = {
        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
        "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
    }
    LOGGING["handlers"]["console"]["formatter"] = "json"
