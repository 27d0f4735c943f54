"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# 'development' | 'testing' | 'production'
ENV_VAR: Final[str] = "APP_ENV"


# Loads .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int | None = None) -> int | None:
    """Parse an integer from an environment variable.

    Blank values are treated as unset so ``FOO=`` in a ``.env`` file falls
    back to ``default``.

    :param name: Environment variable to inspect.
    :param default: Value returned when the variable is unset or blank.
    :returns: Parsed integer or ``default``.
    :raises ValueError: If the value is present but not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    APP_URL: str
        Public origin used to build absolute links (verification emails).
    SECRET_KEY: str
        Flask secret. Also keys the HMAC signature of verification links.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing bearer tokens.
    ACCESS_TOKEN_TTL_MINUTES: int | None
        Lifetime of bearer tokens. ``None`` keeps tokens valid until they are
        revoked by logout or refresh.
    TOKEN_STORE: str
        ``"sql"`` (default) or ``"redis"``; selects the access token store.
    PASSWORD_MIN_LENGTH: int
        Minimum accepted password length for registration and updates.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method. Stored hashes using another method are
        upgraded transparently on the next successful login.
    VERIFICATION_LINK_TTL_MINUTES: int
        Validity window of signed email verification links.
    NOTIFIER_WEBHOOK_URL: str | None
        When set, verification links are POSTed to this URL; otherwise they
        are only logged.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.
    USERS_PAGE_SIZE: int
        Default page size of the admin user listing.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = os.getenv("API_BASE_PREFIX", "/api")
    APP_URL = os.getenv("APP_URL", "http://localhost:8000")
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")

    # Tokens & credentials
    ACCESS_TOKEN_TTL_MINUTES = env_int("ACCESS_TOKEN_TTL_MINUTES")
    TOKEN_STORE = os.getenv("TOKEN_STORE", "sql").strip().lower()
    PASSWORD_MIN_LENGTH = env_int("PASSWORD_MIN_LENGTH", 8)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Email verification
    VERIFICATION_LINK_TTL_MINUTES = env_int("VERIFICATION_LINK_TTL_MINUTES", 60)
    NOTIFIER_WEBHOOK_URL = os.getenv("NOTIFIER_WEBHOOK_URL") or None
    NOTIFIER_TIMEOUT_SECONDS = float(os.getenv("NOTIFIER_TIMEOUT_SECONDS", "5"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Redis (optional, required when TOKEN_STORE=redis)
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Rate limiting
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")

    # Listing
    USERS_PAGE_SIZE = env_int("USERS_PAGE_SIZE", 15)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Hashes passwords with a cheap PBKDF2 round count to keep suites fast.
    - Disables rate limiting and never reaches external services.
    """

    TESTING = True
    DEBUG = False
    SECRET_KEY = "testing-secret"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-length"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    ACCESS_TOKEN_TTL_MINUTES = None
    TOKEN_STORE = "sql"
    REDIS_URL = None
    NOTIFIER_WEBHOOK_URL = None
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False
    APP_URL = "http://testserver"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
