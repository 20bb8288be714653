# property_api/config.py
# Environment-aware configuration for the property listing API

import os
from typing import List, Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_PROD = (ENV == "prod")

# JWT configuration
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
ALGORITHM = "HS256"

# Token lifetime
ACCESS_TOKEN_HOURS = int(os.environ.get("ACCESS_TOKEN_HOURS", "24"))

# Database configuration
# Render/Heroku style URLs use the postgres:// scheme, which SQLAlchemy no longer accepts
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip() or "sqlite:///property_api.db"
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://"):]

# HTTP server
PORT = int(os.environ.get("PORT", "5000"))

# Pagination
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = int(os.environ.get("MAX_PAGE_LIMIT", "100"))

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if IS_DEV else "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text" if IS_DEV else "json").lower()

# CORS origins (expand for staging/prod)
CORS_ORIGINS: List[str] = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

_extra_origins = os.environ.get("CORS_ORIGINS", "")
if _extra_origins:
    CORS_ORIGINS.extend(origin.strip() for origin in _extra_origins.split(",") if origin.strip())

# Variables that must be supplied out-of-band outside local development
REQUIRED_ENV_VARS = ("PORT", "DATABASE_URL", "SECRET_KEY")


def check_environment() -> List[str]:
    """Return the names of required environment variables that are unset."""
    return [name for name in REQUIRED_ENV_VARS if not os.environ.get(name, "").strip()]
