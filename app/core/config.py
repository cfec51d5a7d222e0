"""
config.py

Application-wide configuration.

Loads environment variables (and the .env file) through pydantic-settings
and exposes a single immutable Settings instance for the rest of the app.

Main settings:
- database connection
- JWT secret and expiry policy
- allowed organisational email domain and OTP lifetime
- SendGrid and Google OAuth credentials
- CORS origins and logging format

Design rules:
- every environment variable is read here and nowhere else
- required values (DATABASE_URL, SECRET_KEY) have no default, so a missing
  value fails at import time instead of silently degrading
- optional collaborators (email, OAuth) are checked where they are used

Related files:
- app.main               : CORS / logging setup
- app.core.security      : JWT secret and expiry
- app.db.session         : DATABASE_URL
- app.services.email     : SENDGRID_*
- app.services.google_oauth : GOOGLE_*

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


# extra="ignore": unknown variables in .env are skipped
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # single access token, no refresh flow
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # registration / OAuth accounts must belong to this domain
    ALLOWED_EMAIL_DOMAIN: str = "nitj.ac.in"
    OTP_EXPIRE_MINUTES: int = 10

    SENDGRID_API_KEY: str | None = None
    SENDGRID_FROM_EMAIL: str | None = None

    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_REDIRECT_URI: str | None = None

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console | json

    # frontend origins
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]


settings = Settings()
