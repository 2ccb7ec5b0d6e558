"""
Application configuration.

All settings are loaded from environment variables (or a .env file).
Pydantic-settings validates and types every value at startup, so
misconfiguration fails fast instead of at runtime.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ──────────────────────────────────────────────────────────
    APP_NAME: str = "Filebox"
    DEBUG: bool = False

    # ── Storage ──────────────────────────────────────────────────────
    # Every logical path is resolved inside BASE_DIR.  The sidecar
    # naming below is part of the on-disk contract: migration tooling
    # relies on it, so changing it orphans existing records.
    BASE_DIR: str = "./data"
    MOUNT_PREFIX: str = "/downloads"
    META_SUFFIX: str = ".meta"
    DIR_META_NAME: str = ".meta"
    STREAM_CHUNK_SIZE: int = 64 * 1024
    ALLOW_UPLOADS: bool = False

    # ── JWT / Auth ───────────────────────────────────────────────────
    # With AUTH_ENABLED off every caller is anonymous and denials are
    # answered with 404 instead of a login redirect.
    AUTH_ENABLED: bool = False
    SECRET_KEY: str = "CHANGE-ME-in-production-use-a-real-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOGIN_URL: str = "/login"
    ADMIN_ROLE: str = "admin"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
