"""
Configuration module for Pastebin Vault.
Loads environment variables and provides config objects.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    USE_IN_MEMORY_STORE: bool = _env_bool("USE_IN_MEMORY_STORE", "0")
    DEBUG: bool = _env_bool("DEBUG", "True")
    APP_DOMAIN: str = os.getenv("APP_DOMAIN", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Paste ids are hex encoded, so the id length is twice this
    PASTE_ID_BYTES: int = int(os.getenv("PASTE_ID_BYTES", "4"))
    ID_RETRY_ATTEMPTS: int = int(os.getenv("ID_RETRY_ATTEMPTS", "3"))
    KDF_ITERATIONS: int = int(os.getenv("KDF_ITERATIONS", "200000"))
    LIST_LIMIT: int = int(os.getenv("LIST_LIMIT", "100"))


settings = Settings()
