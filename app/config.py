"""
Application settings, read from the environment and ``.env``.
"""
import base64
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


def decode_key(value: str) -> bytes:
    """Decode a base64url key, tolerating missing padding."""
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/receipts.db"

    # Security (32 byte AES-256 key, base64url encoded)
    ENCRYPTION_KEY: str
    SESSION_TTL_SECONDS: int = 60 * 60 * 24
    SESSION_CACHE_SIZE: int = 1024
    SESSION_COOKIE_NAME: str = "authUser"
    SESSION_COOKIE_SECURE: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File storage
    DATA_DIR: str = "./data"

    # Receipt analyzer (Gemini)
    GEMINI_API_KEY: str = ""
    PREDICTION_MODEL: str = "gemini-1.5-flash"

    @field_validator("ENCRYPTION_KEY")
    @classmethod
    def _check_key_length(cls, value: str) -> str:
        try:
            key = decode_key(value)
        except ValueError as exc:
            raise ValueError("ENCRYPTION_KEY must be base64url encoded") from exc
        if len(key) != 32:
            raise ValueError(
                f"ENCRYPTION_KEY must be a 32-byte key, but it is {len(key)} bytes long."
            )
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
