"""Environment-driven configuration for the complaint service."""
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        self.APP_NAME = os.getenv("APP_NAME", "Complaint Registration System")
        self.PORT = int(os.getenv("PORT", 8070))
        self.MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/complaints")

        self.JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-key-change-me")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 1440))

        # Explicit allow-list only; "*" is never implied.
        self.CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000"))

        self.API_PREFIX = os.getenv("API_PREFIX", "/api")
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
        self.MAX_IMAGE_UPLOAD_BYTES = int(os.getenv("MAX_IMAGE_UPLOAD_BYTES", 5 * 1024 * 1024))

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")

        self.DEFAULT_ADMIN_EMAIL = (os.getenv("DEFAULT_ADMIN_EMAIL") or "").lower().strip()
        self.DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "")
        self.DEFAULT_ADMIN_NAME = os.getenv("DEFAULT_ADMIN_NAME", "System Administrator")


@lru_cache
def get_settings() -> Settings:
    return Settings()
