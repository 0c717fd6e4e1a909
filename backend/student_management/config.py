"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
DEFAULT_DATABASE_URL = f"sqlite:///{BASE / 'students.db'}"


class Settings:
    ENV: str
    DATABASE_URL: str
    DB_POOL_SIZE: int
    DB_ECHO: bool
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
        self.DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self._validate()

    def _validate(self):
        if self.DB_POOL_SIZE < 1:
            raise RuntimeError("DB_POOL_SIZE must be at least 1")
        if self.ENV != "dev" and self.DATABASE_URL == DEFAULT_DATABASE_URL:
            raise RuntimeError("DATABASE_URL must be set explicitly in non-dev environments")


settings = Settings()
