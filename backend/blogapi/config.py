"""Application settings and validation."""

import os
from pathlib import Path
from typing import List, Optional

BASE = Path(__file__).resolve().parent.parent
DEFAULT_JWT_SECRET = "change_me_for_prod"


class Settings:
    ENV: str
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: Optional[int]
    PASSWORD_SCHEMES: List[str]
    PAGE_SIZE: int
    LOG_LEVEL: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        # unset means tokens never expire
        self.JWT_EXPIRE_HOURS = self._optional_int("JWT_EXPIRE_HOURS")
        self.PASSWORD_SCHEMES = [s.strip() for s in os.getenv("PASSWORD_SCHEMES", "hex_sha512").split(",") if s.strip()]
        self.PAGE_SIZE = self._optional_int("PAGE_SIZE") or 10
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self._validate()

    @staticmethod
    def _optional_int(name: str) -> Optional[int]:
        raw = os.getenv(name, "").strip()
        if not raw:
            return None
        try:
            value = int(raw)
        except ValueError:
            raise RuntimeError(f"{name} must be an integer, got {raw!r}")
        if value <= 0:
            raise RuntimeError(f"{name} must be positive")
        return value

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if not self.PASSWORD_SCHEMES:
            raise RuntimeError("PASSWORD_SCHEMES must name at least one passlib scheme")
