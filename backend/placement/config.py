from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    app_name: str = "Internship Placement"
    environment: str = os.getenv("ENV", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./db/placement.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    auth_secret: str = os.getenv("AUTH_SECRET", "placement-dev-secret")
    token_ttl_seconds: int = int(os.getenv("AUTH_TOKEN_TTL_SECONDS", str(60 * 60 * 8)))
    default_staff_id: str = os.getenv("DEFAULT_STAFF_ID", "staff")
    default_staff_password: str = os.getenv("DEFAULT_STAFF_PASSWORD", "password")
    cors_origins: list[str] = field(
        default_factory=lambda: _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173")
        )
    )

    def ensure_directories(self) -> None:
        self._ensure_sqlite_directory()

    def _ensure_sqlite_directory(self) -> None:
        if not self.database_url.startswith("sqlite:///"):
            return
        raw_path = self.database_url.replace("sqlite:///", "", 1)
        if not raw_path or raw_path == ":memory:":
            return
        db_path = Path(unquote(raw_path))
        if not db_path.is_absolute():
            db_path = Path(".") / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
