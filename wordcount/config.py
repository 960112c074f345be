"""Environment-driven settings."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _default_db_path() -> str:
    # /app/data is the mounted volume in Docker, fall back to a local file
    data_dir = Path("/app/data")
    if data_dir.exists():
        return str(data_dir / "words.db")
    return "words.db"


@dataclass
class Settings:
    database_url: str
    database_timeout: float = 30.0
    database_echo: bool = False
    port: int = 3003
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        database_url = env.get("DATABASE_URL")
        if not database_url:
            db_path = env.get("DATABASE_PATH") or _default_db_path()
            database_url = f"sqlite+aiosqlite:///{db_path}"

        return cls(
            database_url=database_url,
            database_timeout=float(env.get("DATABASE_TIMEOUT", 30)),
            database_echo=env.get("DATABASE_ECHO", "").lower() in ("1", "true", "yes"),
            port=int(env.get("PORT", 3003)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
