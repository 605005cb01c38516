from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Load project-root .env early so both pydantic-settings and any direct os.getenv access
# see consistent values, even if the process CWD is not the repo root.
_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_IN_TEST = (os.getenv("ENVIRONMENT") or "").lower() == "test" or bool(os.getenv("PYTEST_CURRENT_TEST"))
if _ENV_PATH.exists() and not _IN_TEST:
    load_dotenv(dotenv_path=_ENV_PATH)


MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _parse_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        return [str(o).strip() for o in raw if str(o).strip()]

    s = str(raw).strip()
    if not s:
        return []
    # Support JSON array string or comma-separated string.
    if s.startswith("["):
        try:
            parsed = json.loads(s)
            items = parsed if isinstance(parsed, list) else [parsed]
        except ValueError:
            items = s.strip("[]").split(",")
    else:
        items = s.split(",")
    return [str(o).strip() for o in items if str(o).strip()]


class Settings(BaseSettings):
    app_name: str = Field(default="User Registration Service")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Database configuration
    # DB_URL wins when set (any SQLAlchemy URL, e.g. sqlite for local runs).
    # Otherwise a MySQL URL is assembled from the discrete DB_* values.
    db_url: str | None = Field(default=None)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=3306)
    db_name: str = Field(default="user_registration")
    db_user: str = Field(default="root")
    db_password: str = Field(default="")
    db_charset: str = Field(default="utf8mb4")

    # Uploads / static files
    upload_dir: str = Field(default="uploads")
    public_dir: str = Field(default="public")
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, gt=0)

    # bcrypt cost factor; 4 is the library minimum.
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # NoDecode lets the validator accept comma-separated values as well as JSON arrays.
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> list[str]:
        return _parse_origins(v)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_sqlalchemy_db_url(settings: Settings) -> str:
    if settings.db_url:
        return settings.db_url

    # NOTE: password may include special chars; safest is to rely on DB_URL for complex passwords.
    return (
        f"mysql+pymysql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f"?charset={settings.db_charset}"
    )
