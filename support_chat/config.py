# support_chat/config.py
import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_DOCS_PATH = Path(__file__).parent / "data" / "docs.json"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    """Application settings loaded from environment variables (and .env).

    Keep all credentials and config centralized here.
    """

    app_env: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    database_url: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./support_chat.db")
    )
    openai_api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY") or "")
    chat_model: str = Field(default_factory=lambda: os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"))
    docs_path: Path = Field(
        default_factory=lambda: Path(os.getenv("DOCS_PATH", str(DEFAULT_DOCS_PATH)))
    )
    rate_limit: str = Field(default_factory=lambda: os.getenv("RATE_LIMIT", "20/minute"))
    rate_limit_enabled: bool = Field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))
    cors_origins: List[str] = Field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "5000")))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
