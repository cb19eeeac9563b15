from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Literal

class Settings(BaseSettings):
    app_name: str = "MysticWriter"

    # Backend-as-a-service that owns auth, records, storage and the AI proxy
    backend_url: str = "https://localhost:7130"
    backend_api_key: str = ""

    # Avatar pipeline
    avatar_bucket: str = "character-avatars"
    avatar_model: str = "google/gemini-2.5-flash-image-preview"
    avatar_size: int = 512
    avatar_quality: int = 70  # WebP quality, 0-100

    # "backend" uses the BaaS AI proxy, "gemini" calls google-genai directly
    image_provider: Literal["backend", "gemini"] = "backend"
    google_api_key: str = ""
    gemini_image_model: str = "gemini-2.5-flash-image-preview"

    # Default model for writing helpers (qualified with a provider prefix at call time)
    chat_model: str = "gemini-2.5-pro"

    # Retry settings for idempotent record reads
    read_max_retries: int = 3
    read_base_delay: float = 0.5  # seconds, used with exponential backoff

    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    log_file: str = "server.log"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

@lru_cache
def get_settings():
    return Settings()
