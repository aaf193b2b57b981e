from __future__ import annotations

import os
from dataclasses import dataclass, field

from pdf_extractor.infrastructure.gemini import DEFAULT_API_BASE, DEFAULT_MODEL


def _origins_from_env() -> list[str]:
    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    return origins or ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass
class Settings:
    """Runtime configuration read from the environment."""

    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    gemini_api_base: str = DEFAULT_API_BASE
    extraction_timeout: float = 120.0
    extraction_concurrency: int = 1
    extraction_max_retries: int = 0
    extraction_retry_delay: float = 5.0
    cors_origins: list[str] = field(default_factory=_origins_from_env)
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        gemini_api_base=os.getenv("GEMINI_API_BASE", DEFAULT_API_BASE),
        extraction_timeout=float(os.getenv("EXTRACTION_TIMEOUT", "120")),
        extraction_concurrency=max(1, int(os.getenv("EXTRACTION_CONCURRENCY", "1"))),
        extraction_max_retries=max(0, int(os.getenv("EXTRACTION_MAX_RETRIES", "0"))),
        extraction_retry_delay=float(os.getenv("EXTRACTION_RETRY_DELAY", "5")),
        cors_origins=_origins_from_env(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
