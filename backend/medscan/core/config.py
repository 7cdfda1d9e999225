from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def _load_dotenv() -> None:
    if os.getenv("MEDSCAN_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    load_dotenv(env_path, override=False)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(value: str | None, default: int, *, minimum: int) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_choice(value: str | None, choices: set[str], default: str) -> str:
    normalized = (value or "").strip().lower()
    return normalized if normalized in choices else default


@dataclass(frozen=True)
class Settings:
    env: str
    app_name: str
    cors_origins: list[str]
    upload_dir: Path
    ocr_backend: str
    llm_backend: str
    ocr_api_key: str
    openrouter_api_key: str
    model_id: str
    analysis_mode: str
    max_tokens: int
    ocr_language: str
    ocr_max_attempts: int
    llm_max_attempts: int
    llm_retry_delay_ms: int
    http_timeout_seconds: int
    app_url: str
    app_title: str
    log_format: str

    @property
    def llm_retry_delay_seconds(self) -> float:
        return self.llm_retry_delay_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    cors = os.getenv("MEDSCAN_CORS_ORIGINS", "*")
    upload_dir = Path(os.getenv("MEDSCAN_UPLOAD_DIR") or tempfile.gettempdir())
    max_tokens = _parse_int(os.getenv("MEDSCAN_MAX_TOKENS"), 300, minimum=1)
    ocr_max_attempts = _parse_int(os.getenv("MEDSCAN_OCR_MAX_ATTEMPTS"), 1, minimum=1)
    llm_max_attempts = _parse_int(os.getenv("MEDSCAN_LLM_MAX_ATTEMPTS"), 2, minimum=1)
    llm_retry_delay_ms = _parse_int(os.getenv("MEDSCAN_LLM_RETRY_DELAY_MS"), 1000, minimum=0)
    http_timeout_seconds = _parse_int(os.getenv("MEDSCAN_HTTP_TIMEOUT_SECONDS"), 60, minimum=1)

    return Settings(
        env=os.getenv("MEDSCAN_ENV", "development"),
        app_name="MedScan API",
        cors_origins=_split_csv(cors) or ["*"],
        upload_dir=upload_dir,
        ocr_backend=_parse_choice(os.getenv("MEDSCAN_OCR_BACKEND"), {"ocrspace", "mock"}, "ocrspace"),
        llm_backend=_parse_choice(os.getenv("MEDSCAN_LLM_BACKEND"), {"openrouter", "mock"}, "openrouter"),
        ocr_api_key=os.getenv("OCR_API_KEY", ""),
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
        model_id=os.getenv("MEDSCAN_MODEL", "").strip() or "google/gemini-2.5-flash",
        analysis_mode=_parse_choice(os.getenv("MEDSCAN_ANALYSIS_MODE"), {"text", "vision"}, "text"),
        max_tokens=max_tokens,
        ocr_language=os.getenv("MEDSCAN_OCR_LANGUAGE", "eng").strip() or "eng",
        ocr_max_attempts=ocr_max_attempts,
        llm_max_attempts=llm_max_attempts,
        llm_retry_delay_ms=llm_retry_delay_ms,
        http_timeout_seconds=http_timeout_seconds,
        app_url=os.getenv("MEDSCAN_APP_URL", "http://localhost:3000"),
        app_title=os.getenv("MEDSCAN_APP_TITLE", "Medicine Search App"),
        log_format=_parse_choice(os.getenv("MEDSCAN_LOG_FORMAT"), {"text", "json"}, "text"),
    )
