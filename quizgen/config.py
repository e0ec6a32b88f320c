"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from quizgen.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"
# Gemini rejects inline attachments above roughly 20MB, so uploads are capped there.
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
  """Typed settings for the quiz generation service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_dir: Path
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  gemini_model: str
  generation_timeout_seconds: float
  max_upload_bytes: int
  strict_answer_check: bool
  shutdown_grace_seconds: float
  dummy_response_path: Path | None = None
  host: str = "127.0.0.1"
  port: int = 8000


_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag(name: str) -> bool:
  """Read an on/off environment switch; anything unrecognised is off."""
  return (os.getenv(name) or "").strip().lower() in _TRUTHY


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    return ("http://localhost:3000",)

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if not origins:
    raise ValueError("QUIZGEN_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("QUIZGEN_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _positive_float(name: str, default: str) -> float:
  value = float(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive number.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("QUIZGEN_ENV", "development").strip().lower()
  debug = _flag("QUIZGEN_DEBUG")

  log_backup_count = int(os.getenv("QUIZGEN_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("QUIZGEN_LOG_BACKUP_COUNT must be zero or a positive integer.")

  gemini_model = (os.getenv("QUIZGEN_GEMINI_MODEL") or DEFAULT_GEMINI_MODEL).strip()
  if not gemini_model:
    raise ValueError("QUIZGEN_GEMINI_MODEL must not be blank.")

  # Shutdown grace may be zero to cancel outstanding jobs immediately.
  shutdown_grace_seconds = float(os.getenv("QUIZGEN_SHUTDOWN_GRACE_SECONDS", "5"))
  if shutdown_grace_seconds < 0:
    raise ValueError("QUIZGEN_SHUTDOWN_GRACE_SECONDS must not be negative.")

  # Serve a fixed response file instead of calling Gemini; handy for local UI work.
  dummy_response = (os.getenv("QUIZGEN_DUMMY_RESPONSE_PATH") or "").strip()

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("QUIZGEN_ALLOWED_ORIGINS")),
    log_dir=Path(os.getenv("QUIZGEN_LOG_DIR", "logs")),
    log_max_bytes=_positive_int("QUIZGEN_LOG_MAX_BYTES", "5242880"),
    log_backup_count=log_backup_count,
    log_http_4xx=_flag("QUIZGEN_LOG_HTTP_4XX"),
    gemini_model=gemini_model,
    generation_timeout_seconds=_positive_float("QUIZGEN_GENERATION_TIMEOUT_SECONDS", "240"),
    max_upload_bytes=_positive_int("QUIZGEN_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)),
    strict_answer_check=_flag("QUIZGEN_STRICT_ANSWER_CHECK"),
    shutdown_grace_seconds=shutdown_grace_seconds,
    dummy_response_path=Path(dummy_response) if dummy_response else None,
    host=(os.getenv("QUIZGEN_HOST") or "127.0.0.1").strip(),
    port=_positive_int("QUIZGEN_PORT", "8000"),
  )
