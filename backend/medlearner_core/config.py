from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_MODEL = "google/gemini-flash"
DEFAULT_HTTP_REFERER = "https://medical-learner.vercel.app"
DEFAULT_X_TITLE = "Medical Learner AI"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


def _parse_env_line(raw: str) -> tuple[str, str] | None:
    line = raw.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not _ENV_KEY_RE.fullmatch(key):
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return key, value


def load_env_file(path: Path) -> None:
    """Fill unset environment variables from a KEY=VALUE file, if it exists."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        entry = _parse_env_line(raw)
        if entry:
            os.environ.setdefault(*entry)


def bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    candidates = [
        repo_root / ".env",
        repo_root / "backend/.env",
    ]
    for candidate in candidates:
        if candidate.exists():
            load_env_file(candidate)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigError(f"{name} must be at least 1")
    return value


@dataclass(frozen=True)
class AssessmentConfig:
    openrouter_api_key: str
    gemini_api_key: str
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    openrouter_base_url: str = DEFAULT_OPENROUTER_BASE_URL
    http_referer: str = DEFAULT_HTTP_REFERER
    x_title: str = DEFAULT_X_TITLE
    gemini_model: str = DEFAULT_GEMINI_MODEL
    timeout_seconds: float = 60.0
    max_attempts: int = 3
    retry_delay_seconds: float = 2.0
    response_language: str = "English"

    @classmethod
    def from_env(cls) -> "AssessmentConfig":
        openrouter_api_key = _env_str("OPENROUTER_API_KEY")
        if not openrouter_api_key:
            raise ConfigError("OPENROUTER_API_KEY is not defined in the environment.")
        gemini_api_key = _env_str("GEMINI_API_KEY")
        if not gemini_api_key:
            raise ConfigError("GEMINI_API_KEY is not defined for fallback usage in the environment.")
        return cls(
            openrouter_api_key=openrouter_api_key,
            gemini_api_key=gemini_api_key,
            openrouter_model=_env_str("OPENROUTER_MODEL", DEFAULT_OPENROUTER_MODEL),
            openrouter_base_url=_env_str("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).rstrip("/"),
            http_referer=_env_str("OPENROUTER_HTTP_REFERER", DEFAULT_HTTP_REFERER),
            x_title=_env_str("OPENROUTER_X_TITLE", DEFAULT_X_TITLE),
            gemini_model=_env_str("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            timeout_seconds=_env_float("MEDLEARNER_PROVIDER_TIMEOUT_SECONDS", 60.0),
            max_attempts=_env_int("MEDLEARNER_MAX_ATTEMPTS", 3),
            retry_delay_seconds=_env_float("MEDLEARNER_RETRY_DELAY_SECONDS", 2.0),
            response_language=_env_str("MEDLEARNER_RESPONSE_LANGUAGE", "English"),
        )
