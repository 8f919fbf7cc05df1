"""
Configuration for the FolderTree tool.

Settings come from environment variables. A local .env file is loaded first,
so API keys can live next to the project:

    GEMINI_API_KEY=your-key-here
    ALLOWED_OUTPUT_BASE=/home/me/projects
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .errors import ValidationError

DEFAULT_OUTPUT_DIR = "./generated"
DEFAULT_LARGE_FILE_MB = 50
DUPLICATE_STRATEGIES = ("size", "nameSize", "hash")
AI_PROVIDERS = ("ollama", "openai", "gemini", "local")


@dataclass
class Settings:
    """Options the core honors. Everything has a usable default."""
    allowed_output_base: str | None = None
    default_output_dir: str = DEFAULT_OUTPUT_DIR
    large_file_mb: int = DEFAULT_LARGE_FILE_MB
    duplicate_strategy: str = "size"
    max_scan_depth: int | None = None
    follow_symlinks: bool = False
    ai_provider: str = "ollama"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    ollama_url: str = "http://localhost:11434/api/generate"
    ollama_model: str = "mistral"
    gemini_api_key: str | None = None
    gemini_model: str = "flash"
    rate_limit_window_ms: int = 900000
    rate_limit_max_requests: int = 100
    log_level: str = "INFO"


def _env_int(env: dict, name: str, default: int | None) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a valid number (got {raw!r})")


def _env_bool(env: dict, name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env: dict | None = None, dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read from. Defaults to os.environ.
        dotenv: Load a .env file into os.environ first.

    Returns:
        A populated Settings instance.

    Raises:
        ValidationError: If a numeric or enum variable is malformed.
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = dict(os.environ)

    errors = []

    duplicate_strategy = env.get("DUPLICATE_STRATEGY", "size")
    if duplicate_strategy not in DUPLICATE_STRATEGIES:
        errors.append(f"DUPLICATE_STRATEGY must be one of: {', '.join(DUPLICATE_STRATEGIES)}")

    ai_provider = env.get("AI_PROVIDER", "ollama").lower()
    if ai_provider not in AI_PROVIDERS:
        errors.append(f"AI_PROVIDER must be one of: {', '.join(AI_PROVIDERS)}")

    if errors:
        raise ValidationError("Invalid environment configuration:\n" + "\n".join(errors))

    return Settings(
        allowed_output_base=env.get("ALLOWED_OUTPUT_BASE") or None,
        default_output_dir=env.get("DEFAULT_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        large_file_mb=_env_int(env, "LARGE_FILE_MB", DEFAULT_LARGE_FILE_MB),
        duplicate_strategy=duplicate_strategy,
        max_scan_depth=_env_int(env, "MAX_SCAN_DEPTH", None),
        follow_symlinks=_env_bool(env, "FOLLOW_SYMLINKS", False),
        ai_provider=ai_provider,
        openai_api_key=env.get("OPENAI_API_KEY") or None,
        openai_model=env.get("OPENAI_MODEL") or "gpt-4o-mini",
        ollama_url=env.get("OLLAMA_URL") or "http://localhost:11434/api/generate",
        ollama_model=env.get("OLLAMA_MODEL") or "mistral",
        gemini_api_key=env.get("GEMINI_API_KEY") or None,
        gemini_model=env.get("GEMINI_MODEL") or "flash",
        rate_limit_window_ms=_env_int(env, "RATE_LIMIT_WINDOW_MS", 900000),
        rate_limit_max_requests=_env_int(env, "RATE_LIMIT_MAX_REQUESTS", 100),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
