"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables, the
project-level constants (PROJECT_ROOT, LOG_LEVEL) and load_cache_config(),
which builds a validated CacheConfig from CACHE_* variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from core.models import CacheConfig


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_list(name: str) -> Optional[List[str]]:
    # Comma separated; an empty item (",,") keeps the extensionless entry.
    raw = os.environ.get(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",")]


# Project root for the SecureGateway security boundary
PROJECT_ROOT = Path(os.environ.get("PROJECT_ROOT", ".")).resolve()

# Logging (stderr; stdout is the MCP transport)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()


def load_cache_config() -> CacheConfig:
    """Build a CacheConfig from the environment, defaulting every unset option."""
    d = CacheConfig()
    exts = _env_list("CACHE_ALLOWED_EXTENSIONS")
    return CacheConfig(
        max_memory_usage=_env_int("CACHE_MAX_MEMORY_BYTES", d.max_memory_usage),
        max_entries=_env_int("CACHE_MAX_ENTRIES", d.max_entries),
        max_file_size=_env_int("CACHE_MAX_FILE_SIZE", d.max_file_size),
        ttl_seconds=_env_float("CACHE_TTL_SECONDS", d.ttl_seconds),
        sweep_interval_seconds=_env_float("CACHE_SWEEP_INTERVAL", d.sweep_interval_seconds),
        integrity_check_enabled=_env_bool("CACHE_INTEGRITY_CHECK", d.integrity_check_enabled),
        allowed_extensions=frozenset(exts) if exts is not None else d.allowed_extensions,
        read_concurrency=_env_int("CACHE_READ_CONCURRENCY", d.read_concurrency),
        fold_case=_env_bool("CACHE_FOLD_CASE", d.fold_case),
    )
