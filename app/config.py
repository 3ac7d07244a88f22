"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

_PROJECT_ROOT = Path(__file__).resolve().parents[1]


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_path_env(name: str, default: Path) -> Path:
    raw = _get_str_env(name, "")
    if not raw:
        return default
    path = Path(raw)
    return path if path.is_absolute() else _PROJECT_ROOT / path


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for tabular data import.
    """

    batch_size: int = 1000
    log_validation_errors: bool = True
    upload_dir: Path = _PROJECT_ROOT / "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class ExportSettings:
    """
    Runtime settings for export files and PDF reports.
    """

    export_dir: Path = _PROJECT_ROOT / "exports"
    download_path_prefix: str = "/api/data-import/download"
    max_rows: int = 100_000


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        batch_size=max(1, _get_int_env("IMPORT_BATCH_SIZE", 1000)),
        log_validation_errors=_get_bool_env("IMPORT_LOG_VALIDATION_ERRORS", True),
        upload_dir=_get_path_env("IMPORT_UPLOAD_DIR", _PROJECT_ROOT / "uploads"),
        max_upload_bytes=max(1, _get_int_env("IMPORT_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_export_settings() -> ExportSettings:
    """
    Return cached export settings from environment variables.
    """

    return ExportSettings(
        export_dir=_get_path_env("EXPORT_DIR", _PROJECT_ROOT / "exports"),
        download_path_prefix=_get_str_env("EXPORT_DOWNLOAD_PATH_PREFIX", "/api/data-import/download").rstrip("/"),
        max_rows=max(1, _get_int_env("EXPORT_MAX_ROWS", 100_000)),
    )
