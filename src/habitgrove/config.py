"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitGrove"
    DB_FILENAME = "habitgrove.db"
    MAX_ACTIVE_HABITS = 3
    DEFAULT_AI_BASE_URL = "https://ai.gateway.lovable.dev/v1"
    DEFAULT_AI_MODEL = "google/gemini-3-flash-preview"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.DATA_DIR = self._resolve_data_dir(data_dir)
        self.DEV_MODE = _env_bool("HABITGROVE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITGROVE_DATABASE_URL", self._build_sqlite_url())
        self.OWNER_ID = os.getenv("HABITGROVE_OWNER_ID", "local").strip() or "local"
        self.AI_API_KEY = os.getenv("HABITGROVE_AI_API_KEY") or None
        self.AI_BASE_URL = os.getenv("HABITGROVE_AI_BASE_URL", self.DEFAULT_AI_BASE_URL)
        self.AI_MODEL = os.getenv("HABITGROVE_AI_MODEL", self.DEFAULT_AI_MODEL)
        self.CLASSIFIER_TIMEOUT = _env_float("HABITGROVE_CLASSIFIER_TIMEOUT", 8.0)
        if self.CLASSIFIER_TIMEOUT <= 0:
            raise ValueError("HABITGROVE_CLASSIFIER_TIMEOUT must be positive.")

    def _resolve_data_dir(self, data_dir: Path | str | None) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = data_dir or os.getenv("HABITGROVE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    @property
    def ai_enabled(self) -> bool:
        """AI collaborators are only wired when an API key is configured."""

        return bool(self.AI_API_KEY)

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class TestConfig(BaseConfig):
    """Configuration for tests: isolated data dir, no AI collaborators."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, data_dir: Path | str) -> None:
        super().__init__(data_dir)
        self.DATABASE_URL = self._build_sqlite_url()
        self.AI_API_KEY = None
        self.OWNER_ID = "tester"
