# src/salesportal/config/settings.py
"""
Application configuration management.
Loads settings from environment variables (and an optional .env file)
with sensible defaults.

Priorities for DB selection:
1) DB_PATH or DATABASE_PATH (absolute path)
2) APP_ENV-aware: DEV_DB_PATH / PROD_DB_PATH
3) Fallback to repo default: data/database/salesportal.db (prod) or salesportal_dev.db (dev/test)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from dotenv import load_dotenv


# -------------------------- helpers (pure) --------------------------


def _norm_env_name(raw: Optional[str]) -> str:
    """
    Normalize environment name to one of: dev | prod | test
    Accepts FLASK_ENV compatibility.
    """
    if not raw:
        raw = os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "prod"
    raw = raw.lower().strip()
    if raw in {"development", "debug"}:
        return "dev"
    if raw in {"production", "release"}:
        return "prod"
    if raw in {"testing", "tests"}:
        return "test"
    if raw not in {"dev", "prod", "test"}:
        return "prod"
    return raw


def _project_root() -> Path:
    return Path(
        os.getenv("PROJECT_ROOT", Path(__file__).parent.parent.parent.parent)
    ).resolve()


def _default_db_path(env: str, root: Path) -> Path:
    dbdir = root / "data" / "database"
    return (
        (dbdir / "salesportal_dev.db")
        if env in {"dev", "test"}
        else (dbdir / "salesportal.db")
    )


def _choose_db_path(env: str, root: Path) -> str:
    """
    Selection order (first non-empty wins):
      1) DB_PATH
      2) DATABASE_PATH
      3) DEV_DB_PATH / PROD_DB_PATH depending on env
      4) repo defaults (salesportal_dev.db for dev/test, salesportal.db for prod)
    """
    db_path = os.getenv("DB_PATH")
    if db_path:
        return str(Path(db_path).expanduser())

    db_path_legacy = os.getenv("DATABASE_PATH")
    if db_path_legacy:
        return str(Path(db_path_legacy).expanduser())

    if env in {"dev", "test"}:
        p = os.getenv("DEV_DB_PATH")
        if p:
            return str(Path(p).expanduser())
    else:
        p = os.getenv("PROD_DB_PATH")
        if p:
            return str(Path(p).expanduser())

    return str(_default_db_path(env, root))


def _bool(var: str, default: bool = False) -> bool:
    val = os.getenv(var)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _int(var: str, default: int) -> int:
    try:
        return int(os.getenv(var, "").strip() or default)
    except ValueError:
        return default


# -------------------------- dataclasses --------------------------


@dataclass
class DatabaseConfig:
    """Database configuration."""

    db_path: str
    auto_create_schema: bool


@dataclass
class WebConfig:
    """Web server configuration."""

    secret_key: str
    debug: bool
    host: str
    port: int
    max_content_length: int


@dataclass
class IngestionConfig:
    """Campaign ingestion configuration."""

    default_currency: str
    upload_user_default: str
    manual_user_default: str
    log_user_default: str
    log_limit_default: int


@dataclass
class Settings:
    """Application settings."""

    environment: str
    project_root: Path
    database: DatabaseConfig
    web: WebConfig
    ingestion: IngestionConfig

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"


# -------------------------- public API --------------------------


def get_settings(environment: Optional[str] = None) -> Settings:
    """
    Get application settings based on environment.
    """
    load_dotenv()

    env = _norm_env_name(environment)
    project_root = _project_root()

    database = DatabaseConfig(
        db_path=_choose_db_path(env, project_root),
        auto_create_schema=_bool("AUTO_CREATE_SCHEMA", True),
    )

    web = WebConfig(
        secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-in-production"),
        debug=_bool("DEBUG", env == "dev"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int("PORT", 8000),
        max_content_length=_int("MAX_CONTENT_LENGTH", 16 * 1024 * 1024),  # 16MB
    )

    ingestion = IngestionConfig(
        default_currency=os.getenv("DEFAULT_CURRENCY", "RM").strip() or "RM",
        upload_user_default=os.getenv("UPLOAD_USER_DEFAULT", "system"),
        manual_user_default=os.getenv("MANUAL_USER_DEFAULT", "manual_entry"),
        log_user_default=os.getenv("LOG_USER_DEFAULT", "unknown@unknown.com"),
        log_limit_default=_int("OPERATION_LOG_LIMIT", 100),
    )

    return Settings(
        environment=env,
        project_root=project_root,
        database=database,
        web=web,
        ingestion=ingestion,
    )
