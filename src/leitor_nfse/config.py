from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "leitor-nfse"

logger = logging.getLogger(__name__)


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and the dir does not exist yet.
    """
    from_env = os.environ.get("LEITOR_NFSE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/leitor_nfse/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_log_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("LEITOR_NFSE_CONFIG_DIR", "config", kind="config")


def get_log_dir() -> Path:
    return _resolve_dir("LEITOR_NFSE_LOG_DIR", "logs", kind="log")


# --- settings.yaml ---

BATCH_MODES = ("strict", "partial")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """User preferences read from settings.yaml. Every key is optional."""

    start_dir: Path | None = None
    batch_mode: str = "strict"
    log_level: str = "WARNING"

    @property
    def partial(self) -> bool:
        return self.batch_mode == "partial"

    @classmethod
    def from_dict(cls, d: dict) -> Settings:
        """Build Settings from a YAML-loaded dict, falling back to defaults on bad values."""
        start_dir = d.get("start_dir")
        batch_mode = str(d.get("batch_mode", "strict")).lower()
        if batch_mode not in BATCH_MODES:
            logger.warning("Invalid batch_mode %r in settings, using 'strict'", batch_mode)
            batch_mode = "strict"
        log_level = str(d.get("log_level", "WARNING")).upper()
        if log_level not in LOG_LEVELS:
            logger.warning("Invalid log_level %r in settings, using 'WARNING'", log_level)
            log_level = "WARNING"
        return cls(
            start_dir=Path(start_dir).expanduser() if start_dir else None,
            batch_mode=batch_mode,
            log_level=log_level,
        )


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_settings() -> Settings:
    """Load config/settings.yaml; a missing or unreadable file yields the defaults."""
    path = get_config_dir() / "settings.yaml"
    if not path.is_file():
        return Settings()
    try:
        data = load_yaml(path)
    except (OSError, yaml.YAMLError):
        logger.warning("Could not read %s, using default settings", path, exc_info=True)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level value is not a mapping", path)
        return Settings()
    return Settings.from_dict(data)


def get_log_level(settings: Settings | None = None) -> str:
    """Return the log level: LEITOR_NFSE_LOG_LEVEL env var, then settings, then WARNING."""
    from_env = os.environ.get("LEITOR_NFSE_LOG_LEVEL", "").upper()
    if from_env in LOG_LEVELS:
        return from_env
    return (settings or Settings()).log_level
