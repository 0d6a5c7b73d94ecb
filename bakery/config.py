from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import streamlit as st

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "RISNA_DATA_DIR"
SESSION_DATA_DIR = "risna_data_dir"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    store_dir: Path
    currency: str = "IDR"
    product_name: str = "risna_cookies"


def _default_data_dir() -> Path:
    return Path.home() / ".risna_cookies"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            payload = json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s: %s", cfg, exc)
            return {}
        return payload if isinstance(payload, dict) else {}
    return {}


def persist_data_dir(data_dir_str: str, *, base_dir: Optional[Path] = None) -> Path:
    """Remember ``data_dir_str`` as the data directory for future starts."""
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    base = base_dir or _default_data_dir()
    base.mkdir(parents=True, exist_ok=True)
    cfg = base / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return data_dir


def load_settings(data_dir: Optional[str] = None, *, environ=None) -> Settings:
    # Priority order:
    # 1) Explicit argument (session state when called from the UI)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    environ = os.environ if environ is None else environ
    if data_dir:
        resolved = Path(data_dir).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        resolved = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        resolved = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    resolved.mkdir(parents=True, exist_ok=True)
    return Settings(data_dir=resolved, store_dir=resolved / "store")


@st.cache_resource
def _cached_settings(data_dir: Optional[str]) -> Settings:
    return load_settings(data_dir)


def get_settings() -> Settings:
    return _cached_settings(st.session_state.get(SESSION_DATA_DIR))
