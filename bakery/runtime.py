"""Process-wide database handle shared by every Streamlit session."""

from __future__ import annotations

from pathlib import Path

import streamlit as st

from bakery.config import get_settings
from bakery.db import Database
from bakery.gateway import Gateway
from bakery.logging_setup import setup_logging
from bakery.store import FileStore


@st.cache_resource
def _get_db(store_dir: Path) -> Database:
    setup_logging()
    return Database(FileStore(store_dir))


def get_db() -> Database:
    return _get_db(get_settings().store_dir)


def get_api() -> Gateway:
    return Gateway(get_db())
