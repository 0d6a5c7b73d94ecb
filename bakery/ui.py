"""Small Streamlit helpers shared by the pages."""

from __future__ import annotations

from typing import Any, Callable, Optional

import pandas as pd
import streamlit as st

from bakery.errors import BakeryDBError, InitializationError, PersistenceError

SESSION_ROLE = "risna_role"


def run_action(fn: Callable[[], Any], success: Optional[str] = None) -> None:
    """Run a data operation and report the outcome the way operators expect it."""
    try:
        fn()
    except PersistenceError as e:
        st.warning(f"Data modified but not saved: {e}")
        return
    except InitializationError as e:
        st.error(f"Database unavailable: {e}")
        return
    except (BakeryDBError, ValueError) as e:
        st.error(str(e))
        return
    if success:
        st.success(success)
    st.rerun()


def show_rows(rows: list[dict], empty: str = "No data yet.", columns: Optional[list[str]] = None) -> None:
    if not rows:
        st.info(empty)
        return
    df = pd.DataFrame(rows)
    if columns:
        df = df[[c for c in columns if c in df.columns]]
    st.dataframe(df, use_container_width=True, hide_index=True)


def current_role() -> Optional[str]:
    return st.session_state.get(SESSION_ROLE)


def require_login() -> str:
    role = current_role()
    if not role:
        st.warning("Please log in with your PIN on the Home page first.")
        st.stop()
    return role


def require_admin() -> None:
    if require_login() != "admin":
        st.error("This page is for admin users only.")
        st.stop()
