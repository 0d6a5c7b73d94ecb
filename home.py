from __future__ import annotations

import streamlit as st

from bakery import backup
from bakery.config import get_settings
from bakery.db import IMAGE_KEY
from bakery.errors import BakeryDBError, ImageUnreadableError
from bakery.runtime import get_api
from bakery.store import FileStore
from bakery.ui import SESSION_ROLE, current_role, show_rows

st.set_page_config(page_title="Risna Cookies", page_icon="🍪", layout="wide")

st.title("🍪 Risna Cookies — Back Office")
st.caption("Deliveries, stock, payroll and bookkeeping. Everything is saved locally after each change.")

settings = get_settings()
api = get_api()

try:
    api.ensure_ready()
except BakeryDBError as e:
    st.error(f"Database unavailable: {e}")
    if isinstance(e, ImageUnreadableError):
        image_path = settings.store_dir / f"{IMAGE_KEY}{FileStore.suffix}"
        st.write(f"The saved database `{image_path}` cannot be loaded. Restore a backup or start empty.")
        uploaded = st.file_uploader("Backup file", type=["sqlite", "db"])
        c1, c2 = st.columns(2)
        if uploaded is not None and c1.button("Restore this backup", type="primary"):
            try:
                backup.import_image(api.db, uploaded.getvalue())
                st.rerun()
            except BakeryDBError as restore_error:
                st.error(f"Import failed: {restore_error}")
        if c2.button("Discard saved database and start empty"):
            try:
                api.db.discard_image()
                st.rerun()
            except (BakeryDBError, OSError) as discard_error:
                st.error(str(discard_error))
    if st.button("Retry"):
        st.rerun()
    st.stop()

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    role = current_role()
    if role:
        st.write(f"Logged in as **{role}**")
        if st.button("Log out"):
            st.session_state.pop(SESSION_ROLE, None)
            st.rerun()

if not current_role():
    st.subheader("Login")
    pin = st.text_input("PIN", type="password", max_chars=6)
    if st.button("Log in", type="primary"):
        result = api.login(pin)
        if result["success"]:
            st.session_state[SESSION_ROLE] = result["role"]
            st.rerun()
        else:
            st.error("Wrong PIN.")
    st.stop()

stats = api.get_dashboard_stats()
c1, c2, c3, c4, c5, c6 = st.columns(6)
c1.metric("Deliveries", stats["total_deliveries"])
c2.metric("Pending", stats["pending_deliveries"])
c3.metric("Completed", stats["completed_deliveries"])
c4.metric(f"Revenue ({settings.currency})", f"{stats['total_revenue']:,.0f}")
c5.metric("Returns", stats["total_returns"])
c6.metric("Low stock", stats["low_stock_products"])

st.subheader("Birthdays this week")
show_rows(
    api.get_upcoming_birthdays(),
    empty="No birthdays in the next 7 days.",
    columns=["name", "position", "next_birthday", "days_until_birthday"],
)
