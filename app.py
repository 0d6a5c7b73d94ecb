from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Risna Cookies", page_icon="🍪", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_🏙️_Master_Data.py", title="Cities & Stores", icon="🏙️"),
    st.Page("pages/2_🍪_Products.py", title="Products & Stock", icon="🍪"),
    st.Page("pages/3_🚚_Deliveries.py", title="Deliveries", icon="🚚"),
    st.Page("pages/4_📒_Bookkeeping.py", title="Bookkeeping", icon="📒"),
    st.Page("pages/5_💾_Data_Backup.py", title="Data Backup", icon="💾"),
]

st.navigation(pages).run()
