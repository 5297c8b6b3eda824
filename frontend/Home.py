# frontend/Home.py
import os
import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
st.set_page_config(page_title="Stockbook - Device Intake", layout="wide")

# Defaults
DEFAULT_API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8011")
DEFAULT_TOKEN    = os.getenv("API_TOKEN", "")

def _normalize_token(raw: str) -> str:
    s = str(raw or "").strip().strip('"').strip("'")
    if not s:
        return ""
    # keep only the JWT when "Bearer ..." was pasted
    if s.lower().startswith("bearer "):
        s = s.split(" ", 1)[1].strip()
    return s

if "jwt" not in st.session_state:
    st.session_state["jwt"] = _normalize_token(DEFAULT_TOKEN)

st.title("Device Intake")

# --------- Sidebar: settings / login / health ---------
with st.sidebar:
    st.header("Settings")
    api_base = st.text_input("API base", value=DEFAULT_API_BASE, key="api_base")

    st.divider()
    st.subheader("Login (JWT)")
    colu, colp = st.columns(2)
    username = colu.text_input("User", value="", placeholder="intake1", key="user")
    password = colp.text_input("Password", value="", type="password", key="pass")
    c1, c2 = st.columns([1,1])
    do_login  = c1.button("Log in", key="btn_login")
    do_logout = c2.button("Log out", key="btn_logout")

    def _login(api_base: str, u: str, p: str) -> str:
        url = f"{api_base.rstrip('/')}/auth/login"
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        r = requests.post(url, headers=headers, data={"username": u, "password": p}, timeout=15)
        r.raise_for_status()
        return r.json().get("access_token", "")

    if do_login:
        try:
            tok = _normalize_token(_login(api_base, username, password))
            if tok:
                st.session_state["jwt"] = tok
                st.success("Logged in.")
            else:
                st.error("Login failed: empty access_token.")
        except requests.RequestException as e:
            st.error(f"Login error: {e}")

    if do_logout:
        st.session_state["jwt"] = ""
        st.info("Logged out.")

    st.divider()
    st.subheader("API health")
    try:
        h = requests.get(f"{api_base.rstrip('/')}/health", timeout=5)
        h.raise_for_status()
        st.success("API: OK")
    except requests.RequestException as e:
        st.error(f"API unreachable: {e}")

st.markdown(
    "Use **Book shipment** in the page list to scan devices against a pending purchase order. "
    "Devices are packed into trays of 50 in scan order."
)
