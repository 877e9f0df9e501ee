from __future__ import annotations

import logging
import os

import streamlit as st

from habitbloom.data.api_client import RemoteError
from habitbloom.session import AuthSession
from habitbloom.state import session_slices
from habitbloom.validation import ValidationError

logger = logging.getLogger(__name__)

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError):
        return default
    return current


def get_auth_session() -> AuthSession:
    if "auth.session" not in st.session_state:
        auth = AuthSession()
        auth.subscribe(_on_auth_change)
        st.session_state["auth.session"] = auth
    return st.session_state["auth.session"]


def _on_auth_change(event, user):
    logger.info("Auth event %s", event)
    if event == "SIGNED_OUT":
        habit_session = st.session_state.pop("habits.session", None)
        if habit_session is not None:
            habit_session.close()
        session_slices.clear_all()


def _submit(auth, mode, email, password, username):
    session_slices.set_value("auth", "error", "")
    session_slices.set_value("auth", "info", "")
    try:
        if mode == "signup":
            auth.sign_up(email, password, username)
        else:
            auth.sign_in_with_password(email, password)
    except ValidationError as exc:
        session_slices.set_value("auth", "error", str(exc))
    except (RemoteError, RuntimeError) as exc:
        logger.error("Authentication failed: %s", exc)
        session_slices.set_value("auth", "error", getattr(exc, "message", None) or "Something went wrong.")


def _forgot_password(auth, email):
    session_slices.set_value("auth", "error", "")
    session_slices.set_value("auth", "info", "")
    try:
        auth.reset_password_for_email(email)
    except ValidationError as exc:
        session_slices.set_value("auth", "error", str(exc))
        return
    except (RemoteError, RuntimeError) as exc:
        logger.error("Password reset failed: %s", exc)
        session_slices.set_value("auth", "error", getattr(exc, "message", None) or "Failed to send reset email.")
        return
    session_slices.set_value("auth", "info", "Password reset link sent to your email.")


def render_auth_panel(auth: AuthSession):
    st.markdown("## HabitBloom")
    st.caption("Build better habits one tiny step at a time. Check in daily and watch the grid fill up.")
    mode = st.segmented_control("Account", ["Log in", "Sign up"], key="auth.mode", default="Log in")
    signup = mode == "Sign up"
    with st.form("auth.form"):
        username = st.text_input("Username", key="auth.username") if signup else ""
        email = st.text_input("Email", key="auth.email")
        password = st.text_input("Password", type="password", key="auth.password")
        submitted = st.form_submit_button("Create account" if signup else "Log in")
    if submitted:
        _submit(auth, "signup" if signup else "login", email, password, username)
        if auth.user:
            st.rerun()
    if not signup and st.button("Forgot password", key="auth.forgot"):
        _forgot_password(auth, st.session_state.get("auth.email", ""))
    error = session_slices.get_value("auth", "error")
    info = session_slices.get_value("auth", "info")
    if error:
        st.error(error)
    if info:
        st.info(info)
