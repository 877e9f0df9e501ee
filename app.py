import logging

import streamlit as st

from habitbloom.auth import get_auth_session, get_secret, render_auth_panel
from habitbloom.context import AppContext
from habitbloom.data import api_client
from habitbloom.header import render_header
from habitbloom.logging_config import configure_logging
from habitbloom.router import render_router
from habitbloom.session import open_session

configure_logging()
logger = logging.getLogger("habitbloom.app")

st.set_page_config(page_title="HabitBloom", layout="wide")

api_client.configure(get_secret)


def get_habit_session(auth):
    habit_session = st.session_state.get("habits.session")
    if habit_session is not None and habit_session.user.get("id") == auth.user.get("id"):
        return habit_session
    habit_session = open_session(auth)
    logger.info("Opened habit session for user %s", auth.user.get("id"))
    habit_session.load()
    st.session_state["habits.session"] = habit_session
    return habit_session


def main():
    if not api_client.is_enabled():
        st.error("API_BASE_URL is not configured.")
        st.code("[app]\nAPI_BASE_URL = \"http://localhost:8000\"", language="toml")
        st.stop()

    auth = get_auth_session()
    if not auth.user:
        render_auth_panel(auth)
        st.stop()

    habit_session = get_habit_session(auth)
    habit_session.sync()
    if not habit_session.loaded and st.button("Retry loading", key="ui.reload"):
        habit_session.load()

    ctx = AppContext({"auth": auth, "session": habit_session})
    render_header(ctx)
    render_router(ctx)


main()
