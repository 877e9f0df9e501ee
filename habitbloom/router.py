import streamlit as st

from habitbloom.tabs.account_tab import render_account_tab
from habitbloom.tabs.day_tab import render_day_tab
from habitbloom.tabs.grid_tab import render_grid_tab


TAB_OPTIONS = [
    "Habit streaks",
    "Habits on this day",
    "Manage",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Habits on this day":
        return render_day_tab(ctx)

    if active == "Manage":
        return render_account_tab(ctx)

    return render_grid_tab(ctx)
