from datetime import date

import streamlit as st

from habitbloom.share import share_text


def _toggle(session, habit_id, day_iso):
    session.controller.click(habit_id, day_iso)


def render_day_tab(ctx):
    session = ctx["session"]
    st.markdown("#### Habits on this day")
    first_day = session.axis[0].date
    last_day = session.axis[-1].date
    picked = st.date_input(
        "Date",
        value=date.fromisoformat(session.selected_date),
        min_value=first_day,
        max_value=last_day,
        key="day.selected",
    )
    if picked and picked.isoformat() != session.selected_date:
        session.select_date(picked.isoformat())

    day_iso = session.selected_date
    for habit in session.habits:
        habit_id = str(habit["id"])
        done = session.store.get(habit_id, day_iso)
        st.checkbox(
            habit["name"],
            value=done,
            key=f"day.done.{habit_id}.{day_iso}",
            on_change=_toggle,
            args=(session, habit_id, day_iso),
        )

    summary = session.summary()
    cols = st.columns(4)
    cols[0].metric("Done this day", f"{summary['selected_completed']}/{summary['total_habits']}")
    cols[1].metric("Completion rate", f"{summary['overall_completion_rate']}%")
    cols[2].metric("Longest streak", summary["longest_streak"])
    best = summary["best_habit"]
    cols[3].metric("Best habit", best["name"] if best else "-")
    st.progress(min(1.0, max(0.0, summary["selected_ratio"])))

    st.text_area(
        "Share text",
        value=share_text(day_iso, summary["selected_completed"], summary["total_habits"]),
        key=f"day.share.{day_iso}",
        disabled=True,
    )
