import streamlit as st

from habitbloom import visualizations
from habitbloom.batch_edit import ENTER, PRESS, RELEASE
from habitbloom.share import export_grid_html


def chart_key(habit_id):
    return f"grid.habit.{habit_id}"


def apply_selection(session, habit_id, days, state):
    """Replays a click or box/lasso selection as one paint gesture over the row.

    The chart's selection is dropped from ``state`` so it is not replayed on
    the next rerun and picking the same cells again toggles them again.
    """
    if not days:
        return False
    state.pop(chart_key(habit_id), None)
    events = session.events
    events.emit(PRESS, habit_id, days[0])
    for day_iso in days[1:]:
        events.emit(ENTER, habit_id, day_iso)
    events.emit(RELEASE)
    return True


def render_grid_tab(ctx):
    session = ctx["session"]
    st.markdown("#### Habit streaks")
    st.caption("Each row is one habit. Click a day to toggle it, or box-select to paint many days at once.")

    overview = visualizations.overview_grid(
        session.habits, session.axis, session.store, session.selected_date, session.theme
    )
    st.plotly_chart(overview, use_container_width=True, key="grid.overview")
    st.download_button(
        "Download heatmap",
        data=export_grid_html(overview),
        file_name="habit-heatmap.html",
        mime="text/html",
        key="grid.export",
    )

    if not session.habits:
        st.caption("No habits yet. Add one under Manage to start your streaks ✨")
        return

    stats = {str(item["habit"]["id"]): item for item in session.habit_stats()}
    changed = False
    for habit in session.habits:
        habit_id = str(habit["id"])
        item = stats.get(habit_id, {})
        cols = st.columns([4, 1])
        cols[0].markdown(f"**{habit['name']}**")
        cols[1].caption(f"🔥 {item.get('current_streak', 0)} · best {item.get('longest_streak', 0)}")
        fig = visualizations.habit_grid(habit, session.axis, session.store, session.selected_date, session.theme)
        event = st.plotly_chart(
            fig,
            use_container_width=True,
            key=chart_key(habit_id),
            on_select="rerun",
            selection_mode=("points", "box", "lasso"),
        )
        days = visualizations.selected_days(event)
        changed = apply_selection(session, habit_id, days, st.session_state) or changed
    if changed:
        st.rerun()
