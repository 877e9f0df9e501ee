import streamlit as st

from habitbloom.session import display_name


def render_header(ctx):
    session = ctx["session"]
    auth = ctx["auth"]
    summary = session.summary()
    cols = st.columns([3, 1, 1])
    with cols[0]:
        st.markdown("### 🌱 HabitBloom")
        st.caption(display_name(session.user))
    with cols[1]:
        theme = st.selectbox("Theme", ["light", "dark"], key="ui.theme", index=0 if session.theme == "light" else 1)
        session.theme = theme
    with cols[2]:
        if st.button("Log out", key="ui.logout"):
            auth.sign_out()
            st.rerun()
    if summary["pending_writes"]:
        st.caption(f"{summary['pending_writes']} change(s) waiting to sync.")
    if summary["rejected_writes"]:
        st.warning(
            f"{summary['rejected_writes']} change(s) were rejected by the server. Reload to see the saved state."
        )
        if st.button("Reload", key="ui.reload_rejected"):
            session.adapter.clear_rejected()
            session.load()
            st.rerun()
    if session.message:
        st.error(session.message)
