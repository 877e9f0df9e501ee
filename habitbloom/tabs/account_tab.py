import streamlit as st


def render_account_tab(ctx):
    session = ctx["session"]
    auth = ctx["auth"]

    st.markdown("#### Create habit")
    with st.form("manage.create", clear_on_submit=True):
        name = st.text_input("Habit name", key="manage.new_name", placeholder="Drink water")
        if st.form_submit_button("Add habit"):
            if session.create_habit(name):
                st.rerun()

    st.markdown("#### Your habits")
    for habit in session.habits:
        cols = st.columns([5, 1])
        cols[0].write(habit["name"])
        if cols[1].button("Delete", key=f"manage.delete.{habit['id']}"):
            if session.delete_habit(habit["id"]):
                st.rerun()

    st.markdown("#### Change password")
    with st.form("manage.password", clear_on_submit=True):
        password = st.text_input("New password", type="password", key="manage.password")
        confirmation = st.text_input("Confirm password", type="password", key="manage.password_confirm")
        if st.form_submit_button("Update password"):
            session.change_password(auth, password, confirmation)
    if session.password_message:
        st.caption(session.password_message)
