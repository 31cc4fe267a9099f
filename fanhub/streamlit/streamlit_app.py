"""
FanHub - celebrity directory for fans.
Main entry point with login and signup.
"""

import logging

import streamlit as st

from fanhub.core import auth
from fanhub.core.config import configure_logging
from fanhub.core.errors import FanHubError
from fanhub.schemas.auth import Role
from fanhub.streamlit.shared import get_context, run_async, setup_page

configure_logging()
logger = logging.getLogger(__name__)

setup_page("Welcome", "⭐")


def main():
    st.title("⭐ FanHub")
    context = get_context()

    if not context.session_restored:
        context.session.restore()
        context.session_restored = True

    identity = context.session.identity
    if identity is not None:
        st.success(f"Signed in as **{identity.display_name}** ({identity.role.value})")
        st.info("👈 Use the sidebar to browse celebrities or open your dashboard")
        if st.button("Log out"):
            auth.sign_out(context.session, context.registry)
            st.rerun()
        return

    login_tab, signup_tab = st.tabs(["Login", "Sign Up"])

    with login_tab:
        with st.form("login"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            role = st.radio("I am a", [r.value for r in Role], horizontal=True)
            submitted = st.form_submit_button("Login")
        if submitted:
            try:
                run_async(auth.sign_in(username, password, role, context.session, context.backend))
                st.rerun()
            except (FanHubError, ValueError) as e:
                logger.exception("Login failed for %s", username)
                st.error(f"Authentication failed: {e}")

    with signup_tab:
        with st.form("signup"):
            username = st.text_input("Username", key="signup_username")
            password = st.text_input("Password", type="password", key="signup_password")
            role = st.radio("I am a", [r.value for r in Role], horizontal=True, key="signup_role")
            submitted = st.form_submit_button("Sign Up")
        if submitted:
            try:
                run_async(auth.sign_up(username, password, role, context.session, context.backend))
                st.rerun()
            except (FanHubError, ValueError) as e:
                logger.exception("Signup failed for %s", username)
                st.error(f"Signup failed: {e}")


main()
