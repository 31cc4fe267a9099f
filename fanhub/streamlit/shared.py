"""
Shared utilities for the FanHub Streamlit app.
"""

import asyncio

import streamlit as st

from fanhub.core.config import settings
from fanhub.core.session import JsonFileStorage, SessionStore
from fanhub.core.views import CelebrityCard, ViewBinder, ViewContext


def run_async(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def get_context() -> ViewContext:
    """One ViewContext per browser session, shared by every page."""
    if "fanhub_context" not in st.session_state:
        session = SessionStore(JsonFileStorage(settings.SESSION_FILE))
        st.session_state.fanhub_context = ViewContext(session)
    return st.session_state.fanhub_context


def setup_page(title: str, icon: str = "⭐"):
    """Common page setup."""
    st.set_page_config(
        page_title=f"{title} - FanHub",
        page_icon=icon,
        layout="wide"
    )


FLASH_KEY = "fanhub_flash"


def keep_messages(view: ViewBinder):
    """Carry the binder's messages over the next st.rerun()."""
    st.session_state.setdefault(FLASH_KEY, []).extend(view.messages)
    view.messages.clear()


def show_messages(view: ViewBinder):
    """Flush carried-over and pending messages to the page."""
    for message in st.session_state.pop(FLASH_KEY, []) + view.messages:
        getattr(st, message.level, st.info)(message.text)
    view.messages.clear()


def render_card(view: ViewBinder, card: CelebrityCard, key_prefix: str):
    """Render one celebrity row with its follow button."""
    record = card.record
    col1, col2, col3 = st.columns([1, 4, 2])

    with col1:
        if record.profile_image_url:
            st.image(str(record.profile_image_url), width=64)
        else:
            st.write("⭐")

    with col2:
        st.write(f"**{record.name}**")
        st.caption(f"{', '.join(record.category)} · {record.country}")
        if record.fanbase_count is not None:
            st.caption(f"Fanbase: {record.fanbase_count:,}")

    with col3:
        if not card.can_follow:
            return
        if card.pending:
            st.button("Updating...", key=f"{key_prefix}_{record.id}", disabled=True)
            return
        label = "Unfollow" if card.following else "Follow"
        if st.button(label, key=f"{key_prefix}_{record.id}", type="secondary" if card.following else "primary"):
            run_async(view.toggle_follow(record.id))
            keep_messages(view)
            st.rerun()
