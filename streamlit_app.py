from __future__ import annotations

import json
import random
import time
from typing import Mapping, MutableMapping

import requests
import streamlit as st
import streamlit.components.v1 as components

from fitai.app.config import get_settings

st.set_page_config(page_title="FitAI", page_icon="💪", layout="wide")

EXPERIENCE_LEVELS = ["beginner", "intermediate", "advanced"]
TYPED_CONFIRMATION_OPEN_DELAY_MS = 2000
BUTTON_OPEN_DELAY_MS = 1500


def _call_api(method: str, path: str, payload: dict | None = None) -> tuple[int, dict]:
    base_url = st.session_state.get("api_base_url", "http://localhost:8000")
    url = base_url.rstrip("/") + path
    try:
        response = requests.request(method, url, json=payload, timeout=60)
    except requests.RequestException:
        return 0, {}
    data = {}
    try:
        data = response.json()
    except json.JSONDecodeError:
        pass
    return response.status_code, data


def _typing_pause() -> None:
    low = st.session_state.get("delay_min", 1.0)
    high = st.session_state.get("delay_max", 3.0)
    time.sleep(random.uniform(low, max(low, high)))


def _ensure_session() -> dict:
    view = st.session_state.get("chat_view")
    if view:
        return view
    status, data = _call_api("POST", "/sessions")
    if status != 201:
        st.error("Could not start a chat right now. Please try again shortly.")
        st.stop()
    st.session_state["chat_view"] = data
    return data


def queue_message(state: MutableMapping, text: str) -> None:
    """Park a message so the next run renders the input disabled before sending it."""
    state["pending_message"] = text


def is_pending(state: Mapping) -> bool:
    return bool(state.get("pending_message"))


def auto_open_script(url: str, delay_ms: int) -> str:
    return (
        "<script>setTimeout(function () {"
        f" window.open({json.dumps(url)}, '_blank', 'noopener,noreferrer');"
        f" }}, {int(delay_ms)});</script>"
    )


def claim_auto_open(state: MutableMapping, url: str | None) -> bool:
    """True exactly once per scheduling link shown in this browser session."""
    if not url or state.get("auto_opened_url") == url:
        return False
    state["auto_opened_url"] = url
    return True


def _deliver_pending() -> None:
    view = st.session_state["chat_view"]
    text = st.session_state["pending_message"]
    with st.spinner("FitAI is thinking..."):
        _typing_pause()
        status, data = _call_api("POST", f"/sessions/{view['session_id']}/messages", {"message": text})
    st.session_state.pop("pending_message", None)
    if status == 404:
        st.session_state.pop("chat_view", None)
        st.session_state["notice"] = "Your chat expired, so we started a new one."
        return
    if status == 200:
        st.session_state["open_delay_ms"] = TYPED_CONFIRMATION_OPEN_DELAY_MS
        st.session_state["chat_view"] = data
        return
    st.session_state["notice"] = data.get("fallback") or data.get("error") or "❌ **Connection Issue** \n\nPlease try again."


def _book() -> None:
    view = st.session_state["chat_view"]
    with st.spinner("FitAI is thinking..."):
        time.sleep(0.8)
        status, data = _call_api("POST", f"/sessions/{view['session_id']}/book")
    if status == 200:
        st.session_state["open_delay_ms"] = BUTTON_OPEN_DELAY_MS
        st.session_state["chat_view"] = data


def _reset() -> None:
    view = st.session_state.get("chat_view")
    if not view:
        return
    status, data = _call_api("POST", f"/sessions/{view['session_id']}/reset")
    if status == 200:
        st.session_state["chat_view"] = data
    else:
        st.session_state.pop("chat_view", None)


def _chat_widget() -> None:
    st.header("Chat with FitAI")
    view = _ensure_session()
    pending = is_pending(st.session_state)

    for entry in view["messages"]:
        with st.chat_message(entry["role"]):
            st.markdown(entry["content"])
    if pending:
        with st.chat_message("user"):
            st.markdown(st.session_state["pending_message"])

    notice = st.session_state.pop("notice", None)
    if notice:
        st.warning(notice)

    open_url = view.get("open_url")
    if open_url:
        st.link_button("📅 Open the booking page", open_url)
        if claim_auto_open(st.session_state, open_url):
            delay_ms = st.session_state.get("open_delay_ms", TYPED_CONFIRMATION_OPEN_DELAY_MS)
            components.html(auto_open_script(open_url, delay_ms), height=0)

    if view["quick_replies"]:
        columns = st.columns(min(3, len(view["quick_replies"])))
        for index, option in enumerate(view["quick_replies"]):
            column = columns[index % len(columns)]
            if column.button(option, key=f"quick-{view['current_step_index']}-{index}", disabled=pending):
                queue_message(st.session_state, option)
                st.rerun()

    controls = st.columns(2)
    if view["ready_for_booking"] and not view["has_sent_scheduling_link"]:
        if controls[0].button("📅 Book Consult", disabled=pending):
            _book()
            st.rerun()
    if controls[1].button("🔄 New Chat", disabled=pending):
        _reset()
        st.rerun()

    user_prompt = st.chat_input("Type your message...", disabled=pending)
    if user_prompt and user_prompt.strip():
        queue_message(st.session_state, user_prompt.strip())
        st.rerun()

    if pending:
        _deliver_pending()
        st.rerun()


def _lead_form() -> None:
    st.header("Book Your Free Session")
    with st.form("lead"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        goal = st.text_input("Fitness goal")
        experience = st.selectbox("Experience", EXPERIENCE_LEVELS)
        submitted = st.form_submit_button("Get Free Consultation")

    if not submitted:
        return

    status, data = _call_api(
        "POST",
        "/leads",
        {"name": name, "email": email, "goal": goal, "experience": experience},
    )
    if status != 201:
        st.error("There was an error submitting your information. Please try again.")
        return
    st.success(data.get("message", "Thanks! The trainer will contact you within 24 hours!"))


def _sidebar_controls() -> None:
    settings = get_settings()
    st.sidebar.title("Settings")
    st.session_state["api_base_url"] = st.sidebar.text_input(
        "API base URL",
        st.session_state.get("api_base_url", "http://localhost:8000"),
    )
    st.session_state["delay_min"], st.session_state["delay_max"] = st.sidebar.slider(
        "Typing delay (seconds)",
        min_value=0.0,
        max_value=5.0,
        value=(settings.typing_delay_min_seconds, settings.typing_delay_max_seconds),
    )


def main() -> None:
    _sidebar_controls()
    tab_chat, tab_lead = st.tabs(["Chat", "Free Consultation"])
    with tab_chat:
        _chat_widget()
    with tab_lead:
        _lead_form()


if __name__ == "__main__":
    main()
