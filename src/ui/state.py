import streamlit as st
from utils.constants import STATE_DEFAULTS


def ensure_state():
    """Ensure default view-state values exist for this browser session."""
    for key, value in STATE_DEFAULTS.items():
        st.session_state.setdefault(key, value)


def select_poi(poi_id: str | None):
    st.session_state.selected_poi_id = poi_id


def reset_view_state():
    """Drop view state that belongs to the signed-in user."""
    for key, value in STATE_DEFAULTS.items():
        st.session_state[key] = value
