import streamlit as st
from contextlib import contextmanager
from models.errors import PoiStoreError, ValidationFailed
from utils.constants import ERROR_MESSAGES


@contextmanager
def net_action(text: str):
    with st.spinner(text, show_time=True):
        yield


def show_error(error: PoiStoreError):
    st.error(ERROR_MESSAGES.get(error.kind, error.message))
    if isinstance(error, ValidationFailed):
        for field, msg in error.errors.items():
            st.caption(f"**{field}**: {msg}")
    else:
        st.caption(error.message)
