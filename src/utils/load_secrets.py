import os
import streamlit as st


def load_env_vars():
    """Copy top-level Streamlit secrets into the environment without overriding it."""
    try:
        if not st.secrets.load_if_toml_exists():
            # no secrets.toml; plain environment variables only
            return
        items = list(st.secrets.items())
    except FileNotFoundError:
        return
    for k, v in items:
        if isinstance(v, (str, int, float, bool)):
            os.environ.setdefault(k, str(v))
