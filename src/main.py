import streamlit as st
from ui.auth import authenticate
from ui.state import ensure_state
from utils.constants import PARK_NAME, Pages
from utils.logging import setup_logging
from di.container import Container
from config.config import SETTINGS


def get_container() -> Container:
    """One object graph per browser session: its own auth session and cache."""
    if "container" not in st.session_state:
        st.session_state.container = Container()
    return st.session_state.container


def main():
    st.set_page_config(page_title=PARK_NAME, page_icon=":material/forest:", layout="wide")
    setup_logging(SETTINGS.log_level)
    ensure_state()
    container = get_container()

    st.sidebar.title(PARK_NAME)
    profile = authenticate(container.supabase_client())
    if profile is None:
        return

    pages = [Pages.MAP]
    if profile.is_admin:
        pages.append(Pages.ADMIN)
    selection = st.sidebar.radio(
        "Navigation",
        [p.value["key"] for p in pages],
        format_func=lambda x: {p.value["key"]: p.value["title"] for p in pages}[x],
        label_visibility="hidden",
    )

    page_by_key = {
        Pages.MAP.value["key"]: container.map_page(),
        Pages.ADMIN.value["key"]: container.admin_page(),
    }
    previous = st.session_state.current_page
    if previous and previous != selection:
        page_by_key[previous].on_leave()
    st.session_state.current_page = selection
    page_by_key[selection].render()


if __name__ == "__main__":
    main()
