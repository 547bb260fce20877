import streamlit as st
from clients.supabase_client import SupabaseClient
from models.errors import AuthenticationFailed
from models.models import Profile
from ui.net_action import net_action, show_error
from ui.state import reset_view_state


def _render_sign_out(supabase_client: SupabaseClient, profile: Profile):
    role = " (admin)" if profile.is_admin else ""
    st.sidebar.caption(f"Signed in as {profile.display_name or 'family member'}{role}")
    if st.sidebar.button("Sign out"):
        supabase_client.sign_out()
        reset_view_state()
        # next run builds a fresh container, so no cached POIs outlive the session
        st.session_state.pop("container", None)
        st.rerun()


def authenticate(supabase_client: SupabaseClient) -> Profile | None:
    """Sign in via Supabase Auth; returns the profile once signed in."""
    profile = supabase_client.current_profile()
    if profile is not None:
        st.session_state.profile = profile
        _render_sign_out(supabase_client, profile)
        return profile

    st.title("Sign in")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if not submitted:
        st.info("Please enter your email and password.")
        return None
    if not email or not password:
        st.error("Email and password are required.")
        return None

    try:
        with net_action("Signing in..."):
            profile = supabase_client.sign_in(email, password)
    except AuthenticationFailed as e:
        show_error(e)
        return None
    st.session_state.profile = profile
    st.rerun()
