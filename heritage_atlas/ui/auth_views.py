"""Sign-in / sign-up page.

Both forms call AuthService, which returns an AuthResult instead of
raising; failures are mapped to per-field and form-level messages by
ui/error_messages.py and shown under the matching input.
"""

import logging

import streamlit as st

from heritage_atlas.model.action_state import ActionState
from heritage_atlas.model.message import SignedInMessage
from heritage_atlas.repositories.auth import AuthService
from heritage_atlas.ui.error_messages import sign_in_error_messages, sign_up_error_messages

logger = logging.getLogger(__name__)

SIGN_IN_ERRORS_KEY = "sign_in_errors"
SIGN_UP_ERRORS_KEY = "sign_up_errors"


def _field_error(errors: dict[str, str], name: str) -> None:
    if errors.get(name):
        st.caption(f":red[{errors[name]}]")


def submit_sign_in(auth: AuthService, username: str, password: str, state: ActionState) -> dict[str, str]:
    """Run a sign-in and return the form messages (empty on success)."""
    if not username.strip() or not password:
        errors = {}
        if not username.strip():
            errors["username"] = "Enter your email address or username."
        if not password:
            errors["password"] = "Enter your password."
        return errors

    state.start()
    result = auth.sign_in(username=username.strip(), password=password)
    if result.success:
        state.succeed()
        return {}
    errors = sign_in_error_messages(result.error)
    state.fail(errors.get("submit", "Sign-in failed"))
    return errors


def render_sign_in_form(auth: AuthService, state: ActionState) -> None:
    errors: dict[str, str] = st.session_state.get(SIGN_IN_ERRORS_KEY, {})
    with st.form("sign_in"):
        username = st.text_input("Email or username")
        _field_error(errors, "username")
        password = st.text_input("Password", type="password")
        _field_error(errors, "password")
        submitted = st.form_submit_button("Sign in", type="primary", disabled=state.is_busy)

    if submitted:
        errors = submit_sign_in(auth, username, password, state)
        st.session_state[SIGN_IN_ERRORS_KEY] = errors
        if not errors and auth.session.user is not None:
            SignedInMessage(username=auth.session.user.display_name).display()
        st.rerun()

    if errors.get("submit"):
        st.error(errors["submit"])


def render_sign_up_form(auth: AuthService) -> None:
    errors: dict[str, str] = st.session_state.get(SIGN_UP_ERRORS_KEY, {})
    with st.form("sign_up"):
        username = st.text_input("Username")
        _field_error(errors, "username")
        email = st.text_input("Email")
        _field_error(errors, "email")
        name = st.text_input("Display name")
        password = st.text_input("Password", type="password")
        _field_error(errors, "password")
        password_confirm = st.text_input("Confirm password", type="password")
        _field_error(errors, "password_confirm")
        submitted = st.form_submit_button("Create account")

    if submitted:
        result = auth.sign_up(
            username=username.strip(),
            email=email.strip(),
            password=password,
            password_confirm=password_confirm,
            name=name.strip() or None,
        )
        if result.success:
            st.session_state[SIGN_UP_ERRORS_KEY] = {}
            st.success("Account created. Check your email to verify it, then sign in.")
            return
        st.session_state[SIGN_UP_ERRORS_KEY] = sign_up_error_messages(result.error)
        st.rerun()

    if errors.get("submit"):
        st.error(errors["submit"])


def render_auth_page(auth: AuthService, state: ActionState) -> None:
    if auth.is_authenticated and auth.session.user is not None:
        st.header("Account")
        st.write(f"Signed in as **{auth.session.user.display_name}** ({auth.session.user.email})")
        return

    st.header("Sign in")
    tab_sign_in, tab_sign_up = st.tabs(["Sign in", "Create account"])
    with tab_sign_in:
        render_sign_in_form(auth, state)
    with tab_sign_up:
        render_sign_up_form(auth)
