"""Tests for AuthRepository / AuthService and the sign-in form submission."""

import json
from unittest.mock import MagicMock

import requests

from heritage_atlas.core.http import ApiError, HttpClient
from heritage_atlas.model.action_state import ActionState
from heritage_atlas.repositories import AuthRepository, AuthService
from heritage_atlas.ui.auth_views import submit_sign_in
from heritage_atlas.ui.error_messages import CONNECTION_ERROR, CREDENTIALS_INCORRECT
from tests.conftest import BASE_URL, last_request, make_response

USER_JSON = {"id": 1, "username": "taro", "email": "taro@example.jp", "name": "Taro"}


def make_service(client: HttpClient) -> AuthService:
    service = AuthService(repository=AuthRepository(client))
    client.token_provider = service.token
    return service


class TestAuthService:
    """Tests for session handling."""

    def test_sign_in_stores_session(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Successful sign-in keeps token and user."""
        fake_session.request.return_value = make_response(200, {"token": "tok", "user": USER_JSON})
        service = make_service(client)

        result = service.sign_in("taro", "secret")

        assert result.success
        assert service.is_authenticated
        assert service.token() == "tok"
        _, url, kwargs = last_request(fake_session)
        assert url == f"{BASE_URL}/api/v1/auth/signin/"
        assert json.loads(kwargs["data"]) == {"username": "taro", "password": "secret"}

    def test_token_sent_after_sign_in(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Later requests carry the session token."""
        fake_session.request.return_value = make_response(200, {"token": "tok", "user": USER_JSON})
        service = make_service(client)
        service.sign_in("taro", "secret")

        fake_session.request.return_value = make_response(200, [])
        client.get("/api/v1/tags/")

        _, _, kwargs = last_request(fake_session)
        assert kwargs["headers"]["Authorization"] == "Token tok"

    def test_sign_in_failure_returns_result(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Rejected credentials give an unsuccessful result, not an exception."""
        fake_session.request.return_value = make_response(401, {"detail": "Invalid credentials"})
        service = make_service(client)

        result = service.sign_in("taro", "wrong")

        assert not result.success
        assert isinstance(result.error, ApiError)
        assert result.error.status == 401
        assert not service.is_authenticated

    def test_malformed_response(self, client: HttpClient, fake_session: MagicMock) -> None:
        """A success body without a token is a failure."""
        fake_session.request.return_value = make_response(200, {"user": USER_JSON})

        result = make_service(client).sign_in("taro", "secret")

        assert not result.success
        assert isinstance(result.error, KeyError)

    def test_sign_out_clears_even_when_request_fails(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Sign-out clears the local session when the backend is unreachable."""
        fake_session.request.return_value = make_response(200, {"token": "tok", "user": USER_JSON})
        service = make_service(client)
        service.sign_in("taro", "secret")

        fake_session.request.side_effect = requests.ConnectionError("down")
        service.sign_out()

        assert not service.is_authenticated
        assert service.token() is None

    def test_refresh_user_invalid_token(self, client: HttpClient, fake_session: MagicMock) -> None:
        """An expired token ends the session."""
        fake_session.request.return_value = make_response(200, {"token": "tok", "user": USER_JSON})
        service = make_service(client)
        service.sign_in("taro", "secret")

        fake_session.request.return_value = make_response(401, {"detail": "Invalid token."})

        assert service.refresh_user() is None
        assert not service.is_authenticated

    def test_sign_up_drops_missing_name(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Optional name is omitted from the sign-up payload."""
        fake_session.request.return_value = make_response(201, {"user": USER_JSON})

        result = make_service(client).sign_up("taro", "taro@example.jp", "pw", "pw")

        assert result.success
        _, url, kwargs = last_request(fake_session)
        assert url.endswith("/api/v1/auth/signup/")
        assert "name" not in json.loads(kwargs["data"])


class TestSubmitSignIn:
    """Tests for the sign-in form handler."""

    def test_blank_fields_skip_request(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Blank fields give field messages without calling the backend."""
        errors = submit_sign_in(make_service(client), "  ", "", ActionState())

        assert set(errors) == {"username", "password"}
        fake_session.request.assert_not_called()

    def test_wrong_credentials_message(self, client: HttpClient, fake_session: MagicMock) -> None:
        """401 maps to the credentials message and a failed state."""
        fake_session.request.return_value = make_response(401, {"detail": "x"})
        state = ActionState()

        errors = submit_sign_in(make_service(client), "taro", "bad", state)

        assert errors == {"submit": CREDENTIALS_INCORRECT}
        assert state.failed

    def test_network_error_message(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Transport failures map to the connection message."""
        fake_session.request.side_effect = requests.Timeout("slow")

        errors = submit_sign_in(make_service(client), "taro", "pw", ActionState())

        assert errors == {"submit": CONNECTION_ERROR}

    def test_success(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Successful sign-in returns no messages."""
        fake_session.request.return_value = make_response(200, {"token": "tok", "user": USER_JSON})
        state = ActionState()

        assert submit_sign_in(make_service(client), "taro", "pw", state) == {}
        assert not state.failed


class TestAuthRepositoryProfile:
    """Tests for profile and verification endpoints."""

    def test_current_user_uses_explicit_token(self, client: HttpClient, fake_session: MagicMock) -> None:
        """The profile request carries the given token."""
        fake_session.request.return_value = make_response(200, USER_JSON)

        user = AuthRepository(client).current_user("tok")

        assert user.email == "taro@example.jp"
        _, url, kwargs = last_request(fake_session)
        assert url == f"{BASE_URL}/api/v1/auth/profile/"
        assert kwargs["headers"]["Authorization"] == "Token tok"

    def test_verify_email_returns_message(self, client: HttpClient, fake_session: MagicMock) -> None:
        """The backend message is returned."""
        fake_session.request.return_value = make_response(200, {"message": "Email verified"})

        assert AuthRepository(client).verify_email("abc") == "Email verified"
        _, _, kwargs = last_request(fake_session)
        assert json.loads(kwargs["data"]) == {"token": "abc"}

    def test_update_profile_with_avatar_is_multipart(self, client: HttpClient, fake_session: MagicMock) -> None:
        """An avatar switches the PATCH to multipart without a JSON content type."""
        fake_session.request.return_value = make_response(200, {**USER_JSON, "bio": "guide"})

        user = AuthRepository(client).update_profile(bio="guide", avatar=b"png-bytes")

        assert user.bio == "guide"
        method, _, kwargs = last_request(fake_session)
        assert method == "PATCH"
        assert kwargs["files"] == {"avatar": b"png-bytes"}
        assert kwargs["data"] == {"bio": "guide"}
        assert "Content-Type" not in kwargs["headers"]
