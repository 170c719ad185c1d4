"""Authentication: backend auth endpoints and the signed-in session.

- AuthRepository: signup/signin/signout/profile endpoints (raises ApiError)
- AuthSession: token + user held for the browser session
- AuthService: sign-in/sign-up returning AuthResult instead of raising
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from heritage_atlas.constants import ApiConfig
from heritage_atlas.core.http import ApiError, HttpClient
from heritage_atlas.model.user import LoginResponse, User

logger = logging.getLogger(__name__)


class AuthRepository:
    """Auth endpoints (/api/v1/auth/)."""

    def __init__(self, client: HttpClient) -> None:
        self.client = client
        self.base_path = ApiConfig.AUTH_PATH

    def sign_up(
        self,
        username: str,
        email: str,
        password: str,
        password_confirm: str,
        name: Optional[str] = None,
    ) -> User:
        payload = {
            "username": username,
            "email": email,
            "password": password,
            "password_confirm": password_confirm,
            "name": name,
        }
        data = self.client.post(f"{self.base_path}signup/", data={k: v for k, v in payload.items() if v is not None})
        return User.from_dict(data["user"])

    def sign_in(self, username: str, password: str) -> LoginResponse:
        data = self.client.post(f"{self.base_path}signin/", data={"username": username, "password": password})
        return LoginResponse.from_dict(data)

    def logout(self, token: str) -> None:
        """Invalidate the token server-side. Failures count as logged out."""
        try:
            self.client.post(f"{self.base_path}signout/", data={}, token=token)
        except ApiError as e:
            logger.warning(f"[AUTH] Sign-out request failed, clearing session locally: {e!r}")

    def current_user(self, token: str) -> User:
        return User.from_dict(self.client.get(f"{self.base_path}profile/", token=token))

    def verify_email(self, verification_token: str) -> str:
        data = self.client.post(f"{self.base_path}verify-email/", data={"token": verification_token})
        return str(data.get("message", ""))

    def update_profile(
        self,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[Any] = None,
    ) -> User:
        """Partial profile update; avatar (bytes or file object) is sent as multipart."""
        fields = {k: v for k, v in {"name": name, "bio": bio}.items() if v is not None}
        files = {"avatar": avatar} if avatar else None
        return User.from_dict(self.client.patch(f"{self.base_path}profile/", data=fields, files=files))


@dataclass
class AuthSession:
    token: Optional[str] = None
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def clear(self) -> None:
        self.token = None
        self.user = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a sign-in/sign-up attempt.

    error is the raised exception (usually ApiError) so the UI can map
    status codes to messages.
    """

    success: bool
    error: Optional[Exception] = None
    user: Optional[User] = None


@dataclass
class AuthService:
    """Session holder used by pages and as the HttpClient token provider.

    Example:
        service = AuthService(repository=AuthRepository(client))
        result = service.sign_in("taro", "secret")
        if not result.success:
            show(sign_in_error_messages(result.error))
    """

    repository: AuthRepository
    session: AuthSession = field(default_factory=AuthSession)

    def token(self) -> Optional[str]:
        return self.session.token

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def sign_in(self, username: str, password: str) -> AuthResult:
        try:
            response = self.repository.sign_in(username=username, password=password)
        except ApiError as e:
            logger.warning(f"[AUTH] Sign-in failed with status {e.status}")
            return AuthResult(success=False, error=e)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"[AUTH] Malformed sign-in response: {e!r}")
            return AuthResult(success=False, error=e)
        self.session.token = response.token
        self.session.user = response.user
        logger.info(f"[AUTH] Signed in as {response.user.username}")
        return AuthResult(success=True, user=response.user)

    def sign_up(
        self,
        username: str,
        email: str,
        password: str,
        password_confirm: str,
        name: Optional[str] = None,
    ) -> AuthResult:
        try:
            user = self.repository.sign_up(
                username=username,
                email=email,
                password=password,
                password_confirm=password_confirm,
                name=name,
            )
        except ApiError as e:
            logger.warning(f"[AUTH] Sign-up failed with status {e.status}")
            return AuthResult(success=False, error=e)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"[AUTH] Malformed sign-up response: {e!r}")
            return AuthResult(success=False, error=e)
        logger.info(f"[AUTH] Signed up {user.username}")
        return AuthResult(success=True, user=user)

    def sign_out(self) -> None:
        if self.session.token:
            self.repository.logout(self.session.token)
        self.session.clear()
        logger.info("[AUTH] Signed out")

    def refresh_user(self) -> Optional[User]:
        """Reload the profile; an invalid token ends the session."""
        if not self.session.token:
            return None
        try:
            user = self.repository.current_user(self.session.token)
        except ApiError as e:
            logger.warning(f"[AUTH] Could not refresh user, clearing session: {e!r}")
            self.session.clear()
            return None
        self.session.user = user
        return user
