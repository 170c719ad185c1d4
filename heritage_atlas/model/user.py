"""User records returned by the auth and user endpoints."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class UserBrief:
    """Creator summary embedded in entities and captures."""

    id: int
    username: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserBrief":
        return cls(id=int(data["id"]), username=str(data.get("username", "")), name=data.get("name") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "name": self.name}


@dataclass(frozen=True)
class User:
    """Signed-in user profile."""

    id: int
    username: str
    email: str = ""
    name: str = ""
    bio: str = ""
    avatar: Optional[str] = None
    is_email_verified: bool = False
    date_joined: Optional[str] = None
    last_login: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=int(data["id"]),
            username=str(data.get("username", "")),
            email=data.get("email") or "",
            name=data.get("name") or "",
            bio=data.get("bio") or "",
            avatar=data.get("avatar"),
            is_email_verified=bool(data.get("is_email_verified", False)),
            date_joined=data.get("date_joined"),
            last_login=data.get("last_login"),
        )


@dataclass(frozen=True)
class PublicUserProfile:
    """Public profile with contribution counts."""

    id: int
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    cultural_property_count: int = 0
    movie_count: int = 0
    date_joined: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicUserProfile":
        return cls(
            id=int(data["id"]),
            username=str(data.get("username", "")),
            name=data.get("name"),
            bio=data.get("bio"),
            avatar_url=data.get("avatar_url") or data.get("avatar"),
            cultural_property_count=int(data.get("cultural_property_count", 0)),
            movie_count=int(data.get("movie_count", 0)),
            date_joined=data.get("date_joined"),
        )


@dataclass(frozen=True)
class ActiveUser:
    """Entry of the active-user ranking."""

    id: int
    username: str
    name: Optional[str] = None
    contribution_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActiveUser":
        return cls(
            id=int(data["id"]),
            username=str(data.get("username", "")),
            name=data.get("name"),
            contribution_count=int(data.get("contribution_count", data.get("total_count", 0))),
        )


@dataclass(frozen=True)
class LoginResponse:
    """Sign-in response: token plus user."""

    token: str
    user: User
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoginResponse":
        return cls(token=str(data["token"]), user=User.from_dict(data["user"]), message=data.get("message") or "")
