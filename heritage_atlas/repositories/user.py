"""UserRepository - Public user profiles and the active-user ranking."""

from typing import Optional

from heritage_atlas.constants import ApiConfig
from heritage_atlas.core.http import HttpClient
from heritage_atlas.model.page import Page
from heritage_atlas.model.user import ActiveUser, PublicUserProfile


class UserRepository:
    def __init__(self, client: HttpClient) -> None:
        self.client = client

    def find_active_users(self, limit: Optional[int] = None) -> list[ActiveUser]:
        data = self.client.get(f"{ApiConfig.AUTH_PATH}active-users/", params={"limit": limit})
        return Page.from_dict(data, ActiveUser.from_dict).results

    def get_by_id(self, user_id: int) -> PublicUserProfile:
        return PublicUserProfile.from_dict(self.client.get(f"{ApiConfig.AUTH_PATH}users/{user_id}/"))
