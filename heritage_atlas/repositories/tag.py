"""TagRepository - Tag listing, lookup and creation (/api/v1/tags/)."""

from typing import Optional

from heritage_atlas.constants import ApiConfig
from heritage_atlas.core.http import HttpClient
from heritage_atlas.model.page import Page
from heritage_atlas.model.tag import Tag


class TagRepository:
    def __init__(self, client: HttpClient) -> None:
        self.client = client
        self.base_path = ApiConfig.TAG_PATH

    def find(self, tag_id: int) -> Tag:
        return Tag.from_dict(self.client.get(f"{self.base_path}{tag_id}/"))

    def create(self, name: str, description: str = "") -> Tag:
        payload = {"name": name.strip()}
        if description.strip():
            payload["description"] = description.strip()
        return Tag.from_dict(self.client.post(self.base_path, data=payload))

    def search(self, query: str) -> list[Tag]:
        """Tags whose name matches query."""
        return self.list(name=query)

    # Defined last: the method name shadows the builtin in the class body
    def list(self, name: Optional[str] = None, search: Optional[str] = None) -> list[Tag]:
        data = self.client.get(self.base_path, params={"name": name, "search": search})
        return Page.from_dict(data, Tag.from_dict).results
