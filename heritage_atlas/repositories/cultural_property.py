"""GeoEntityRepository - CRUD access to cultural properties.

Query parameters are generic (ordering, limit, offset, search, has_movies,
lat/lon/distance, tag_id, tag_name, created_by); concrete filters are built
by the convenience finders.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from heritage_atlas.constants import ApiConfig
from heritage_atlas.core.http import ApiError, HttpClient
from heritage_atlas.model.drafts import EntityDraft
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.page import Page
from heritage_atlas.model.tag import Tag

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Any]


class GeoEntityRepository:
    """Cultural property endpoints (/cp_api/cultural_property/)."""

    def __init__(self, client: HttpClient) -> None:
        self.client = client
        self.base_path = ApiConfig.CULTURAL_PROPERTY_PATH

    def _item_path(self, entity_id: int) -> str:
        return f"{self.base_path}{entity_id}/"

    def find_all(self, params: Optional[QueryParams] = None) -> list[GeoEntity]:
        """Entities of the first result page (the "results" list)."""
        return self.find_page(params).results

    def find_page(self, params: Optional[QueryParams] = None) -> Page[GeoEntity]:
        data = self.client.get(self.base_path, params=params)
        return Page.from_dict(data, GeoEntity.from_dict)

    def find(self, entity_id: int) -> GeoEntity:
        return GeoEntity.from_dict(self.client.get(self._item_path(entity_id)))

    def find_my(self, params: Optional[QueryParams] = None) -> Page[GeoEntity]:
        """Entities created by the signed-in user (requires a token)."""
        try:
            data = self.client.get(f"{self.base_path}my/", params=params)
        except ApiError as e:
            logger.error(f"[REPO] find_my cultural properties failed: {e!r}")
            raise
        return Page.from_dict(data, GeoEntity.from_dict)

    def find_tags(self) -> list[Tag]:
        """Tags used by cultural properties."""
        data = self.client.get(ApiConfig.ENTITY_TAG_PATH)
        return Page.from_dict(data, Tag.from_dict).results

    def find_by_location(self, lat: float, lon: float, distance_km: float) -> list[GeoEntity]:
        return self.find_all({"lat": lat, "lon": lon, "distance": distance_km})

    def find_by_tag(self, tag_id: int) -> list[GeoEntity]:
        return self.find_all({"tag_id": tag_id})

    def find_with_captures(self, params: Optional[QueryParams] = None) -> list[GeoEntity]:
        """Entities that have at least one 3D capture."""
        return self.find_all({**(params or {}), "has_movies": True})

    def find_latest(self, limit: int) -> list[GeoEntity]:
        return self.find_all({"ordering": "-created_at", "limit": limit})

    def create(self, draft: EntityDraft) -> GeoEntity:
        payload = draft.to_payload()
        logger.info(f"[REPO] Creating cultural property '{draft.name}'")
        try:
            data = self.client.post(self.base_path, data=payload)
        except ApiError as e:
            logger.error(f"[REPO] create cultural property failed: {e!r}")
            raise
        entity = GeoEntity.from_dict(data)
        logger.info(f"[REPO] Created cultural property {entity.id}")
        return entity

    def update(self, entity_id: int, changes: EntityDraft | Mapping[str, Any]) -> GeoEntity:
        """Partial update (PATCH)."""
        payload = changes.to_payload() if isinstance(changes, EntityDraft) else dict(changes)
        try:
            data = self.client.patch(self._item_path(entity_id), data=payload)
        except ApiError as e:
            logger.error(f"[REPO] update cultural property {entity_id} failed: {e!r}")
            raise
        return GeoEntity.from_dict(data)

    def remove(self, entity_id: int) -> None:
        try:
            self.client.delete(self._item_path(entity_id))
        except ApiError as e:
            logger.error(f"[REPO] delete cultural property {entity_id} failed: {e!r}")
            raise
        logger.info(f"[REPO] Deleted cultural property {entity_id}")
