"""MediaCaptureRepository - 3D captures (the backend's "movies").

A capture's owning cultural property is a plain back-reference; link and
unlink re-point it without deleting the capture.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from heritage_atlas.constants import ApiConfig
from heritage_atlas.core.http import ApiError, HttpClient
from heritage_atlas.model.drafts import CaptureDraft
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.model.page import Page

logger = logging.getLogger(__name__)


class MediaCaptureRepository:
    """Capture endpoints (/cp_api/movie/)."""

    def __init__(self, client: HttpClient) -> None:
        self.client = client
        self.base_path = ApiConfig.MOVIE_PATH

    def _item_path(self, capture_id: int) -> str:
        return f"{self.base_path}{capture_id}/"

    def find_all(self, params: Optional[Mapping[str, Any]] = None) -> list[MediaCapture]:
        data = self.client.get(self.base_path, params=params)
        return Page.from_dict(data, MediaCapture.from_dict).results

    def find(self, capture_id: int) -> MediaCapture:
        return MediaCapture.from_dict(self.client.get(self._item_path(capture_id)))

    def find_my(self, params: Optional[Mapping[str, Any]] = None) -> Page[MediaCapture]:
        data = self.client.get(f"{self.base_path}my/", params=params)
        return Page.from_dict(data, MediaCapture.from_dict)

    def create(self, draft: CaptureDraft, entity_id: Optional[int] = None) -> MediaCapture:
        """Create a capture, linked to entity_id when given."""
        try:
            data = self.client.post(self.base_path, data=draft.to_payload(entity_id=entity_id))
        except ApiError as e:
            logger.error(f"[REPO] create capture for entity {entity_id} failed: {e!r}")
            raise
        capture = MediaCapture.from_dict(data)
        logger.info(f"[REPO] Created capture {capture.id} (entity {capture.entity_id})")
        return capture

    def update(self, capture_id: int, changes: CaptureDraft | Mapping[str, Any]) -> MediaCapture:
        """Partial update (PATCH)."""
        payload = changes.to_payload() if isinstance(changes, CaptureDraft) else dict(changes)
        try:
            data = self.client.patch(self._item_path(capture_id), data=payload)
        except ApiError as e:
            logger.error(f"[REPO] update capture {capture_id} failed: {e!r}")
            raise
        return MediaCapture.from_dict(data)

    def link(self, capture_id: int, entity_id: int) -> MediaCapture:
        """Attach an existing capture to a cultural property."""
        return self.update(capture_id, {"cultural_property": entity_id})

    def unlink(self, capture_id: int) -> MediaCapture:
        """Detach a capture from its cultural property, keeping the capture."""
        return self.update(capture_id, {"cultural_property": None})

    def remove(self, capture_id: int) -> None:
        try:
            self.client.delete(self._item_path(capture_id))
        except ApiError as e:
            logger.error(f"[REPO] delete capture {capture_id} failed: {e!r}")
            raise
        logger.info(f"[REPO] Deleted capture {capture_id}")
