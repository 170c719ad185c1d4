"""Draft payloads for create/update requests.

EntityDraft and CaptureDraft are the mutable, not-yet-persisted forms of
GeoEntity and MediaCapture. Optional strings left empty in the form are
dropped from the payload so the backend applies its own defaults.
"""

import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Optional


@dataclass
class EntityDraft:
    """Create/update payload for a cultural property."""

    name: str = ""
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    type: str = ""
    category: str = ""
    name_kana: str = ""
    name_gener: str = ""
    name_en: str = ""
    place_name: str = ""
    url: str = ""
    note: str = ""
    tag_ids: list[int] = field(default_factory=list)

    # Always sent, even when blank
    REQUIRED_FIELDS = ("name", "address", "latitude", "longitude", "type")

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def to_payload(self) -> dict[str, Any]:
        """Request body with empty optional strings removed."""
        payload: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "tag_ids":
                if value:
                    payload["tag_ids"] = list(value)
                continue
            if f.name not in self.REQUIRED_FIELDS and isinstance(value, str) and not value.strip():
                continue
            payload[f.name] = value.strip() if isinstance(value, str) else value
        return payload


@dataclass
class CaptureDraft:
    """Create/update payload for a 3D capture.

    id is set only when the draft edits an existing capture. uid identifies
    the draft in the form (widget keys) and survives edits and reordering.
    """

    url: str = ""
    title: str = ""
    note: str = ""
    id: Optional[int] = None
    uid: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False, repr=False)

    @property
    def has_url(self) -> bool:
        return bool(self.url.strip())

    def to_payload(self, entity_id: Optional[int] = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"url": self.url.strip()}
        if self.title.strip():
            payload["title"] = self.title.strip()
        if self.note.strip():
            payload["note"] = self.note.strip()
        if entity_id is not None:
            payload["cultural_property"] = entity_id
        return payload
