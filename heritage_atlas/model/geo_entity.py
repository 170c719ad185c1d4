"""GeoEntity - A registered cultural property with a point location.

The backend calls this record a "cultural property". Besides its own fields
it carries related tags, images and 3D captures (the backend's "movies").
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from heritage_atlas.core.geo_calculator import GeoCalculator
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.model.tag import Tag
from heritage_atlas.model.user import UserBrief


@dataclass(frozen=True)
class EntityImage:
    """Photo attached to a cultural property."""

    id: int
    image: str
    photographer: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityImage":
        return cls(id=int(data["id"]), image=str(data.get("image") or ""), photographer=data.get("photographer"))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "image": self.image, "photographer": self.photographer}


def _parse_coordinate(value: Any) -> float:
    """Backend decimals arrive as strings; unparseable values become NaN."""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(frozen=True)
class GeoEntity:
    """Cultural property record.

    Attributes:
        id: Backend identity, unique across the collection
        name: Display name
        address: Postal address
        latitude, longitude: WGS84 degrees (NaN when the backend value was unusable)
        type, category: Classification labels
        tags, captures, images: Related records
    """

    id: int
    name: str
    address: str
    latitude: float
    longitude: float
    type: Optional[str] = None
    category: Optional[str] = None
    name_kana: Optional[str] = None
    name_gener: Optional[str] = None
    name_en: Optional[str] = None
    place_name: Optional[str] = None
    url: Optional[str] = None
    note: Optional[str] = None
    tags: list[Tag] = field(default_factory=list)
    captures: list[MediaCapture] = field(default_factory=list)
    images: list[EntityImage] = field(default_factory=list)
    created_by: Optional[UserBrief] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def has_valid_coordinates(self) -> bool:
        """True when the location can be placed on the map.

        (0, 0) is how unset locations come back from the backend and is
        treated as invalid.
        """
        return GeoCalculator.is_valid_coordinate(self.latitude, self.longitude)

    @property
    def has_captures(self) -> bool:
        return len(self.captures) > 0

    @property
    def first_capture(self) -> Optional[MediaCapture]:
        return self.captures[0] if self.captures else None

    @property
    def thumbnail_url(self) -> Optional[str]:
        """First image URL, or None when the entity has no photos."""
        if self.images and self.images[0].image:
            return self.images[0].image
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoEntity":
        """Build from backend JSON."""
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            latitude=_parse_coordinate(data.get("latitude")),
            longitude=_parse_coordinate(data.get("longitude")),
            type=data.get("type"),
            category=data.get("category"),
            name_kana=data.get("name_kana"),
            name_gener=data.get("name_gener"),
            name_en=data.get("name_en"),
            place_name=data.get("place_name"),
            url=data.get("url"),
            note=data.get("note"),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            captures=[MediaCapture.from_dict(m) for m in data.get("movies") or []],
            images=[EntityImage.from_dict(i) for i in data.get("images") or []],
            created_by=UserBrief.from_dict(data["created_by"]) if data.get("created_by") else None,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to backend JSON shape (captures under "movies")."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "type": self.type,
            "category": self.category,
            "name_kana": self.name_kana,
            "name_gener": self.name_gener,
            "name_en": self.name_en,
            "place_name": self.place_name,
            "url": self.url,
            "note": self.note,
            "tags": [t.to_dict() for t in self.tags],
            "movies": [m.to_dict() for m in self.captures],
            "images": [i.to_dict() for i in self.images],
            "created_by": self.created_by.to_dict() if self.created_by else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
