"""MediaCapture - A 3D Gaussian-splat capture attached to a cultural property.

Captures are hosted by a third-party splat service; the application only
keeps the hosting URL. A capture can exist standalone or point back to its
owning GeoEntity via entity_id, and can be re-linked without deletion.
"""

from dataclasses import dataclass
from typing import Any, Optional

from heritage_atlas.constants import CaptureConfig
from heritage_atlas.model.user import UserBrief


@dataclass(frozen=True)
class MediaCapture:
    """3D capture record ("movie" on the backend).

    Attributes:
        id: Backend identity
        url: External capture URL on the splat-hosting service
        title: Optional display title
        note: Optional free-text note
        thumbnail_url: Optional preview image
        entity_id: Owning GeoEntity id, None when unlinked
    """

    id: int
    url: str
    title: Optional[str] = None
    note: Optional[str] = None
    thumbnail_url: Optional[str] = None
    entity_id: Optional[int] = None
    created_by: Optional[UserBrief] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def embed_url(self) -> str:
        """URL of the embeddable viewer for this capture.

        Hosting pages of the form .../capture/<uuid> are served as an
        embeddable viewer at .../embed/<uuid>. Other URLs are used as-is.
        """
        if CaptureConfig.CAPTURE_PATH_SEGMENT in self.url:
            return self.url.replace(CaptureConfig.CAPTURE_PATH_SEGMENT, CaptureConfig.EMBED_PATH_SEGMENT, 1)
        return self.url

    @property
    def display_title(self) -> str:
        return self.title or f"Capture {self.id}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MediaCapture":
        """Build from backend JSON (cultural_property is the owner id)."""
        owner = data.get("cultural_property")
        if isinstance(owner, dict):
            owner = owner.get("id")
        return cls(
            id=int(data["id"]),
            url=str(data.get("url") or ""),
            title=data.get("title"),
            note=data.get("note"),
            thumbnail_url=data.get("thumbnail_url") or data.get("thumbnail"),
            entity_id=int(owner) if owner is not None else None,
            created_by=UserBrief.from_dict(data["created_by"]) if data.get("created_by") else None,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to backend JSON shape."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "note": self.note,
            "thumbnail_url": self.thumbnail_url,
            "cultural_property": self.entity_id,
            "created_by": self.created_by.to_dict() if self.created_by else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
