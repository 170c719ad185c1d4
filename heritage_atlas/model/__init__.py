"""Data model classes for cultural properties and their 3D captures.

- GeoEntity: Cultural property with a point location (plus EntityImage)
- MediaCapture: 3D Gaussian-splat capture, optionally linked to a GeoEntity
- Tag, User records and Page for paginated listings
- EntityDraft / CaptureDraft: Create/update payloads
- ClickInfo: Parsed map click
- ActionState: Status of a long-running user action
"""

from heritage_atlas.model.action_state import ActionState, ActionStatus
from heritage_atlas.model.click_info import ClickInfo, MapClickType
from heritage_atlas.model.drafts import CaptureDraft, EntityDraft
from heritage_atlas.model.geo_entity import EntityImage, GeoEntity
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.model.page import Page
from heritage_atlas.model.tag import Tag
from heritage_atlas.model.user import ActiveUser, LoginResponse, PublicUserProfile, User, UserBrief

__all__ = [
    "GeoEntity",
    "EntityImage",
    "MediaCapture",
    "Tag",
    "User",
    "UserBrief",
    "PublicUserProfile",
    "ActiveUser",
    "LoginResponse",
    "Page",
    "EntityDraft",
    "CaptureDraft",
    "ClickInfo",
    "MapClickType",
    "ActionState",
    "ActionStatus",
]
