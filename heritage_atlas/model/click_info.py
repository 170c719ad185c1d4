"""Click detection types - unified click information for map interactions.

- MapClickType: Source of click (FEATURE or MAP)
- ClickInfo: Unified click information returned by ClickDetector

STRICT: All click detection flows through ClickInfo.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MapClickType(Enum):
    """Source of click on the map - EXACTLY one per interaction."""

    FEATURE = "feature"  # Clicked a cultural property marker or its 3D badge
    MAP = "map"  # Clicked empty map (raw coordinates)


@dataclass(frozen=True)
class ClickInfo:
    """Unified click information - the ONLY output from click detection.

    STRICT CONTRACT:
    - For MAP: lat/lon are REQUIRED, entity_id is None
    - For FEATURE: entity_id is REQUIRED; lat/lon hold the click position when known
    """

    click_type: MapClickType
    lat: Optional[float] = None
    lon: Optional[float] = None
    entity_id: Optional[int] = None
    layer_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate invariants - STRICT: fail immediately on invalid state."""
        if self.click_type == MapClickType.MAP:
            if self.lat is None or self.lon is None:
                raise ValueError("MAP click must have lat/lon set")
            if self.entity_id is not None:
                raise ValueError("MAP click must NOT have entity_id set")
        elif self.click_type == MapClickType.FEATURE:
            if self.entity_id is None:
                raise ValueError("FEATURE click must have entity_id set")
        else:
            raise RuntimeError(f"Unknown click_type: {self.click_type}")

    @property
    def position(self) -> Optional[tuple[float, float]]:
        """(lon, lat) of the click, when known."""
        if self.lat is None or self.lon is None:
            return None
        return (self.lon, self.lat)

    @property
    def display_name(self) -> str:
        """Human-readable name for logging."""
        if self.click_type == MapClickType.MAP:
            return f"Map at ({self.lat:.5f}, {self.lon:.5f})"
        return f"Cultural property {self.entity_id}"
