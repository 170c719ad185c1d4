"""Click detector - detects map clicks from Pydeck events.

Pydeck click events return picked object data directly. Our layers put a
type marker and the entity id on every row, so a picked row identifies the
clicked cultural property; no picked row means an empty-map click.

Coordinate tracking prevents re-processing the same click on reruns.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from heritage_atlas.constants import LayerConfig
from heritage_atlas.model.click_info import ClickInfo, MapClickType

logger = logging.getLogger(__name__)


@dataclass
class ClickDeduplicationContext:
    """Remembers the last processed click.

    st_deckgl keeps returning its last event on every rerun; a click is new
    only when its object/coordinate key differs from the last one seen.
    """

    last_key: str | None = None

    @staticmethod
    def make_key(coord: tuple[float, ...] | None, obj_id: str | None) -> str:
        coord_key = f"{coord[0]:.7f}_{coord[1]:.7f}" if coord else "none"
        return f"{obj_id or 'map'}@{coord_key}"

    def is_new_click(self, coord: tuple[float, ...] | None, obj_id: str | None) -> bool:
        if coord is None and obj_id is None:
            return False
        key = self.make_key(coord=coord, obj_id=obj_id)
        if key == self.last_key:
            return False
        self.last_key = key
        return True

    def clear(self) -> None:
        self.last_key = None


@dataclass
class ClickDetector:
    """Detects clicks from Pydeck picked objects.

    Attributes:
        dedup: ClickDeduplicationContext for tracking last-seen clicks
    """

    dedup: ClickDeduplicationContext = field(default_factory=ClickDeduplicationContext)

    def detect(
        self,
        clicked_object: dict[str, Any] | None,
        clicked_coordinate: list[float] | None,
        layer_id: str | None = None,
    ) -> ClickInfo | None:
        """Detect click from Pydeck event data.

        Args:
            clicked_object: The picked deck.gl object data (dict) or None
            clicked_coordinate: [lon, lat] of click location or None
            layer_id: Layer the object was picked from, when known

        Returns:
            ClickInfo for new clicks, None otherwise
        """
        obj_id = self._get_object_id(obj=clicked_object)
        coord_tuple = tuple(clicked_coordinate) if clicked_coordinate else None

        if not self.dedup.is_new_click(coord=coord_tuple, obj_id=obj_id):
            return None

        if clicked_object is not None:
            return self._parse_object_click(obj=clicked_object, coord=clicked_coordinate, layer_id=layer_id)

        if clicked_coordinate is not None:
            lon, lat = clicked_coordinate[0], clicked_coordinate[1]
            logger.debug(f"Map click at ({lat:.6f}, {lon:.6f})")
            return ClickInfo(click_type=MapClickType.MAP, lat=lat, lon=lon)

        return None

    @staticmethod
    def _get_object_id(obj: dict[str, Any] | None) -> str | None:
        """Generate unique ID for object for deduplication."""
        if obj is None:
            return None
        obj_type = obj.get("type", "")
        obj_id = obj.get("id", "")
        return f"{obj_type}_{obj_id}" if obj_id != "" else str(obj_type)

    def _parse_object_click(
        self,
        obj: dict[str, Any],
        coord: list[float] | None,
        layer_id: str | None,
    ) -> ClickInfo | None:
        """Parse clicked object to ClickInfo."""
        obj_type = obj.get("type")

        # GeoJSON Feature: extract type from properties
        if obj_type == "Feature":
            props = obj.get("properties", {})
            obj_type = props.get("type")
            obj = {**obj, **props}

        if obj_type != LayerConfig.TYPE_PROPERTY:
            logger.warning(f"Unknown object type: {obj_type}")
            return None

        raw_id = obj.get("id")
        try:
            entity_id = int(raw_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning(f"Cultural property click with invalid id: {raw_id!r}")
            return None

        lat = lon = None
        if coord is not None:
            lon, lat = float(coord[0]), float(coord[1])
        elif isinstance(obj.get("position"), (list, tuple)) and len(obj["position"]) >= 2:
            lon, lat = float(obj["position"][0]), float(obj["position"][1])

        logger.debug(f"Cultural property click: id={entity_id}, layer={layer_id}")
        return ClickInfo(
            click_type=MapClickType.FEATURE,
            entity_id=entity_id,
            lat=lat,
            lon=lon,
            layer_id=layer_id or LayerConfig.MARKER_LAYER_ID,
        )
