"""Pydeck click handler using streamlit-deckgl for map click support.

Uses st_deckgl from streamlit-deckgl to capture ALL click events including
empty-map clicks, not just object selections.

The key difference from st.pydeck_chart:
- st.pydeck_chart: Only returns object selections (pickable=True objects)
- st_deckgl: Returns full deck.gl onClick event with coordinate field for ALL clicks
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from heritage_atlas.constants import MapConfig

logger = logging.getLogger(__name__)


@dataclass
class PydeckClickResult:
    """Result from Pydeck click detection.

    Attributes:
        clicked_object: The picked deck.gl object data (dict) or None if map click
        clicked_coordinate: [lon, lat] of click location (always available for clicks)
    """

    clicked_object: dict[str, Any] | None
    clicked_coordinate: list[float] | None

    @property
    def is_object_click(self) -> bool:
        """True if a pickable object was clicked."""
        return self.clicked_object is not None

    @property
    def is_map_click(self) -> bool:
        """True if empty map was clicked with valid coordinates."""
        return self.clicked_object is None and self.clicked_coordinate is not None

    @staticmethod
    def empty() -> "PydeckClickResult":
        """Return empty result (no click detected)."""
        return PydeckClickResult(clicked_object=None, clicked_coordinate=None)


def parse_deckgl_event(event: Any) -> PydeckClickResult:
    """Split an st_deckgl event into picked object and coordinate.

    st_deckgl SPREADS object properties into the event dict (no "object" key!):
    - Map click: {coordinate: [lon, lat], eventType: "click"}
    - Object click: {type: ..., id: ..., position: [...], coordinate: [lon, lat], eventType: "click"}
    """
    if not event or not isinstance(event, dict):
        return PydeckClickResult.empty()

    clicked_object: dict[str, Any] | None = None
    clicked_coordinate: list[float] | None = None

    coord = event.get("coordinate")
    if isinstance(coord, (list, tuple)) and len(coord) >= 2:
        clicked_coordinate = [float(coord[0]), float(coord[1])]

    # Picked rows carry a "type" field set by our layers
    if event.get("type") and event["type"] != "click":
        clicked_object = {k: v for k, v in event.items() if k not in ("coordinate", "eventType")}
        logger.debug(f"Object click detected: type={event.get('type')}, id={event.get('id')}")

    if clicked_coordinate is None and clicked_object is None:
        return PydeckClickResult.empty()
    return PydeckClickResult(clicked_object=clicked_object, clicked_coordinate=clicked_coordinate)


def render_pydeck_map(
    deck: pdk.Deck,
    key: str,
    height: int = MapConfig.HEIGHT_PX,
) -> PydeckClickResult:
    """Render Pydeck map with full click support including empty-map clicks.

    MUST pass events=['click'] to st_deckgl to enable click detection.
    Repeated events across reruns are filtered by ClickDetector.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        height: Height in pixels

    Returns:
        PydeckClickResult with click info (object and/or coordinate)
    """
    event = st_deckgl(deck, key=key, height=height, events=["click"])
    return parse_deckgl_event(event)
