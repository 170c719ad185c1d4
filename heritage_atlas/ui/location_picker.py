"""Location picker for the registration form.

Two ways to set the draft's location:
- Address search: Geocoder.search() candidates; choosing one sets lat/lon
  and the address from the candidate's display name
- Map click: sets lat/lon, then reverse-geocodes the address

The reverse-geocoded address is written into the draft only while the
picker's LivenessToken is alive. Leaving the input step cancels the token,
so a slow lookup cannot overwrite a draft the user has moved on from.
"""

import logging
from typing import Optional

import streamlit as st

from heritage_atlas.constants import IconConfig, MapConfig
from heritage_atlas.core.cancellation import LivenessToken
from heritage_atlas.core.geo_calculator import GeoCalculator
from heritage_atlas.core.geocoding import Geocoder, GeocodingResult
from heritage_atlas.core.http import ApiError
from heritage_atlas.model.action_state import ActionState
from heritage_atlas.model.click_info import MapClickType
from heritage_atlas.model.message import ActionFailedMessage, LocationSetMessage, NoSearchResultsMessage
from heritage_atlas.ui.base_style import ViewMode
from heritage_atlas.ui.click_detector import ClickDetector
from heritage_atlas.ui.error_messages import describe_api_error
from heritage_atlas.ui.icons import draw_marker_icon
from heritage_atlas.ui.map_renderer import LayerSpec, MapRenderer
from heritage_atlas.ui.pydeck_click_handler import render_pydeck_map
from heritage_atlas.ui.wizard import RegistrationDraft

logger = logging.getLogger(__name__)

PICKED_SOURCE_ID = "picked_location"
PICKED_LAYER_ID = "picked_location"


class LocationPicker:
    """Search/click location input bound to a RegistrationDraft.

    Example:
        picker = LocationPicker(draft, Geocoder())
        picker.search("浅草寺")
        picker.select_result(picker.results[0])
        picker.pick(lat=35.7148, lon=139.7967)
    """

    def __init__(self, draft: RegistrationDraft, geocoder: Optional[Geocoder] = None) -> None:
        self.draft = draft
        self.geocoder = geocoder if geocoder is not None else Geocoder()
        self.token = LivenessToken(label="location_picker")
        self.search_state = ActionState()
        self.results: list[GeocodingResult] = []
        self.last_query = ""
        self.click_detector = ClickDetector()

    @property
    def has_location(self) -> bool:
        return GeoCalculator.is_valid_coordinate(self.draft.entity.latitude, self.draft.entity.longitude)

    @property
    def center(self) -> tuple[float, float]:
        """(lat, lon) to center the picker map on."""
        if self.has_location:
            return self.draft.entity.latitude, self.draft.entity.longitude
        return MapConfig.START_CENTER_LAT, MapConfig.START_CENTER_LON

    def remount(self) -> None:
        """Cancel pending lookups and issue a fresh token (picker shown again)."""
        self.token.cancel()
        self.token = LivenessToken(label="location_picker")
        self.click_detector.dedup.clear()

    def unmount(self) -> None:
        self.token.cancel()

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search(self, query: str) -> list[GeocodingResult]:
        """Run an address search; failures land in search_state."""
        self.last_query = query.strip()
        self.search_state.start()
        try:
            self.results = self.geocoder.search(query)
        except ApiError as e:
            logger.warning(f"[GEOCODE] Search failed for '{query}': {e!r}")
            self.results = []
            self.search_state.fail(describe_api_error(e))
            return []
        self.search_state.succeed()
        return self.results

    def select_result(self, result: GeocodingResult) -> LocationSetMessage:
        self.draft.update_entity(latitude=result.lat, longitude=result.lon, address=result.display_name)
        self.results = []
        logger.info(f"[WIZARD] Location from search: ({result.lat:.5f}, {result.lon:.5f})")
        return LocationSetMessage(lat=result.lat, lon=result.lon)

    # =========================================================================
    # MAP CLICK
    # =========================================================================

    def pick(self, lat: float, lon: float) -> LocationSetMessage:
        """Set the location, then fill the address from a reverse lookup."""
        self.draft.update_entity(latitude=lat, longitude=lon)
        token = self.token
        address = self.geocoder.reverse(lat=lat, lon=lon)
        if address:
            token.run_if_alive(lambda: self.draft.update_entity(address=address), what="address")
        logger.info(f"[WIZARD] Location from map: ({lat:.5f}, {lon:.5f}), address={address!r}")
        return LocationSetMessage(lat=lat, lon=lon)

    def build_renderer(self, container_key: str) -> MapRenderer:
        """2D picker map with the chosen location (if any) as a pin."""
        renderer = MapRenderer(view_mode=ViewMode.MAP_2D)
        zoom = MapConfig.PICKER_ZOOM if self.has_location else MapConfig.DEFAULT_ZOOM
        renderer.initialize(container_key, center=self.center, zoom=zoom)
        if self.has_location:
            renderer.add_image(IconConfig.SELECTED_ICON, draw_marker_icon(IconConfig.SELECTED_PIN_COLOR))
            feature = {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [self.draft.entity.longitude, self.draft.entity.latitude]},
                "properties": {"type": "picked_location", "name": self.draft.entity.address or "Selected location"},
            }
            renderer.add_source(PICKED_SOURCE_ID, [feature])
            renderer.add_layer(
                LayerSpec(id=PICKED_LAYER_ID, source=PICKED_SOURCE_ID, icon=IconConfig.SELECTED_ICON, pickable=False)
            )
        return renderer


def render_location_picker(picker: LocationPicker, key: str = "location_picker") -> None:
    """Search box, candidate buttons and the click-to-pick map."""
    with st.form(f"{key}_search", clear_on_submit=False):
        query = st.text_input("Search address", value=picker.last_query, placeholder="e.g. 浅草寺")
        submitted = st.form_submit_button("🔍 Search")
    if submitted:
        picker.search(query)

    if picker.search_state.failed:
        ActionFailedMessage(action="Address search", error=picker.search_state.error or "").display()
    elif picker.search_state.succeeded and not picker.results and picker.last_query:
        NoSearchResultsMessage(query=picker.last_query).display()

    for result in picker.results:
        if st.button(result.display_name, key=f"{key}_result_{result.place_id}", use_container_width=True):
            picker.select_result(result).display()
            st.session_state[f"{key}_version"] = st.session_state.get(f"{key}_version", 0) + 1
            st.rerun()

    version = st.session_state.get(f"{key}_version", 0)
    renderer = picker.build_renderer(container_key=f"{key}_{version}")
    click = render_pydeck_map(renderer.to_deck(), key=f"{key}_{version}", height=MapConfig.PICKER_HEIGHT_PX)
    info = picker.click_detector.detect(click.clicked_object, click.clicked_coordinate)
    if info is not None and info.click_type == MapClickType.MAP and info.lat is not None and info.lon is not None:
        picker.pick(lat=info.lat, lon=info.lon).display()
        st.rerun()

    if picker.has_location:
        st.caption(f"📍 {picker.draft.entity.latitude:.6f}, {picker.draft.entity.longitude:.6f}")
