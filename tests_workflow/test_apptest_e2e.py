"""End-to-End Integration Test using Streamlit AppTest Framework.

ONE comprehensive test that walks a visitor through the map: click markers,
swap popups, close with the "×" button and with an empty-map click.

Test Flow Mirrors Real User Interaction:
    1. Click marker -> MapView.handle_click(PydeckClickResult)
    2. Click another marker -> popup replaced, previous viewer unmounted
    3. Click "×" -> render_popup_panel close button
    4. Click empty map -> popup closed through the state machine

Architecture:
- Uses AppTest.from_function with COMMAND-BASED execution
- Each at.run() processes ONE user action from the command queue
- Clicks go through parse_deckgl_event + ClickDetector, the same path as st_deckgl events
"""

from __future__ import annotations

import pytest
from streamlit.testing.v1 import AppTest

from heritage_atlas.model.drafts import CaptureDraft
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.ui.wizard import RegistrationDraft


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def apptest_entities() -> list[GeoEntity]:
    """Senso-ji without captures and Kaminarimon with one capture."""
    return [
        GeoEntity(id=1, name="Senso-ji", latitude=35.7148, longitude=139.7967, address="東京都台東区浅草2-3-1"),
        GeoEntity(
            id=2,
            name="Kaminarimon",
            latitude=35.7112,
            longitude=139.7963,
            address="東京都台東区浅草1-2-3",
            captures=[MediaCapture(id=3, url="https://lumalabs.ai/capture/kaminarimon", entity_id=2)],
        ),
    ]


# =============================================================================
# COMMAND EXECUTOR - Simulates User Actions via Action Layer
# =============================================================================


def create_command_executor() -> None:
    """Streamlit app that executes commands from session_state.command_queue.

    This function runs inside AppTest and processes ONE command per at.run().

    COMMAND TYPES:
        ("click_marker", entity_id) -> st_deckgl event on a marker row
        ("click_map", lon, lat) -> st_deckgl event on the empty map
        ("noop",) -> do nothing

    HYBRID: Renders the popup panel so its "×" button can be clicked via at.button().click()
    """
    import streamlit as st

    from heritage_atlas.constants import LayerConfig
    from heritage_atlas.ui import MapView, ViewMode, render_popup_panel
    from heritage_atlas.ui.pydeck_click_handler import parse_deckgl_event

    if "map_view" not in st.session_state:
        view = MapView.create(ViewMode.MAP_2D, add_ui_listener=False)
        view.mount("map_2d_0", center=(35.7148, 139.7967))
        st.session_state.map_view = view

    view: MapView = st.session_state.map_view
    view.apply(st.session_state.entities)

    command_queue: list = st.session_state.get("command_queue", [])
    if command_queue:
        cmd = command_queue.pop(0)
        cmd_type = cmd[0]

        if cmd_type == "click_marker":
            _, entity_id = cmd
            rows = view.renderer.layer_data(LayerConfig.MARKER_LAYER_ID)
            row = next(r for r in rows if r["id"] == entity_id)
            event = {**row, "coordinate": row["position"], "eventType": "click"}
            view.handle_click(parse_deckgl_event(event))

        elif cmd_type == "click_map":
            _, lon, lat = cmd
            view.handle_click(parse_deckgl_event({"coordinate": [lon, lat], "eventType": "click"}))

        elif cmd_type == "noop":
            pass

        else:
            raise ValueError(f"Unknown command type: {cmd_type}")

    st.session_state.command_queue = command_queue

    render_popup_panel(view.controller)
    st.write(f"State: {view.controller.machine.current_state_value}")


# =============================================================================
# THE ASAKUSA WALK - ONE COMPREHENSIVE E2E TEST
# =============================================================================


@pytest.mark.apptest
class TestAsakusaWalk:
    """THE comprehensive E2E test of the map popup workflow."""

    def test_popup_lifecycle(self, apptest_entities: list[GeoEntity]) -> None:
        """Open, replace and close popups through clicks and the close button.

        PHASE 1: Click Kaminarimon -> popup with mounted viewer
        PHASE 2: Click Senso-ji -> popup replaced, viewer unmounted once
        PHASE 3: Click "×" -> closed
        PHASE 4: Reopen, then click the empty map -> closed
        """
        at = AppTest.from_function(create_command_executor, default_timeout=30)
        at.session_state["entities"] = apptest_entities
        at.session_state["map_version"] = 0
        at.session_state["command_queue"] = []
        at.run()
        assert not at.exception

        view = at.session_state["map_view"]
        assert not view.controller.is_open

        # PHASE 1
        at.session_state["command_queue"] = [("click_marker", 2)]
        at.run()
        assert not at.exception
        popup = view.controller.popup
        assert popup.entity.name == "Kaminarimon"
        assert popup.viewer.mounted
        first_viewer = popup.viewer
        assert any("Kaminarimon" in md.value for md in at.markdown)

        # PHASE 2
        at.session_state["command_queue"] = [("click_marker", 1)]
        at.run()
        assert view.controller.popup.entity.name == "Senso-ji"
        assert not view.controller.popup.has_viewer
        assert first_viewer.unmount_count == 1

        # PHASE 3
        at.button(key="popup_close_1").click()
        at.run()
        assert not at.exception
        assert not view.controller.is_open

        # PHASE 4
        at.session_state["command_queue"] = [("click_marker", 2)]
        at.run()
        assert view.controller.is_open
        at.session_state["command_queue"] = [("click_map", 139.80, 35.70)]
        at.run()
        assert not at.exception
        assert not view.controller.is_open


# =============================================================================
# CAPTURE FORM - remove a capture draft from the registration form
# =============================================================================


def capture_form_app() -> None:
    """Streamlit app rendering the capture fields of session_state.draft."""
    import streamlit as st

    from heritage_atlas.ui.registration_views import _render_capture_fields

    _render_capture_fields(st.session_state.draft)


@pytest.mark.apptest
class TestCaptureForm:
    """Capture drafts in the registration form."""

    def test_remove_first_capture_keeps_second(self) -> None:
        """Removing the first capture leaves the second one's URL untouched."""
        first = CaptureDraft(url="https://host/capture/A")
        second = CaptureDraft(url="https://host/capture/B")
        at = AppTest.from_function(capture_form_app, default_timeout=30)
        at.session_state["draft"] = RegistrationDraft(captures=[first, second])
        at.run()
        assert not at.exception

        at.button(key=f"capture_remove_{first.uid}").click()
        at.run()

        assert not at.exception
        assert [c.url for c in at.session_state["draft"].captures] == ["https://host/capture/B"]
        assert [t.value for t in at.text_input if t.label.endswith("URL *")] == ["https://host/capture/B"]
