"""User interface components for Heritage Atlas.

File Structure:
- map_renderer.py: Engine-style map state rendered as a pydeck Deck
- base_style.py: Per-instance base map style (OSM raster, PLATEAU buildings in 3D)
- icons.py: Pillow icon drawing/loading as data URLs
- feature_sync.py: Entity collection -> source + marker/badge layers
- interaction.py: PopupStateMachine + InteractionController
- click_detector.py / pydeck_click_handler.py: st_deckgl click parsing
- popup_panel.py, sidebar.py: Map page panels
- wizard.py, location_picker.py, registration_views.py: Registration flow
- auth_views.py, error_messages.py: Sign-in/sign-up forms and error text
- validators.py: Input validation with Optional[Message] returns
- actions.py: Orchestration used by the pages
"""

from heritage_atlas.ui.actions import MapView, load_entities
from heritage_atlas.ui.auth_views import render_auth_page
from heritage_atlas.ui.base_style import ViewMode, build_base_style
from heritage_atlas.ui.click_detector import ClickDetector
from heritage_atlas.ui.feature_sync import FeatureSynchronizer, RenderedFeatureSet, build_feature_set
from heritage_atlas.ui.interaction import (
    CaptureViewer,
    InteractionController,
    PopupContext,
    PopupSession,
    PopupStateMachine,
)
from heritage_atlas.ui.location_picker import LocationPicker
from heritage_atlas.ui.map_renderer import LayerSpec, MapEngineError, MapRenderer
from heritage_atlas.ui.popup_panel import render_popup_panel
from heritage_atlas.ui.pydeck_click_handler import render_pydeck_map
from heritage_atlas.ui.registration_views import render_registration_page
from heritage_atlas.ui.sidebar import EntityFilters, SidebarRenderer
from heritage_atlas.ui.wizard import RegistrationDraft, RegistrationWizard

__all__ = [
    "MapView",
    "load_entities",
    "render_auth_page",
    "ViewMode",
    "build_base_style",
    "ClickDetector",
    "FeatureSynchronizer",
    "RenderedFeatureSet",
    "build_feature_set",
    "CaptureViewer",
    "InteractionController",
    "PopupContext",
    "PopupSession",
    "PopupStateMachine",
    "LocationPicker",
    "LayerSpec",
    "MapEngineError",
    "MapRenderer",
    "render_popup_panel",
    "render_pydeck_map",
    "render_registration_page",
    "EntityFilters",
    "SidebarRenderer",
    "RegistrationDraft",
    "RegistrationWizard",
]
