"""Heritage Atlas - Crowdsourced map of cultural properties with 3D captures.

Browse registered cultural properties on a 2D or 3D map, open a property's
3D capture from its popup, and register new properties with their captures.

Run: streamlit run heritage_atlas/app.py
"""

import logging
import traceback
from collections.abc import Callable

import streamlit as st

from heritage_atlas.constants import AppConfig, MapConfig
from heritage_atlas.core.geo_calculator import GeoCalculator
from heritage_atlas.core.geocoding import Geocoder
from heritage_atlas.core.http import ApiError, HttpClient
from heritage_atlas.model.action_state import ActionState
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.message import (
    ActionFailedMessage,
    LoadingEntitiesMessage,
    NoEntitiesMessage,
    SignInRequiredMessage,
)
from heritage_atlas.model.tag import Tag
from heritage_atlas.repositories import (
    AuthRepository,
    AuthService,
    GeoEntityRepository,
    MediaCaptureRepository,
)
from heritage_atlas.ui import (
    EntityFilters,
    LocationPicker,
    MapView,
    RegistrationWizard,
    SidebarRenderer,
    ViewMode,
    load_entities,
    render_auth_page,
    render_popup_panel,
    render_pydeck_map,
    render_registration_page,
)
from heritage_atlas.ui.infra import bump_map_version

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize session state with API clients, map views and the wizard."""
    if "auth" not in st.session_state:
        client = HttpClient()
        auth = AuthService(repository=AuthRepository(client))
        client.token_provider = auth.token
        st.session_state.http_client = client
        st.session_state.auth = auth
        st.session_state.entity_repo = GeoEntityRepository(client)
        st.session_state.capture_repo = MediaCaptureRepository(client)
        st.session_state.sign_in_state = ActionState()

    if "map_views" not in st.session_state:
        st.session_state.map_views = {mode: MapView.create(view_mode=mode) for mode in ViewMode}

    if "entities" not in st.session_state:
        st.session_state.entities = None
        st.session_state.entities_filters = None
        st.session_state.load_state = ActionState()

    if "tags" not in st.session_state:
        st.session_state.tags = None

    if "wizard" not in st.session_state:
        wizard, draft = RegistrationWizard.create()
        st.session_state.wizard = wizard
        st.session_state.location_picker = LocationPicker(draft, Geocoder())

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def reset_ui_state() -> None:
    """Reset UI state to initial while preserving loaded data and the session.

    Called when an error occurs to recover gracefully. Resets:
    - Map views (renderer, synchronizer, popup state machine)
    - Map version (to clear any stale map state)

    Preserves:
    - Signed-in session and API clients
    - Loaded entities and tags
    - Registration draft
    """
    logger.info("Resetting UI state due to error recovery")
    old_views = list(st.session_state.get("map_views", {}).values())
    st.session_state.map_views = {mode: MapView.create(view_mode=mode) for mode in ViewMode}
    bump_map_version()
    # Fresh views are in place before teardown; closing an open popup reruns the script
    for view in old_views:
        view.renderer.teardown()
    logger.info("UI state reset complete - data preserved")


def _guarded(render: Callable[[], None], tag: str) -> None:
    """Run a page body; unexpected errors are shown and the UI state is reset."""
    try:
        render()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[{tag}] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [{tag}] Something went wrong: {error_msg}")
        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


# =============================================================================
# DATA
# =============================================================================


def get_tags() -> list[Tag]:
    """Entity tags for the filters (loaded once; failures give an empty list)."""
    if st.session_state.tags is None:
        try:
            st.session_state.tags = st.session_state.entity_repo.find_tags()
        except ApiError as e:
            logger.warning(f"[MAP] Could not load tags: {e!r}")
            return []
    return st.session_state.tags


def get_entities(filters: EntityFilters) -> list[GeoEntity] | None:
    """Entities for filters, reloaded only when the filters change."""
    if st.session_state.entities is not None and st.session_state.entities_filters == filters:
        return st.session_state.entities

    state: ActionState = st.session_state.load_state
    with st.spinner(LoadingEntitiesMessage().message):
        entities = load_entities(st.session_state.entity_repo, filters, state)
    if entities is None:
        return st.session_state.entities
    st.session_state.entities = entities
    st.session_state.entities_filters = filters
    return entities


# =============================================================================
# PAGES
# =============================================================================


def _render_map_page(view_mode: ViewMode) -> None:
    view: MapView = st.session_state.map_views[view_mode]
    sidebar = SidebarRenderer(tags=get_tags(), auth=st.session_state.auth)
    filters = sidebar.render(entities=st.session_state.entities)
    entities = get_entities(filters)

    load_state: ActionState = st.session_state.load_state
    if load_state.failed:
        ActionFailedMessage(action="Loading cultural properties", error=load_state.error or "").display()
    elif entities is not None and not entities:
        NoEntitiesMessage().display()

    map_version = st.session_state.get("map_version", 0)
    container_key = f"map_{view_mode.value}_{map_version}"
    center = (MapConfig.START_CENTER_LAT, MapConfig.START_CENTER_LON)
    if entities:
        center = GeoCalculator.center_of((e.latitude, e.longitude) for e in entities if e.has_valid_coordinates) or center
    view.mount(container_key, center=center)
    if entities:
        view.apply(entities)

    col_map, col_popup = st.columns([3, 1])
    with col_map:
        result = render_pydeck_map(view.renderer.to_deck(), key=container_key)
        view.handle_click(result)
    with col_popup:
        render_popup_panel(view.controller)


def map_page() -> None:
    _guarded(lambda: _render_map_page(ViewMode.MAP_2D), tag="MAP")


def map_3d_page() -> None:
    _guarded(lambda: _render_map_page(ViewMode.MAP_3D), tag="MAP3D")


def register_page() -> None:
    auth: AuthService = st.session_state.auth
    if not auth.is_authenticated:
        SignInRequiredMessage(action="register a cultural property").display()
        return

    def render() -> None:
        render_registration_page(
            wizard=st.session_state.wizard,
            picker=st.session_state.location_picker,
            entity_repo=st.session_state.entity_repo,
            capture_repo=st.session_state.capture_repo,
            tags=get_tags(),
        )

    _guarded(render, tag="WIZARD")


def sign_in_page() -> None:
    _guarded(lambda: render_auth_page(st.session_state.auth, st.session_state.sign_in_state), tag="AUTH")


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    navigation = st.navigation(
        [
            st.Page(map_page, title="Map", icon="🗺️", default=True),
            st.Page(map_3d_page, title="3D Map", icon="🏯"),
            st.Page(register_page, title="Register", icon="📝"),
            st.Page(sign_in_page, title="Sign in", icon="🔑"),
        ]
    )
    navigation.run()


if __name__ == "__main__":
    main()
