"""Actions - Orchestration between repositories, map engine and pages.

Pages call these functions instead of wiring repositories, the renderer,
the synchronizer and the interaction controller themselves:

- load_entities(): Fetch the filtered collection with ActionState tracking
- MapView: One mounted map (renderer + synchronizer + controller)
- MapView.mount(): (Re-)initialize the renderer for a component key
- MapView.apply(): Sync the collection and reconcile the open popup
- MapView.handle_click(): Detect and dispatch an st_deckgl click
"""

import logging
from dataclasses import dataclass
from typing import Optional

from heritage_atlas.core.http import ApiError
from heritage_atlas.model.action_state import ActionState
from heritage_atlas.model.click_info import ClickInfo
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.repositories.cultural_property import GeoEntityRepository
from heritage_atlas.ui.base_style import ViewMode
from heritage_atlas.ui.click_detector import ClickDetector
from heritage_atlas.ui.error_messages import describe_api_error
from heritage_atlas.ui.feature_sync import FeatureSynchronizer
from heritage_atlas.ui.interaction import InteractionController, PopupStateMachine
from heritage_atlas.ui.map_renderer import MapRenderer
from heritage_atlas.ui.pydeck_click_handler import PydeckClickResult
from heritage_atlas.ui.sidebar import EntityFilters

logger = logging.getLogger(__name__)


def load_entities(
    repository: GeoEntityRepository,
    filters: EntityFilters,
    state: ActionState,
) -> Optional[list[GeoEntity]]:
    """Fetch the entities matching filters.

    Returns:
        The entity list, or None on failure (state holds the message).
    """
    state.start()
    try:
        entities = repository.find_all(filters.to_params())
    except ApiError as e:
        logger.error(f"[MAP] Loading cultural properties failed: {e!r}")
        state.fail(describe_api_error(e))
        return None
    state.succeed()
    logger.info(f"[MAP] Loaded {len(entities)} cultural properties for {filters}")
    return entities


@dataclass
class MapView:
    """Renderer, synchronizer and controller of one map page."""

    renderer: MapRenderer
    synchronizer: FeatureSynchronizer
    controller: InteractionController
    click_detector: ClickDetector

    @staticmethod
    def create(view_mode: ViewMode, add_ui_listener: bool = True) -> "MapView":
        renderer = MapRenderer(view_mode=view_mode)
        synchronizer = FeatureSynchronizer(renderer)
        machine, context = PopupStateMachine.create(add_ui_listener=add_ui_listener)
        controller = InteractionController(synchronizer, machine)
        return MapView(
            renderer=renderer,
            synchronizer=synchronizer,
            controller=controller,
            click_detector=ClickDetector(dedup=context.click_dedup),
        )

    @property
    def view_mode(self) -> ViewMode:
        return self.renderer.view_mode

    def mount(self, container_key: str, center: tuple[float, float]) -> bool:
        """Initialize the renderer unless it is already loaded under container_key.

        Returns:
            True if the renderer was (re-)initialized.
        """
        if self.renderer.is_loaded and self.renderer.container_key == container_key:
            return False
        self.renderer.initialize(
            container_key,
            center=center,
            on_load=[self.synchronizer.on_load, self.controller.on_load],
        )
        return True

    def apply(self, entities: list[GeoEntity]) -> bool:
        """Sync entities (selected marker = open popup) and reconcile the popup."""
        popup = self.controller.popup
        selected = {popup.entity.id} if popup is not None else set()
        applied = self.synchronizer.sync(entities, selected_ids=selected)
        if applied:
            self.controller.reconcile()
        return applied

    def handle_click(self, result: PydeckClickResult) -> Optional[ClickInfo]:
        click = self.click_detector.detect(result.clicked_object, result.clicked_coordinate)
        if click is None:
            return None
        logger.info(f"[MAP] {click.display_name} on {self.renderer.container_key}")
        self.controller.dispatch(click)
        return click
