"""Interaction controller for the map popup.

Uses python-statemachine for the popup lifecycle:

States:
    CLOSED: No popup
    POPUP_OPEN: One popup showing an entity (info only, or with a mounted 3D viewer)

Transitions:
    CLOSED -> POPUP_OPEN: open_popup (feature click)
    POPUP_OPEN -> POPUP_OPEN: open_popup (click another feature: replace)
    POPUP_OPEN -> CLOSED: close_popup (close button, empty-map click, map removed)

Release path
------------
Leaving POPUP_OPEN is the only place a PopupSession is released. Both the
close path and the replace path exit POPUP_OPEN (open_popup from POPUP_OPEN
is an external self-transition), so the previous viewer is unmounted before
the new session enters, and never twice.

Hover
-----
Marker hover only changes the cursor ("pointer" over markers). It is
independent of popup state and loads no data.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from heritage_atlas.constants import LayerConfig, PopupConfig
from heritage_atlas.model.click_info import ClickInfo, MapClickType
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.ui.click_detector import ClickDeduplicationContext
from heritage_atlas.ui.feature_sync import FeatureSynchronizer
from heritage_atlas.ui.infra import StreamlitUIListener
from heritage_atlas.ui.map_renderer import MapRenderer

logger = logging.getLogger(__name__)


@dataclass
class CaptureViewer:
    """Embedded 3D capture viewer keyed to one capture.

    mounted is True only between mount() and unmount(); both are idempotent.
    """

    capture_id: int
    embed_url: str
    title: str = ""
    mounted: bool = False
    mount_count: int = 0
    unmount_count: int = 0

    @classmethod
    def for_capture(cls, capture: MediaCapture) -> "CaptureViewer":
        return cls(capture_id=capture.id, embed_url=capture.embed_url, title=capture.display_title)

    def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self.mount_count += 1
        logger.info(f"[POPUP] Mounted viewer for capture {self.capture_id}")

    def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        self.unmount_count += 1
        logger.info(f"[POPUP] Unmounted viewer for capture {self.capture_id}")


@dataclass
class PopupSession:
    """The open popup: entity, anchor position (lon, lat) and optional viewer."""

    entity: GeoEntity
    position: tuple[float, float]
    viewer: Optional[CaptureViewer] = None
    released: bool = False

    @property
    def has_viewer(self) -> bool:
        return self.viewer is not None

    def release(self) -> None:
        """Unmount the viewer; calling again does nothing."""
        if self.released:
            return
        if self.viewer is not None:
            self.viewer.unmount()
        self.released = True


@dataclass
class PopupContext:
    """Shared context/model for the popup state machine.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None
    session: Optional[PopupSession] = None
    cursor: str = ""
    click_dedup: ClickDeduplicationContext = field(default_factory=ClickDeduplicationContext)


class PopupStateMachine(StateMachine):
    """Popup lifecycle: at most one open popup at any time."""

    closed = State("Closed", initial=True)
    popup_open = State("PopupOpen")

    open_popup = closed.to(popup_open) | popup_open.to(popup_open)
    close_popup = popup_open.to(closed)

    def __init__(self, context: PopupContext | None = None) -> None:
        model = context or PopupContext()
        super().__init__(model=model)

    @property
    def context(self) -> PopupContext:
        return self.model

    @property
    def is_open(self) -> bool:
        return self.popup_open.is_active

    # ==========================================================================
    # Hooks
    # ==========================================================================

    def on_exit_popup_open(self) -> None:
        """Release the current session (close and replace paths)."""
        session = self.context.session
        if session is not None:
            session.release()
            logger.info(f"[POPUP] Released popup for entity {session.entity.id}")
        self.context.session = None

    def on_enter_popup_open(self, session: PopupSession) -> None:
        if session.viewer is not None:
            session.viewer.mount()
        self.context.session = session
        logger.info(f"[POPUP] Opened popup for entity {session.entity.id}")

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.debug(f"Transition '{event}' not allowed from {self.current_state_value}")
            return False

    @staticmethod
    def create(add_ui_listener: bool = True) -> tuple["PopupStateMachine", PopupContext]:
        """Factory for machine plus context; tests pass add_ui_listener=False."""
        context = PopupContext()
        sm = PopupStateMachine(context=context)
        if add_ui_listener:
            sm.add_listener(StreamlitUIListener())
        return sm, context


class InteractionController:
    """Routes map events to the popup state machine.

    Example:
        controller = InteractionController(synchronizer, machine)
        renderer.initialize(key, center, on_load=[synchronizer.on_load, controller.on_load])
        controller.dispatch(click_info)
    """

    def __init__(self, synchronizer: FeatureSynchronizer, machine: PopupStateMachine | None = None) -> None:
        self.synchronizer = synchronizer
        self.machine = machine if machine is not None else PopupStateMachine()

    @property
    def renderer(self) -> MapRenderer:
        return self.synchronizer.renderer

    @property
    def context(self) -> PopupContext:
        return self.machine.context

    @property
    def popup(self) -> Optional[PopupSession]:
        return self.context.session

    @property
    def is_open(self) -> bool:
        return self.machine.is_open

    @property
    def cursor(self) -> str:
        return self.context.cursor

    # ==========================================================================
    # Binding
    # ==========================================================================

    def bind(self, renderer: MapRenderer | None = None) -> None:
        """Register click/hover handlers on the interactive layers and the map."""
        renderer = renderer or self.renderer
        for layer_id in LayerConfig.INTERACTIVE_LAYER_IDS:
            renderer.on("click", layer_id, self._on_feature_click)
            renderer.on("mouseenter", layer_id, self._on_mouse_enter)
            renderer.on("mouseleave", layer_id, self._on_mouse_leave)
        renderer.on("click", None, self._on_map_click)
        renderer.on("remove", None, self._on_remove)
        logger.debug(f"[POPUP] Bound handlers to {renderer.container_key}")

    def on_load(self, payload: dict[str, Any]) -> None:
        """Load callback: listeners do not survive teardown, so bind on every load."""
        self.bind()

    def _on_feature_click(self, payload: dict[str, Any]) -> None:
        entity_id = payload.get("id")
        if entity_id is None:
            return
        self.handle_feature_click(int(entity_id), payload.get("position"))

    def _on_map_click(self, payload: dict[str, Any]) -> None:
        self.handle_map_click()

    def _on_mouse_enter(self, payload: dict[str, Any]) -> None:
        self.handle_hover(True)

    def _on_mouse_leave(self, payload: dict[str, Any]) -> None:
        self.handle_hover(False)

    def _on_remove(self, payload: dict[str, Any]) -> None:
        self.close()

    def dispatch(self, click: ClickInfo) -> None:
        """Route a detected click through the renderer's listeners."""
        if click.click_type == MapClickType.FEATURE:
            layer_id = click.layer_id or LayerConfig.MARKER_LAYER_ID
            fired = self.renderer.fire("click", layer_id, {"id": click.entity_id, "position": click.position})
            if not fired:
                logger.debug(f"[POPUP] No click handler bound for layer {layer_id}")
        else:
            self.renderer.fire("click", None, {"lat": click.lat, "lon": click.lon})

    # ==========================================================================
    # Handlers
    # ==========================================================================

    def handle_feature_click(self, entity_id: int, position: Optional[tuple[float, float]] = None) -> Optional[PopupSession]:
        """Open (or replace) the popup for entity_id.

        Unknown ids (stale clicks after a re-sync) are ignored.
        """
        entity = self.synchronizer.lookup(entity_id)
        if entity is None:
            logger.debug(f"[POPUP] Ignoring click on unknown entity {entity_id}")
            return None
        anchor = tuple(position) if position else (entity.longitude, entity.latitude)
        first = entity.first_capture
        viewer = CaptureViewer.for_capture(first) if first is not None else None
        session = PopupSession(entity=entity, position=(float(anchor[0]), float(anchor[1])), viewer=viewer)
        self.machine.send("open_popup", session=session)
        return session

    def handle_map_click(self) -> None:
        if PopupConfig.CLOSE_ON_CLICK:
            self.close()

    def close(self) -> bool:
        """Close the popup; returns False when none was open."""
        if not self.machine.is_open:
            return False
        self.machine.send("close_popup")
        return True

    def handle_hover(self, entered: bool) -> None:
        self.context.cursor = "pointer" if entered else ""

    def reconcile(self) -> None:
        """Align the open popup with the collection after a re-sync.

        The popup closes if its entity is gone. If the first capture changed,
        the popup is re-opened with a viewer for the new capture; otherwise the
        session just points at the fresh record.
        """
        session = self.popup
        if session is None:
            return
        fresh = self.synchronizer.lookup(session.entity.id)
        if fresh is None:
            logger.info(f"[POPUP] Entity {session.entity.id} vanished; closing popup")
            self.close()
            return
        old_capture_id = session.viewer.capture_id if session.viewer else None
        new_capture_id = fresh.first_capture.id if fresh.first_capture else None
        if old_capture_id != new_capture_id:
            self.handle_feature_click(fresh.id, session.position)
            return
        session.entity = fresh
