"""MapRenderer - Engine-style map state rendered as a pydeck Deck.

One MapRenderer owns the map state of one mounted map view:
- Base style (built fresh per initialize)
- Registered icon images (PNG data URLs)
- Sources (GeoJSON point features) and layers (IconLayers over a source)
- Event listeners (load, remove, click, mouseenter, mouseleave)
- Initial view state

The add/remove API mirrors a WebGL map engine so callers keep the same
discipline: icons are registered before any layer references them, duplicate
ids are errors, and nothing mutates before the style has loaded. to_deck()
turns the current state into a pdk.Deck for st_deckgl.

Z-order (back to front): base style -> layers in insertion order
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import pydeck as pdk
from PIL import Image

from heritage_atlas.constants import IconConfig, MapConfig
from heritage_atlas.core.cancellation import LivenessToken
from heritage_atlas.ui.base_style import ViewMode, build_base_style
from heritage_atlas.ui.icons import (
    IconImage,
    IconLoadError,
    IconSource,
    draw_fallback_marker,
    draw_no_image_icon,
    fit_marker,
    fit_thumbnail,
    load_icon_image,
    make_icon,
)

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]

EVENTS = frozenset({"load", "remove", "click", "mouseenter", "mouseleave"})


class MapEngineError(Exception):
    """Invalid engine operation (duplicate id, missing source or icon)."""


@dataclass(frozen=True)
class LayerSpec:
    """IconLayer definition over a source.

    Attributes:
        id: Unique layer id
        source: Id of the source providing features
        icon: Icon name used for every feature (static)
        icon_property: Feature property holding a per-feature icon name
        filter_property: Only features whose property is truthy are drawn
        size_px: Rendered icon height in pixels
        pixel_offset: Screen-space offset [x, y] from the feature position
    """

    id: str
    source: str
    icon: Optional[str] = None
    icon_property: Optional[str] = None
    filter_property: Optional[str] = None
    size_px: int = IconConfig.MARKER_DISPLAY_PX
    pixel_offset: tuple[int, int] = (0, 0)
    pickable: bool = True

    def __post_init__(self) -> None:
        if (self.icon is None) == (self.icon_property is None):
            raise ValueError(f"Layer {self.id}: set exactly one of icon / icon_property")

    def accepts(self, feature: dict[str, Any]) -> bool:
        if self.filter_property is None:
            return True
        return bool(feature.get("properties", {}).get(self.filter_property))

    def icon_name_for(self, feature: dict[str, Any]) -> Optional[str]:
        if self.icon is not None:
            return self.icon
        assert self.icon_property is not None
        return feature.get("properties", {}).get(self.icon_property)


class MapRenderer:
    """Map state for one mounted map view.

    Example:
        renderer = MapRenderer(view_mode=ViewMode.MAP_3D)
        renderer.initialize("map_3d", center=(35.71, 139.79), zoom=15, on_load=[register_icons])
        renderer.add_or_replace_source("cultural_properties", features)
        renderer.add_or_replace_layer(LayerSpec(id="markers", source="cultural_properties", icon="pin"))
        st_deckgl(renderer.to_deck(), key=renderer.container_key)
    """

    def __init__(self, view_mode: ViewMode = ViewMode.MAP_2D) -> None:
        self.view_mode = view_mode
        self.container_key: Optional[str] = None
        self.style: Optional[dict[str, Any]] = None
        self.view_state: Optional[pdk.ViewState] = None
        self.token: Optional[LivenessToken] = None
        # Incremented on every initialize; lets consumers detect a fresh engine
        self.generation = 0
        self._loaded = False
        self._images: dict[str, IconImage] = {}
        self._sources: dict[str, list[dict[str, Any]]] = {}
        self._layers: dict[str, LayerSpec] = {}
        self._listeners: dict[tuple[str, Optional[str]], list[Listener]] = {}

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def initialize(
        self,
        container_key: str,
        center: tuple[float, float],
        zoom: float = MapConfig.DEFAULT_ZOOM,
        pitch: Optional[float] = None,
        on_load: Sequence[Listener] = (),
    ) -> None:
        """Create the engine state and run load callbacks.

        Args:
            container_key: Streamlit component key of the map container (required)
            center: (lat, lon) of the initial view
            zoom: Initial zoom
            pitch: Initial tilt (defaults to 45 degrees in 3D mode, flat in 2D)
            on_load: Callbacks fired in order once the style has loaded

        Raises:
            ValueError: container_key is empty
        """
        if not container_key:
            raise ValueError("Map container key is required")
        if self._loaded:
            self.teardown()

        self.container_key = container_key
        self.generation += 1
        self.token = LivenessToken(label=f"{container_key}#{self.generation}")
        self.style = build_base_style(self.view_mode)

        is_3d = self.view_mode == ViewMode.MAP_3D
        if pitch is None:
            pitch = MapConfig.PITCH_3D if is_3d else MapConfig.DEFAULT_PITCH
        lat, lon = center
        self.view_state = pdk.ViewState(
            latitude=lat,
            longitude=lon,
            zoom=zoom,
            pitch=pitch,
            bearing=MapConfig.DEFAULT_BEARING,
            max_pitch=MapConfig.MAX_PITCH_3D if is_3d else MapConfig.MAX_PITCH_2D,
        )
        self._loaded = True
        logger.info(f"[MAP] Initialized {container_key} ({self.view_mode.value}, generation {self.generation})")

        for callback in on_load:
            self.on("load", None, callback)
        self.fire("load", None, {"container_key": container_key, "generation": self.generation})

    def teardown(self) -> None:
        """Fire remove, then drop every listener, image, source and layer.

        The state is cleared even when a remove listener raises (st.rerun()
        raises RerunException from inside a listener).
        """
        if not self._loaded:
            return
        try:
            self.fire("remove", None, {"container_key": self.container_key})
        finally:
            self._listeners.clear()
            self._images.clear()
            self._sources.clear()
            self._layers.clear()
            if self.token is not None:
                self.token.cancel()
            self._loaded = False
            self.style = None
        logger.info(f"[MAP] Tore down {self.container_key}")

    def _ready(self, operation: str) -> bool:
        if not self._loaded:
            logger.debug(f"[MAP] {operation} ignored: map not loaded")
            return False
        return True

    # =========================================================================
    # IMAGES
    # =========================================================================

    def has_image(self, name: str) -> bool:
        return name in self._images

    def get_image(self, name: str) -> Optional[IconImage]:
        return self._images.get(name)

    def add_image(self, name: str, image: Image.Image, anchor_bottom: bool = True) -> None:
        """Register an already rasterized image (procedural pins, badge)."""
        if not self._ready(f"add_image({name})"):
            return
        self._images[name] = make_icon(image, anchor_bottom=anchor_bottom)

    def register_icon(self, name: str, source: IconSource, thumbnail: bool = False) -> bool:
        """Load an icon from a URL, file path or Pillow image and register it.

        A load failure registers a placeholder under the same name so layers
        referencing it still render.

        Args:
            name: Icon name referenced by layers/features
            source: URL, data URL, file path or Pillow image
            thumbnail: Square-crop as a photo thumbnail instead of fitting a marker

        Returns:
            True if the source image was registered, False on fallback or drop.
        """
        if not self._ready(f"register_icon({name})"):
            return False
        token = self.token
        loaded = True
        try:
            image = load_icon_image(source)
        except IconLoadError as e:
            logger.warning(f"[ICON] {name}: {e}; using placeholder")
            image = draw_no_image_icon() if thumbnail else draw_fallback_marker()
            loaded = False

        # The view may have been torn down or re-initialized while fetching
        if token is None or not token.alive:
            logger.debug(f"[ICON] Dropped late icon {name} for {token}")
            return False

        fitted = fit_thumbnail(image) if thumbnail else fit_marker(image)
        self._images[name] = make_icon(fitted, anchor_bottom=True)
        return loaded

    # =========================================================================
    # SOURCES
    # =========================================================================

    def has_source(self, source_id: str) -> bool:
        return source_id in self._sources

    def get_source(self, source_id: str) -> list[dict[str, Any]]:
        return list(self._sources.get(source_id, []))

    def add_source(self, source_id: str, features: Iterable[dict[str, Any]]) -> None:
        """Add a GeoJSON point source.

        Raises:
            MapEngineError: A source with this id already exists
        """
        if not self._ready(f"add_source({source_id})"):
            return
        if source_id in self._sources:
            raise MapEngineError(f"There is already a source with ID '{source_id}'")
        self._sources[source_id] = list(features)

    def remove_source(self, source_id: str) -> None:
        """Remove a source.

        Raises:
            MapEngineError: A layer still uses the source
        """
        if not self._ready(f"remove_source({source_id})"):
            return
        users = [spec.id for spec in self._layers.values() if spec.source == source_id]
        if users:
            raise MapEngineError(f"Source '{source_id}' cannot be removed while layers {users} use it")
        self._sources.pop(source_id, None)

    def add_or_replace_source(self, source_id: str, features: Iterable[dict[str, Any]]) -> None:
        """Replace a source, first removing the layers that depend on it."""
        if not self._ready(f"add_or_replace_source({source_id})"):
            return
        for layer_id in [spec.id for spec in self._layers.values() if spec.source == source_id]:
            self.remove_layer(layer_id)
        if source_id in self._sources:
            self.remove_source(source_id)
        self.add_source(source_id, features)

    # =========================================================================
    # LAYERS
    # =========================================================================

    @property
    def layer_ids(self) -> list[str]:
        """Layer ids in z-order (back to front)."""
        return list(self._layers)

    def has_layer(self, layer_id: str) -> bool:
        return layer_id in self._layers

    def add_layer(self, spec: LayerSpec) -> None:
        """Add an IconLayer on top of the existing layers.

        Raises:
            MapEngineError: Duplicate id, missing source, or an icon the layer
                needs has not been registered
        """
        if not self._ready(f"add_layer({spec.id})"):
            return
        if spec.id in self._layers:
            raise MapEngineError(f"Layer with id '{spec.id}' already exists on this map")
        if spec.source not in self._sources:
            raise MapEngineError(f"Source '{spec.source}' for layer '{spec.id}' not found")
        missing = sorted(
            {
                name
                for feature in self._sources[spec.source]
                if spec.accepts(feature)
                for name in [spec.icon_name_for(feature)]
                if name is not None and name not in self._images
            }
        )
        if spec.icon is not None and spec.icon not in self._images:
            missing = sorted(set(missing) | {spec.icon})
        if missing:
            raise MapEngineError(f"Image(s) {missing} for layer '{spec.id}' could not be found")
        self._layers[spec.id] = spec

    def remove_layer(self, layer_id: str) -> None:
        if not self._ready(f"remove_layer({layer_id})"):
            return
        self._layers.pop(layer_id, None)

    def add_or_replace_layer(self, spec: LayerSpec) -> None:
        if not self._ready(f"add_or_replace_layer({spec.id})"):
            return
        if spec.id in self._layers:
            self.remove_layer(spec.id)
        self.add_layer(spec)

    def layer_data(self, layer_id: str) -> list[dict[str, Any]]:
        """Flat rows for a layer: feature properties plus position and icon definition.

        Properties are spread at the top level so click events carry them directly.
        """
        spec = self._layers[layer_id]
        rows = []
        for feature in self._sources.get(spec.source, []):
            if not spec.accepts(feature):
                continue
            icon_name = spec.icon_name_for(feature)
            image = self._images.get(icon_name) if icon_name is not None else None
            if image is None:
                # Guarded by add_layer; only reachable if an image was replaced away
                logger.warning(f"[MAP] Feature without registered icon in {layer_id}: {icon_name}")
                continue
            rows.append(
                {
                    **feature.get("properties", {}),
                    "position": list(feature["geometry"]["coordinates"]),
                    "icon_data": image.to_icon_data(),
                }
            )
        return rows

    # =========================================================================
    # EVENTS
    # =========================================================================

    def on(self, event: str, layer_id: Optional[str], callback: Listener) -> None:
        """Register a listener; layer_id None means map-wide."""
        if event not in EVENTS:
            raise ValueError(f"Unknown map event: {event}")
        self._listeners.setdefault((event, layer_id), []).append(callback)

    def off(self, event: str, layer_id: Optional[str], callback: Listener) -> None:
        callbacks = self._listeners.get((event, layer_id), [])
        if callback in callbacks:
            callbacks.remove(callback)

    def fire(self, event: str, layer_id: Optional[str] = None, payload: Optional[dict[str, Any]] = None) -> int:
        """Call listeners for (event, layer_id) in registration order.

        Returns:
            Number of listeners called.
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown map event: {event}")
        callbacks = list(self._listeners.get((event, layer_id), []))
        for callback in callbacks:
            callback(payload or {})
        return len(callbacks)

    def listener_count(self, event: str, layer_id: Optional[str] = None) -> int:
        return len(self._listeners.get((event, layer_id), []))

    # =========================================================================
    # DECK
    # =========================================================================

    def to_deck(self) -> pdk.Deck:
        """Build the pydeck Deck for the current state.

        Raises:
            MapEngineError: Called before initialize
        """
        if not self._loaded or self.view_state is None:
            raise MapEngineError("Map is not initialized")

        layers = []
        for layer_id, spec in self._layers.items():
            layers.append(
                pdk.Layer(
                    "IconLayer",
                    self.layer_data(layer_id),
                    get_icon="icon_data",
                    get_position="position",
                    get_size=spec.size_px,
                    size_units="pixels",
                    get_pixel_offset=list(spec.pixel_offset),
                    pickable=spec.pickable,
                    auto_highlight=True,
                    id=layer_id,
                )
            )

        return pdk.Deck(
            map_style=self.style,
            map_provider="mapbox",  # Required when map_style is a dict
            initial_view_state=self.view_state,
            layers=layers,
            tooltip=self._create_tooltip_config(),
        )

    @staticmethod
    def _create_tooltip_config() -> dict[str, Any]:
        """Tooltip shows the entity name only; details open in the popup panel."""
        return {
            "html": "<b>{name}</b>",
            "style": {
                "backgroundColor": "rgba(255, 255, 255, 0.95)",
                "color": "#333",
                "padding": "6px 10px",
                "borderRadius": "4px",
            },
        }
