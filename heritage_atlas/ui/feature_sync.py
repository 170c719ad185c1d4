"""FeatureSynchronizer - Applies a GeoEntity collection to a MapRenderer.

The synchronizer turns entities into point features and keeps the map's
source and its two layers (markers, "3D" badges) in step with the current
collection:

    guard (loaded, non-empty) -> unchanged? skip -> build features
        -> register icons -> replace source -> marker layer -> badge layer

Applying the same collection twice is a no-op; a fresh renderer generation
(re-initialize after teardown) always re-applies. One synchronizer serves
both 2D and 3D views; only icon choice differs by ViewMode.

Map features carry flat JSON primitives only. Nested captures travel as a
JSON string (encode_captures) because map engines flatten feature
properties; the full GeoEntity is available through lookup(id).
"""

import hashlib
import json
import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from heritage_atlas.constants import IconConfig, LayerConfig
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.ui.base_style import ViewMode
from heritage_atlas.ui.icons import draw_badge_icon, draw_marker_icon, draw_no_image_icon
from heritage_atlas.ui.map_renderer import LayerSpec, MapRenderer

logger = logging.getLogger(__name__)

THUMBNAIL_ICON_PREFIX = "thumb_"


# =============================================================================
# CAPTURE ENCODING
# =============================================================================


def encode_captures(captures: Sequence[MediaCapture]) -> str:
    """Serialize captures to the JSON string stored in a feature property."""
    return json.dumps(
        [{"id": c.id, "url": c.url, "title": c.title, "embed_url": c.embed_url} for c in captures],
        ensure_ascii=False,
    )


def decode_captures(value: Any) -> list[dict[str, Any]]:
    """Parse a feature's captures property.

    Accepts the encoded string or an already-parsed list. Malformed input
    yields [] (logged) instead of raising.
    """
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning(f"[SYNC] Malformed captures property: {e}")
            return []
        if isinstance(parsed, list):
            return [item for item in parsed if isinstance(item, dict)]
    logger.warning(f"[SYNC] Unexpected captures property type: {type(value).__name__}")
    return []


# =============================================================================
# FEATURE BUILDING
# =============================================================================


def thumbnail_icon_name(entity_id: int) -> str:
    return f"{THUMBNAIL_ICON_PREFIX}{entity_id}"


def entity_icon_name(entity: GeoEntity, view_mode: ViewMode, selected_ids: Collection[int] = ()) -> str:
    """Icon for an entity's marker: a pin in 2D, its photo thumbnail in 3D."""
    if view_mode == ViewMode.MAP_3D:
        return thumbnail_icon_name(entity.id) if entity.thumbnail_url else IconConfig.NO_IMAGE_ICON
    return IconConfig.SELECTED_ICON if entity.id in selected_ids else IconConfig.PROPERTY_ICON


def entity_to_feature(entity: GeoEntity, view_mode: ViewMode, selected_ids: Collection[int] = ()) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [entity.longitude, entity.latitude]},
        "properties": {
            "type": LayerConfig.TYPE_PROPERTY,
            "id": entity.id,
            "name": entity.name,
            "address": entity.address,
            "entity_type": entity.type or "",
            "thumb": entity.thumbnail_url or "",
            "icon": entity_icon_name(entity, view_mode, selected_ids),
            LayerConfig.HAS_CAPTURES_KEY: entity.has_captures,
            "captures": encode_captures(entity.captures),
        },
    }


@dataclass(frozen=True)
class RenderedFeatureSet:
    """Features for one collection plus a content fingerprint.

    Attributes:
        features: One GeoJSON point feature per entity with valid coordinates
        fingerprint: Hash of the feature content and view mode
        skipped_ids: Entities left out for invalid coordinates
    """

    features: tuple[dict[str, Any], ...]
    fingerprint: str
    skipped_ids: tuple[int, ...] = ()

    @property
    def count(self) -> int:
        return len(self.features)

    @property
    def entity_ids(self) -> list[int]:
        return [f["properties"]["id"] for f in self.features]


def build_feature_set(
    entities: Iterable[GeoEntity],
    view_mode: ViewMode,
    selected_ids: Collection[int] = (),
) -> RenderedFeatureSet:
    """Build one feature per entity with valid coordinates.

    Entities at (0, 0), out of range or with non-finite coordinates are
    skipped with a warning.
    """
    features = []
    skipped = []
    for entity in entities:
        if not entity.has_valid_coordinates:
            logger.warning(f"[SYNC] Skipping entity {entity.id}: invalid coordinates ({entity.latitude}, {entity.longitude})")
            skipped.append(entity.id)
            continue
        features.append(entity_to_feature(entity, view_mode, selected_ids))

    digest = hashlib.sha1(view_mode.value.encode("utf-8"))
    digest.update(json.dumps(features, sort_keys=True, ensure_ascii=False).encode("utf-8"))
    return RenderedFeatureSet(features=tuple(features), fingerprint=digest.hexdigest(), skipped_ids=tuple(skipped))


def marker_layer_spec(view_mode: ViewMode) -> LayerSpec:
    size = IconConfig.THUMBNAIL_DISPLAY_PX if view_mode == ViewMode.MAP_3D else IconConfig.MARKER_DISPLAY_PX
    return LayerSpec(
        id=LayerConfig.MARKER_LAYER_ID,
        source=LayerConfig.SOURCE_ID,
        icon_property="icon",
        size_px=size,
    )


def badge_layer_spec() -> LayerSpec:
    return LayerSpec(
        id=LayerConfig.BADGE_LAYER_ID,
        source=LayerConfig.SOURCE_ID,
        icon=IconConfig.BADGE_ICON,
        filter_property=LayerConfig.HAS_CAPTURES_KEY,
        size_px=IconConfig.BADGE_DISPLAY_PX,
        pixel_offset=LayerConfig.BADGE_PIXEL_OFFSET,
    )


# =============================================================================
# SYNCHRONIZER
# =============================================================================


class FeatureSynchronizer:
    """Keeps a renderer's features in step with an entity collection.

    Example:
        sync = FeatureSynchronizer(renderer)
        renderer.initialize("map", center=(35.71, 139.79), on_load=[sync.on_load])
        sync.sync(entities)
        entity = sync.lookup(clicked_id)
    """

    def __init__(self, renderer: MapRenderer) -> None:
        self.renderer = renderer
        self.last_feature_set: Optional[RenderedFeatureSet] = None
        self._entities: dict[int, GeoEntity] = {}
        self._applied_fingerprint: Optional[str] = None
        self._applied_generation: Optional[int] = None
        self._thumbnail_urls: dict[str, str] = {}

    @property
    def view_mode(self) -> ViewMode:
        return self.renderer.view_mode

    def lookup(self, entity_id: int) -> Optional[GeoEntity]:
        """Entity rendered under entity_id in the last applied collection."""
        return self._entities.get(entity_id)

    @property
    def entity_count(self) -> int:
        return len(self._entities)

    def on_load(self, payload: dict[str, Any]) -> None:
        """Load callback: register the base icons on the fresh engine."""
        self._thumbnail_urls.clear()
        self.register_base_icons()

    def register_base_icons(self) -> None:
        """Register pins, badge and placeholder; already-registered names are kept."""
        renderer = self.renderer
        pins = [
            (IconConfig.PROPERTY_ICON, IconConfig.PROPERTY_ICON_SOURCE, IconConfig.PROPERTY_PIN_COLOR),
            (IconConfig.SELECTED_ICON, IconConfig.SELECTED_ICON_SOURCE, IconConfig.SELECTED_PIN_COLOR),
        ]
        for name, source, color in pins:
            if renderer.has_image(name):
                continue
            if source:
                renderer.register_icon(name, source)
            else:
                renderer.add_image(name, draw_marker_icon(color))
        if not renderer.has_image(IconConfig.BADGE_ICON):
            renderer.add_image(IconConfig.BADGE_ICON, draw_badge_icon(), anchor_bottom=False)
        if not renderer.has_image(IconConfig.NO_IMAGE_ICON):
            renderer.add_image(IconConfig.NO_IMAGE_ICON, draw_no_image_icon())

    def _register_thumbnails(self, entities: Iterable[GeoEntity]) -> None:
        for entity in entities:
            url = entity.thumbnail_url
            if not url or not entity.has_valid_coordinates:
                continue
            name = thumbnail_icon_name(entity.id)
            if self.renderer.has_image(name) and self._thumbnail_urls.get(name) == url:
                continue
            # Failed fetches register a placeholder under the same name
            self.renderer.register_icon(name, url, thumbnail=True)
            self._thumbnail_urls[name] = url

    def sync(self, entities: Iterable[GeoEntity], selected_ids: Collection[int] = ()) -> bool:
        """Apply entities to the renderer.

        Returns:
            True if the renderer was updated, False if skipped (not loaded,
            empty collection, unchanged, or the view went away mid-sync).
        """
        renderer = self.renderer
        if not renderer.is_loaded:
            logger.debug("[SYNC] Skipped: map not loaded")
            return False
        entity_list = list(entities)
        feature_set = build_feature_set(entity_list, self.view_mode, selected_ids)
        if feature_set.count == 0:
            logger.debug(
                f"[SYNC] Skipped: no mappable entities in {len(entity_list)} record(s), keeping current features"
            )
            return False

        if feature_set.fingerprint == self._applied_fingerprint and renderer.generation == self._applied_generation:
            logger.debug("[SYNC] Skipped: collection unchanged")
            return False

        token = renderer.token
        self.register_base_icons()
        if self.view_mode == ViewMode.MAP_3D:
            self._register_thumbnails(entity_list)
        if token is None or not token.alive:
            logger.debug("[SYNC] Dropped late collection: view was torn down")
            return False

        renderer.add_or_replace_source(LayerConfig.SOURCE_ID, feature_set.features)
        renderer.add_or_replace_layer(marker_layer_spec(self.view_mode))
        renderer.add_or_replace_layer(badge_layer_spec())

        self._entities = {e.id: e for e in entity_list if e.has_valid_coordinates}
        self._applied_fingerprint = feature_set.fingerprint
        self._applied_generation = renderer.generation
        self.last_feature_set = feature_set
        logger.info(
            f"[SYNC] Applied {feature_set.count} feature(s) to {renderer.container_key} "
            f"({len(feature_set.skipped_ids)} skipped)"
        )
        return True
