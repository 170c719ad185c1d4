"""Base map style for Heritage Atlas maps using free OpenStreetMap tiles.

Provides two basemap modes as Mapbox GL style specification dicts:

2D Mode:
    OpenStreetMap raster tiles only.

3D Mode:
    OpenStreetMap raster tiles plus PLATEAU building massing (vector tiles,
    Tokyo 23 wards) rendered as a fill-extrusion layer using each building's
    measured height.

Why a map_style dict instead of a TileLayer?
- pydeck's TileLayer only fetches tiles; rendering them requires a
  renderSubLayers callback that pydeck does not expose to Python
- deck.gl natively understands the style spec format and renders raster
  and vector tiles correctly
- Requires map_provider="mapbox" in pdk.Deck() (works without API key for raster)

The style is built fresh per renderer: two map views on one page never
share (or mutate) the same dict.
"""

import logging
from enum import Enum
from typing import Any

from heritage_atlas.constants import TileConfig

logger = logging.getLogger(__name__)

OSM_SOURCE_ID = "osm"
PLATEAU_SOURCE_ID = "plateau"
BUILDING_LAYER_ID = "plateau_buildings"


class ViewMode(Enum):
    """Map presentation: flat 2D markers or tilted 3D with buildings."""

    MAP_2D = "2d"
    MAP_3D = "3d"


def build_base_style(view_mode: ViewMode) -> dict[str, Any]:
    """Create a new Mapbox GL style dict for view_mode.

    Args:
        view_mode: MAP_2D for raster-only, MAP_3D to add building extrusion

    Returns:
        A fresh style dict owned by the caller.
    """
    sources: dict[str, Any] = {
        OSM_SOURCE_ID: {
            "type": "raster",
            "tiles": list(TileConfig.OSM_TILES),
            "tileSize": 256,
            "attribution": TileConfig.OSM_ATTRIBUTION,
        }
    }
    layers: list[dict[str, Any]] = [
        {
            "id": OSM_SOURCE_ID,
            "type": "raster",
            "source": OSM_SOURCE_ID,
            "minzoom": 0,
            "maxzoom": TileConfig.OSM_MAX_ZOOM,
        }
    ]

    if view_mode == ViewMode.MAP_3D:
        sources[PLATEAU_SOURCE_ID] = {
            "type": "vector",
            "tiles": list(TileConfig.PLATEAU_TILES),
            "minzoom": TileConfig.PLATEAU_MIN_ZOOM,
            "maxzoom": TileConfig.PLATEAU_MAX_ZOOM,
            "attribution": "PLATEAU (MLIT)",
        }
        layers.append(
            {
                "id": BUILDING_LAYER_ID,
                "type": "fill-extrusion",
                "source": PLATEAU_SOURCE_ID,
                "source-layer": TileConfig.PLATEAU_SOURCE_LAYER,
                "minzoom": TileConfig.PLATEAU_MIN_ZOOM,
                "paint": {
                    "fill-extrusion-color": TileConfig.BUILDING_COLOR,
                    "fill-extrusion-height": ["get", TileConfig.BUILDING_HEIGHT_PROPERTY],
                    "fill-extrusion-opacity": 0.8,
                },
            }
        )

    logger.debug(f"[MAP] Built base style for {view_mode.value} ({len(layers)} layers)")
    return {"version": 8, "sources": sources, "layers": layers}
