"""Configuration constants for Heritage Atlas.

All configurable parameters are centralized here for easy tuning.
Deployment-specific values (backend host, timeouts) can be overridden with
environment variables read once at import time.

Classes:
    AppConfig: UI application settings
    ApiConfig: Backend REST API host and request settings
    MapConfig: Default map view parameters
    TileConfig: Raster and vector tile endpoints
    LayerConfig: Source/layer ids and click object types
    IconConfig: Icon names, sizes and procedural drawing colors
    PopupConfig: Popup slot behavior
    CaptureConfig: 3D capture viewer settings
    GeocodingConfig: Forward/reverse geocoding API
    RegistrationConfig: Registration wizard choices
"""

import os


class AppConfig:
    """UI application settings."""

    TITLE = "Heritage Atlas - Cultural Properties in 3D"
    ICON = "🏯"
    LAYOUT = "wide"


class ApiConfig:
    """Backend REST API settings."""

    BACKEND_HOST = os.environ.get("HERITAGE_ATLAS_API_HOST", "http://localhost:8000").rstrip("/")
    TIMEOUT_S = float(os.environ.get("HERITAGE_ATLAS_HTTP_TIMEOUT_S", "30"))

    # Authorization header scheme ("Authorization: Token <token>")
    TOKEN_SCHEME = "Token"

    # Endpoint paths (joined to BACKEND_HOST)
    CULTURAL_PROPERTY_PATH = "/cp_api/cultural_property/"
    ENTITY_TAG_PATH = "/cp_api/tag/"
    MOVIE_PATH = "/cp_api/movie/"
    TAG_PATH = "/api/v1/tags/"
    AUTH_PATH = "/api/v1/auth/"

    # Page size when loading every entity for the map
    MAP_PAGE_LIMIT = 1000


class MapConfig:
    """Default map view parameters."""

    # Initial center: Asakusa, Tokyo
    START_CENTER_LAT = 35.71489576634944
    START_CENTER_LON = 139.79667139325397

    DEFAULT_ZOOM = 13
    DEFAULT_PITCH = 0.0
    DEFAULT_BEARING = 0.0

    # 3D view tilt
    PITCH_3D = 45.0
    MAX_PITCH_2D = 60
    MAX_PITCH_3D = 85

    # Map component height (pixels)
    HEIGHT_PX = 640
    PICKER_HEIGHT_PX = 400

    # Zoom when centering on a single location (location picker)
    PICKER_ZOOM = 16

    # Coordinate validity bounds (WGS84)
    LAT_RANGE = (-90.0, 90.0)
    LON_RANGE = (-180.0, 180.0)


class TileConfig:
    """Raster and vector tile endpoints (read-only consumers)."""

    OSM_TILES = ["https://tile.openstreetmap.org/{z}/{x}/{y}.png"]
    OSM_ATTRIBUTION = '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
    OSM_MAX_ZOOM = 19

    # PLATEAU building massing (Tokyo 23 wards), used for 3D extrusion
    PLATEAU_TILES = ["https://indigo-lab.github.io/plateau-tokyo23ku-building-mvt-2020/{z}/{x}/{y}.pbf"]
    PLATEAU_MIN_ZOOM = 10
    PLATEAU_MAX_ZOOM = 16
    PLATEAU_SOURCE_LAYER = "bldg"
    BUILDING_COLOR = "#797979"
    BUILDING_HEIGHT_PROPERTY = "measuredHeight"


class LayerConfig:
    """Source and layer identifiers on the map engine."""

    SOURCE_ID = "cultural_properties"
    MARKER_LAYER_ID = "cultural_properties"
    BADGE_LAYER_ID = "cultural_properties_3d_badge"

    # Object type embedded in every feature so click events can be parsed
    TYPE_PROPERTY = "cultural_property"

    # Feature property flag used by the badge layer filter
    HAS_CAPTURES_KEY = "has_captures"

    # Pixel offset of the badge relative to the marker anchor
    BADGE_PIXEL_OFFSET = (14, -34)

    # Layers that open popups on click
    INTERACTIVE_LAYER_IDS = (MARKER_LAYER_ID, BADGE_LAYER_ID)

    assert MARKER_LAYER_ID != BADGE_LAYER_ID


class IconConfig:
    """Icon registry names, sizes and drawing colors."""

    PROPERTY_ICON = "property_icon"
    SELECTED_ICON = "selected_property_icon"
    BADGE_ICON = "badge_3d"
    NO_IMAGE_ICON = "no_image"

    # Optional marker image (URL or file path); procedural pins are drawn when unset
    PROPERTY_ICON_SOURCE = os.environ.get("HERITAGE_ATLAS_MARKER_ICON") or None
    SELECTED_ICON_SOURCE = os.environ.get("HERITAGE_ATLAS_SELECTED_MARKER_ICON") or None

    # Icon raster size (pixels, square)
    ICON_SIZE_PX = 64
    THUMBNAIL_SIZE_PX = 96
    BADGE_SIZE_PX = (44, 26)

    # Rendered size on the map (pixels)
    MARKER_DISPLAY_PX = 36
    THUMBNAIL_DISPLAY_PX = 48
    BADGE_DISPLAY_PX = 22

    # Procedural drawing colors (RGBA)
    PROPERTY_PIN_COLOR = (37, 99, 235, 255)  # blue-600
    SELECTED_PIN_COLOR = (220, 38, 38, 255)  # red-600
    FALLBACK_PIN_COLOR = (107, 114, 128, 255)  # gray-500
    PIN_BORDER_COLOR = (255, 255, 255, 255)
    BADGE_FILL_COLOR = (17, 24, 39, 235)  # gray-900
    BADGE_TEXT_COLOR = (250, 204, 21, 255)  # yellow-400
    BADGE_LABEL = "3D"

    # Timeout for fetching remote icon images (seconds)
    FETCH_TIMEOUT_S = 10


class PopupConfig:
    """Popup slot behavior."""

    MAX_WIDTH_PX = 320
    CLOSE_BUTTON = True
    # Clicking empty map closes the open popup
    CLOSE_ON_CLICK = True


class CaptureConfig:
    """3D capture viewer settings."""

    VIEWER_HEIGHT_PX = 360
    # Hosting URL path segments: capture page -> embeddable viewer
    CAPTURE_PATH_SEGMENT = "/capture/"
    EMBED_PATH_SEGMENT = "/embed/"


class GeocodingConfig:
    """Forward/reverse geocoding (Nominatim-compatible)."""

    BASE_URL = os.environ.get("HERITAGE_ATLAS_GEOCODER_URL", "https://nominatim.openstreetmap.org").rstrip("/")
    USER_AGENT = "HeritageAtlas/1.0"
    COUNTRY_CODES = "jp"
    LANGUAGE = "ja"
    SEARCH_LIMIT = 5
    REVERSE_ZOOM = 18
    TIMEOUT_S = 15

    # Address components joined (in order) to build a display address
    ADDRESS_PARTS = ("state", ("city", "town", "village"), "suburb", "neighbourhood", "road")


class RegistrationConfig:
    """Registration wizard choices."""

    PROPERTY_TYPES = [
        "Tangible Cultural Property",
        "Intangible Cultural Property",
        "Folk Cultural Property",
        "Monument",
        "Cultural Landscape",
        "Group of Traditional Buildings",
        "Other",
    ]

    PROPERTY_CATEGORIES = [
        "National",
        "Metropolitan",
        "Ward",
        "Municipal",
        "Prefectural",
        "Registered",
        "Other",
    ]

    # Maximum capture drafts per registration
    MAX_CAPTURES = 10

    assert len(set(PROPERTY_TYPES)) == len(PROPERTY_TYPES)
    assert len(set(PROPERTY_CATEGORIES)) == len(PROPERTY_CATEGORIES)
