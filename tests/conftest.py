"""Shared pytest fixtures for heritage_atlas tests.

Provides a recording fake requests.Session, response builders and reusable
cultural property data.

COORDINATES:
    Test entities sit around Asakusa, Tokyo (35.71N, 139.79E) so that every
    "valid" location is well inside WGS84 range and far from the (0, 0)
    unset sentinel.
"""

import json
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from heritage_atlas.core.http import HttpClient
from heritage_atlas.model.geo_entity import EntityImage, GeoEntity
from heritage_atlas.model.media_capture import MediaCapture
from heritage_atlas.ui.base_style import ViewMode
from heritage_atlas.ui.feature_sync import FeatureSynchronizer
from heritage_atlas.ui.interaction import InteractionController, PopupStateMachine
from heritage_atlas.ui.map_renderer import MapRenderer

BASE_URL = "http://api.test"


# =============================================================================
# HTTP FAKES
# =============================================================================


def make_response(
    status: int = 200,
    body: Any = None,
    text: Optional[str] = None,
    content_type: str = "application/json",
) -> requests.Response:
    """Real requests.Response with a JSON (or text) body."""
    response = requests.Response()
    response.status_code = status
    response.url = BASE_URL
    if text is not None:
        response._content = text.encode("utf-8")
        response.headers["content-type"] = "text/plain"
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["content-type"] = content_type
    else:
        response._content = b""
    response.encoding = "utf-8"
    return response


@pytest.fixture
def fake_session() -> MagicMock:
    """Recording fake session: set .request.return_value / .side_effect, inspect .request.call_args."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(200, {})
    session.get.return_value = make_response(200, [])
    return session


@pytest.fixture
def client(fake_session: MagicMock) -> HttpClient:
    """HttpClient over the fake session, no token."""
    return HttpClient(base_url=BASE_URL, session=fake_session, timeout_s=5)


def last_request(session: MagicMock) -> tuple[str, str, dict[str, Any]]:
    """(method, url, kwargs) of the most recent session.request call."""
    args, kwargs = session.request.call_args
    return args[0], args[1], kwargs


# =============================================================================
# ENTITIES
# =============================================================================


def make_capture(capture_id: int, entity_id: Optional[int] = None, title: Optional[str] = None) -> MediaCapture:
    return MediaCapture(
        id=capture_id,
        url=f"https://lumalabs.ai/capture/{capture_id:04d}-splat",
        title=title,
        entity_id=entity_id,
    )


def make_entity(
    entity_id: int,
    lat: float = 35.7148,
    lon: float = 139.7967,
    capture_ids: tuple[int, ...] = (),
    image: Optional[str] = None,
    name: Optional[str] = None,
) -> GeoEntity:
    return GeoEntity(
        id=entity_id,
        name=name or f"Property {entity_id}",
        address="東京都台東区浅草2-3-1",
        latitude=lat,
        longitude=lon,
        type="Tangible Cultural Property",
        captures=[make_capture(c, entity_id=entity_id) for c in capture_ids],
        images=[EntityImage(id=entity_id, image=image)] if image else [],
    )


@pytest.fixture
def entities_mixed() -> list[GeoEntity]:
    """Three mappable entities (one with capture 10) plus two unmappable ones.

    - 1: Senso-ji, no captures
    - 2: Kaminarimon, capture 10
    - 3: Asakusa Shrine, captures 20 and 21
    - 4: (0, 0) unset location -> skipped
    - 5: NaN latitude -> skipped
    """
    return [
        make_entity(1, 35.7148, 139.7967, name="Senso-ji"),
        make_entity(2, 35.7112, 139.7963, capture_ids=(10,), name="Kaminarimon"),
        make_entity(3, 35.7153, 139.7975, capture_ids=(20, 21), name="Asakusa Shrine"),
        make_entity(4, 0.0, 0.0, name="Unset location"),
        make_entity(5, float("nan"), 139.79, name="Broken latitude"),
    ]


# =============================================================================
# MAP ENGINE
# =============================================================================


@pytest.fixture
def renderer_2d() -> MapRenderer:
    """Uninitialized 2D renderer."""
    return MapRenderer(view_mode=ViewMode.MAP_2D)


@pytest.fixture
def map_stack(renderer_2d: MapRenderer) -> tuple[MapRenderer, FeatureSynchronizer, InteractionController]:
    """Loaded 2D renderer with synchronizer and controller bound on load (no st.rerun)."""
    synchronizer = FeatureSynchronizer(renderer_2d)
    machine, _ = PopupStateMachine.create(add_ui_listener=False)
    controller = InteractionController(synchronizer, machine)
    renderer_2d.initialize(
        "map_2d_test",
        center=(35.7148, 139.7967),
        on_load=[synchronizer.on_load, controller.on_load],
    )
    return renderer_2d, synchronizer, controller
