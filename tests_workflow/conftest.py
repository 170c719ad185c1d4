"""Shared pytest fixtures for heritage_atlas workflow tests.

Provides an in-memory backend (FakeBackend) served through a fake
requests.Session, so workflows run the real HttpClient, repositories,
map engine and state machines end to end without network access.
Minimal fixtures: anything a single test file needs stays in that file.
"""

import json
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import urlparse

import pytest
import requests

from heritage_atlas.core.http import HttpClient
from heritage_atlas.repositories import AuthRepository, AuthService, GeoEntityRepository, MediaCaptureRepository
from heritage_atlas.ui import MapView, ViewMode
from heritage_atlas.ui.wizard import RegistrationDraft, RegistrationWizard

BASE_URL = "http://backend.test"

# Type alias for the registration fixture return value
WizardAndDraft = tuple[RegistrationWizard, RegistrationDraft]


def _response(status: int, body: Any = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.headers["content-type"] = "application/json"
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return response


class FakeBackend:
    """In-memory cultural property / movie backend.

    Handles the subset of the REST API the workflows use:
    GET/POST cultural_property, POST movie, POST signin. Set fail_movie_posts
    to make capture creation fail with 500.
    """

    def __init__(self) -> None:
        self.entities: dict[int, dict[str, Any]] = {}
        self.movies: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.fail_movie_posts = False
        self.requests: list[tuple[str, str]] = []
        self.auth_headers: list[str | None] = []

    def _new_id(self) -> int:
        new_id = self.next_id
        self.next_id += 1
        return new_id

    def add_entity(self, name: str, lat: float, lon: float, capture_urls: tuple[str, ...] = ()) -> int:
        entity_id = self._new_id()
        self.entities[entity_id] = {
            "id": entity_id,
            "name": name,
            "address": "東京都台東区",
            "latitude": f"{lat:.6f}",
            "longitude": f"{lon:.6f}",
            "type": "Tangible Cultural Property",
        }
        for url in capture_urls:
            movie_id = self._new_id()
            self.movies[movie_id] = {"id": movie_id, "url": url, "cultural_property": entity_id}
        return entity_id

    def _entity_json(self, entity_id: int) -> dict[str, Any]:
        movies = [m for m in self.movies.values() if m["cultural_property"] == entity_id]
        return {**self.entities[entity_id], "movies": movies, "images": []}

    def handle(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        path = urlparse(url).path
        self.requests.append((method, path))
        self.auth_headers.append((kwargs.get("headers") or {}).get("Authorization"))
        body = json.loads(kwargs["data"]) if kwargs.get("data") else {}

        if path == "/api/v1/auth/signin/" and method == "POST":
            if body.get("password") != "secret":
                return _response(401, {"detail": "Invalid credentials"})
            return _response(200, {"token": "tok", "user": {"id": 1, "username": body["username"]}})

        if path == "/cp_api/cultural_property/" and method == "GET":
            params = kwargs.get("params") or {}
            results = [self._entity_json(i) for i in self.entities]
            if params.get("has_movies") == "true":
                results = [r for r in results if r["movies"]]
            return _response(200, {"count": len(results), "next": None, "previous": None, "results": results})

        if path == "/cp_api/cultural_property/" and method == "POST":
            entity_id = self._new_id()
            self.entities[entity_id] = {**body, "id": entity_id}
            return _response(201, self._entity_json(entity_id))

        if path == "/cp_api/movie/" and method == "POST":
            if self.fail_movie_posts:
                return _response(500, {"detail": "storage unavailable"})
            movie_id = self._new_id()
            self.movies[movie_id] = {**body, "id": movie_id}
            return _response(201, self.movies[movie_id])

        if path == "/cp_api/tag/" and method == "GET":
            return _response(200, [])

        return _response(404, {"detail": "Not found."})


@pytest.fixture
def backend() -> FakeBackend:
    """Backend seeded with Senso-ji (no capture) and Kaminarimon (one capture)."""
    backend = FakeBackend()
    backend.add_entity("Senso-ji", 35.7148, 139.7967)
    backend.add_entity("Kaminarimon", 35.7112, 139.7963, capture_urls=("https://lumalabs.ai/capture/kaminarimon",))
    return backend


@pytest.fixture
def client(backend: FakeBackend) -> HttpClient:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = backend.handle
    return HttpClient(base_url=BASE_URL, session=session)


@pytest.fixture
def entity_repo(client: HttpClient) -> GeoEntityRepository:
    return GeoEntityRepository(client)


@pytest.fixture
def capture_repo(client: HttpClient) -> MediaCaptureRepository:
    return MediaCaptureRepository(client)


@pytest.fixture
def auth(client: HttpClient) -> AuthService:
    service = AuthService(repository=AuthRepository(client))
    client.token_provider = service.token
    return service


@pytest.fixture
def map_view() -> MapView:
    """Mounted 2D map view without Streamlit reruns."""
    view = MapView.create(ViewMode.MAP_2D, add_ui_listener=False)
    view.mount("map_2d_0", center=(35.7148, 139.7967))
    return view


@pytest.fixture
def wizard_and_draft() -> WizardAndDraft:
    return RegistrationWizard.create(add_ui_listener=False)
