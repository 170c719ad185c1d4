"""Tests for the HTTP client: query building, headers and error mapping."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from heritage_atlas.core.http import ApiError, HttpClient, build_query
from tests.conftest import BASE_URL, last_request, make_response


class TestBuildQuery:
    """Tests for query parameter filtering."""

    def test_drops_none_and_empty(self) -> None:
        """None and empty-string values are not sent."""
        assert build_query({"search": "", "tag_id": None, "limit": 10}) == {"limit": "10"}

    def test_lowercases_booleans(self) -> None:
        """Booleans are sent as true/false."""
        assert build_query({"has_movies": True, "x": False}) == {"has_movies": "true", "x": "false"}

    def test_empty_params(self) -> None:
        """None params give an empty dict."""
        assert build_query(None) == {}


class TestHttpClientRequest:
    """Tests for request construction and response decoding."""

    def test_get_joins_url_and_decodes_json(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Path is joined to the base URL and the JSON body returned."""
        fake_session.request.return_value = make_response(200, {"results": []})

        assert client.get("/cp_api/cultural_property/", params={"limit": 5}) == {"results": []}

        method, url, kwargs = last_request(fake_session)
        assert method == "GET"
        assert url == f"{BASE_URL}/cp_api/cultural_property/"
        assert kwargs["params"] == {"limit": "5"}
        assert kwargs["timeout"] == 5

    def test_post_sends_json_body(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Body is JSON-encoded with a JSON content type."""
        fake_session.request.return_value = make_response(201, {"id": 7})

        client.post("/cp_api/movie/", data={"url": "https://x"})

        _, _, kwargs = last_request(fake_session)
        assert json.loads(kwargs["data"]) == {"url": "https://x"}
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_no_content_returns_empty_dict(self, client: HttpClient, fake_session: MagicMock) -> None:
        """204 responses decode to {}."""
        fake_session.request.return_value = make_response(204)

        assert client.delete("/cp_api/movie/1/") == {}

    def test_token_provider_sets_authorization(self, fake_session: MagicMock) -> None:
        """A token from the provider is sent with the Token scheme."""
        client = HttpClient(base_url=BASE_URL, session=fake_session, token_provider=lambda: "abc")

        client.get("/api/v1/tags/")

        _, _, kwargs = last_request(fake_session)
        assert kwargs["headers"]["Authorization"] == "Token abc"

    def test_no_token_no_authorization(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Anonymous requests carry no Authorization header."""
        client.get("/api/v1/tags/")

        _, _, kwargs = last_request(fake_session)
        assert "Authorization" not in kwargs["headers"]

    def test_absolute_url_used_as_is(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Absolute URLs (pagination "next" links) bypass the base URL."""
        client.get("https://other.example/page2")

        _, url, _ = last_request(fake_session)
        assert url == "https://other.example/page2"


class TestHttpClientErrors:
    """Tests for ApiError mapping."""

    def test_non_2xx_raises_with_json_body(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Error responses raise ApiError carrying status and decoded body."""
        fake_session.request.return_value = make_response(400, {"name": ["This field is required."]})

        with pytest.raises(ApiError) as exc_info:
            client.post("/cp_api/cultural_property/", data={})

        assert exc_info.value.status == 400
        assert exc_info.value.data == {"name": ["This field is required."]}

    def test_non_json_error_body_is_text(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Non-JSON error bodies are kept as text."""
        fake_session.request.return_value = make_response(502, text="Bad Gateway")

        with pytest.raises(ApiError) as exc_info:
            client.get("/cp_api/cultural_property/")

        assert exc_info.value.data == "Bad Gateway"
        assert exc_info.value.is_server_error

    def test_transport_failure_is_status_zero(self, client: HttpClient, fake_session: MagicMock) -> None:
        """Connection errors become ApiError with status 0."""
        fake_session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ApiError) as exc_info:
            client.get("/cp_api/cultural_property/")

        assert exc_info.value.status == 0
        assert exc_info.value.is_network_error


class TestApiErrorMessage:
    """Tests for ApiError.get_error_message extraction order."""

    def test_string_body(self) -> None:
        """Plain string bodies are returned verbatim."""
        assert ApiError(500, "boom").get_error_message() == "boom"

    def test_non_field_errors_first(self) -> None:
        """non_field_errors wins over detail."""
        error = ApiError(400, {"non_field_errors": ["a", "b"], "detail": "d"})
        assert error.get_error_message() == "a, b"

    def test_detail(self) -> None:
        """detail is used when present."""
        assert ApiError(404, {"detail": "Not found."}).get_error_message() == "Not found."

    def test_field_errors(self) -> None:
        """Field errors are listed one per line."""
        error = ApiError(400, {"name": ["required"], "address": "too long"})
        assert error.get_error_message() == "name: required\naddress: too long"

    def test_unknown_body(self) -> None:
        """Bodies of no known shape fall back to the generic text."""
        assert ApiError(500, None).get_error_message() == "An unknown error occurred"
