"""HTTP client for the Heritage Atlas REST backend.

Wraps a requests.Session with the conventions every repository relies on:
- JSON request bodies (multipart when files are uploaded)
- Token authentication header when a token provider yields a token
- Non-2xx responses raised as ApiError carrying the decoded body
- Transport failures raised as ApiError with status 0
"""

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional

import requests

from heritage_atlas.constants import ApiConfig

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]

NETWORK_ERROR_MESSAGE = "A network error occurred"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class ApiError(Exception):
    """Backend or transport error.

    Attributes:
        status: HTTP status code, 0 for network/transport failures
        data: Decoded error body (dict for JSON bodies, str otherwise)
    """

    def __init__(self, status: int, data: Any, message: str = "API Error") -> None:
        super().__init__(message)
        self.status = status
        self.data = data

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    def get_error_message(self) -> str:
        """Extract a readable message from the error body.

        Tried in order: plain string body, non_field_errors, detail, message,
        error, per-field errors ("field: a, b" lines), JSON dump of the body.
        """
        if isinstance(self.data, str):
            return self.data

        if isinstance(self.data, dict):
            non_field = self.data.get("non_field_errors")
            if isinstance(non_field, list) and non_field:
                return ", ".join(str(e) for e in non_field)

            for key in ("detail", "message", "error"):
                if self.data.get(key):
                    return str(self.data[key])

            field_errors = []
            for field, errors in self.data.items():
                if isinstance(errors, list):
                    field_errors.append(f"{field}: {', '.join(str(e) for e in errors)}")
                elif isinstance(errors, str):
                    field_errors.append(f"{field}: {errors}")
            if field_errors:
                return "\n".join(field_errors)

            return json.dumps(self.data, ensure_ascii=False)

        if isinstance(self.data, list):
            return json.dumps(self.data, ensure_ascii=False)

        return UNKNOWN_ERROR_MESSAGE

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, data={self.data!r})"


def build_query(params: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Query parameters with None and "" dropped and booleans lowercased."""
    if not params:
        return {}
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def _is_json(response: requests.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


class HttpClient:
    """Thin JSON client over requests.Session.

    Example:
        client = HttpClient(token_provider=lambda: st.session_state.auth.token)
        page = client.get("/cp_api/cultural_property/", params={"limit": 10})
    """

    def __init__(
        self,
        base_url: str = ApiConfig.BACKEND_HOST,
        token_provider: Optional[TokenProvider] = None,
        session: Optional[requests.Session] = None,
        timeout_s: float = ApiConfig.TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.session = session if session is not None else requests.Session()
        self.timeout_s = timeout_s

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, has_files: bool, token: Optional[str]) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if not has_files:
            headers["Content-Type"] = "application/json"
        auth_token = token if token is not None else (self.token_provider() if self.token_provider else None)
        if auth_token:
            headers["Authorization"] = f"{ApiConfig.TOKEN_SCHEME} {auth_token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        files: Optional[Mapping[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to base_url (or an absolute URL)
            params: Query parameters (filtered by build_query)
            data: JSON body, or form fields when files are given
            files: Multipart file uploads
            token: Explicit token overriding the token provider

        Returns:
            Decoded JSON, or {} for 204 and non-JSON success responses.

        Raises:
            ApiError: Non-2xx status (status, body) or transport failure (status 0)
        """
        url = self.url_for(path)
        has_files = bool(files)
        kwargs: dict[str, Any] = {
            "params": build_query(params),
            "headers": self._headers(has_files=has_files, token=token),
            "timeout": self.timeout_s,
        }
        if has_files:
            kwargs["files"] = files
            if data is not None:
                kwargs["data"] = data
        elif data is not None:
            kwargs["data"] = json.dumps(data)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"[HTTP] {method} {url} failed: {e}")
            raise ApiError(0, {"message": NETWORK_ERROR_MESSAGE}, "Network Error") from e

        if not response.ok:
            if _is_json(response):
                try:
                    error_data: Any = response.json()
                except ValueError:
                    error_data = response.text
            else:
                error_data = response.text
            logger.warning(f"[HTTP] {method} {url} -> {response.status_code}")
            raise ApiError(response.status_code, error_data, f"HTTP {response.status_code}")

        if response.status_code == 204 or not _is_json(response):
            return {}

        logger.debug(f"[HTTP] {method} {url} -> {response.status_code}")
        return response.json()

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None, token: Optional[str] = None) -> Any:
        return self.request("GET", path, params=params, token=token)

    def post(
        self,
        path: str,
        data: Any = None,
        files: Optional[Mapping[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Any:
        return self.request("POST", path, data=data, files=files, token=token)

    def put(self, path: str, data: Any = None, files: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("PUT", path, data=data, files=files)

    def patch(self, path: str, data: Any = None, files: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("PATCH", path, data=data, files=files)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
