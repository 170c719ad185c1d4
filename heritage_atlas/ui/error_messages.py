"""User-facing text for backend errors.

sign_in_error_messages() maps a sign-in failure to form messages keyed by
"submit" (form-level) and the field names "username" / "password".
describe_api_error() is the single-string variant used by the other forms.
"""

import logging
from typing import Any

from heritage_atlas.core.http import ApiError

logger = logging.getLogger(__name__)

CONNECTION_ERROR = "A network error occurred. Please check your internet connection."
INVALID_INPUT = "Some of your input is invalid. Please check it and try again."
CREDENTIALS_INCORRECT = "The email/username or password is incorrect."
ACCESS_DENIED = "Access denied. Your account may have been deactivated."
TOO_MANY_ATTEMPTS = "Too many sign-in attempts. Please wait a while and try again."
TOO_MANY_REQUESTS = "Too many requests. Please wait a while and try again."
SERVER_ERROR = "A server error occurred. Please try again later."
UNEXPECTED_ERROR = "An unexpected error occurred."

SIGN_IN_FIELDS = ("username", "password")
SIGN_UP_FIELDS = ("username", "email", "password", "password_confirm", "name")


def _stringify(value: Any) -> str:
    """Error detail entries can be plain strings or {"string"/"message": ...} objects."""
    if isinstance(value, dict):
        return str(value.get("string") or value.get("message") or value)
    return str(value)


def _join(values: Any) -> str:
    if isinstance(values, list):
        return ", ".join(_stringify(v) for v in values)
    return _stringify(values)


def _bad_request_messages(data: Any, fields: tuple[str, ...]) -> dict[str, str]:
    if isinstance(data, dict):
        for key in ("non_field_errors", "nonFieldErrors"):
            errors = data.get(key)
            if isinstance(errors, list) and errors:
                return {"submit": _join(errors)}
        for key in ("detail", "error", "message"):
            if key in data:
                return {"submit": str(data[key])}
        field_messages = {name: _join(data[name]) for name in fields if data.get(name)}
        if field_messages:
            return field_messages
    if isinstance(data, str) and data:
        return {"submit": data}
    return {"submit": INVALID_INPUT}


def sign_in_error_messages(error: Exception | None) -> dict[str, str]:
    """Map a sign-in failure to form messages.

    Returns:
        Dict with a "submit" message, or per-field "username"/"password"
        messages for field-level 400 responses.
    """
    if isinstance(error, ApiError):
        status = error.status
        if status == 0:
            return {"submit": CONNECTION_ERROR}
        if status == 400:
            return _bad_request_messages(error.data, SIGN_IN_FIELDS)
        if status == 401:
            return {"submit": CREDENTIALS_INCORRECT}
        if status == 403:
            return {"submit": ACCESS_DENIED}
        if status == 429:
            return {"submit": TOO_MANY_ATTEMPTS}
        if status >= 500:
            return {"submit": SERVER_ERROR}
        logger.warning(f"[AUTH] Unmapped sign-in error status {status}")
        return {"submit": error.get_error_message()}

    if error is not None:
        return {"submit": str(error) or UNEXPECTED_ERROR}
    return {"submit": UNEXPECTED_ERROR}


def describe_api_error(error: Exception) -> str:
    """One-line message for any repository failure."""
    if not isinstance(error, ApiError):
        return str(error) or UNEXPECTED_ERROR
    if error.status == 0:
        return CONNECTION_ERROR
    if error.status == 401:
        return "Your session has expired. Please sign in again."
    if error.status == 403:
        return "You do not have permission to do this."
    if error.status == 404:
        return "The requested item was not found."
    if error.status == 429:
        return TOO_MANY_REQUESTS
    if error.status >= 500:
        return SERVER_ERROR
    return error.get_error_message()


def sign_up_error_messages(error: Exception | None) -> dict[str, str]:
    """Map a sign-up failure to form messages ("submit" or per-field keys)."""
    if isinstance(error, ApiError) and error.status == 400:
        return _bad_request_messages(error.data, SIGN_UP_FIELDS)
    if isinstance(error, ApiError) and error.status == 429:
        return {"submit": TOO_MANY_REQUESTS}
    if error is None:
        return {"submit": UNEXPECTED_ERROR}
    return {"submit": describe_api_error(error)}
