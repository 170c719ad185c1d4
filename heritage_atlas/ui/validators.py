"""Validators - Input validation for the registration forms.

Validators return Optional[Message]:
- None if valid
- A Message object if invalid (caller displays it)

No exceptions for expected validation failures.
"""

import math

from heritage_atlas.constants import MapConfig
from heritage_atlas.model.drafts import CaptureDraft
from heritage_atlas.model.message import (
    CaptureUrlRequiredMessage,
    FieldRequiredMessage,
    LocationRequiredMessage,
    Message,
)


def validate_required_text(value: str | None, field_label: str) -> Message | None:
    """Validate that a required text field is not blank.

    Returns:
        None if valid, FieldRequiredMessage if blank or whitespace only.
    """
    if value is None or not str(value).strip():
        return FieldRequiredMessage(field_label=field_label)
    return None


def validate_location(latitude: float | None, longitude: float | None) -> Message | None:
    """Validate that a location has been set.

    0.0 is the form's "unset" value, so a zero latitude or longitude is
    rejected along with non-finite and out-of-range values.

    Returns:
        None if valid, LocationRequiredMessage otherwise.
    """
    for value, (low, high) in ((latitude, MapConfig.LAT_RANGE), (longitude, MapConfig.LON_RANGE)):
        if value is None:
            return LocationRequiredMessage()
        try:
            number = float(value)
        except (TypeError, ValueError):
            return LocationRequiredMessage()
        if not math.isfinite(number) or number == 0.0 or not low <= number <= high:
            return LocationRequiredMessage()
    return None


def validate_capture_draft(draft: CaptureDraft, index: int) -> Message | None:
    """Validate that a capture draft has a URL.

    Returns:
        None if valid, CaptureUrlRequiredMessage if the URL is blank.
    """
    if not draft.has_url:
        return CaptureUrlRequiredMessage(index=index)
    return None
