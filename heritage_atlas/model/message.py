"""Message - User-facing messages for the Heritage Atlas UI.

Architecture:
- Inline messages (Message): st.info/st.warning/st.error blocks that persist
  in a panel until replaced (loading status, validation, form errors)
- Toasts (ToastMessage): transient notifications for completed actions

Design Principles:
- Maximum ONE status message per panel location at any time
- INFO = status/loading, WARNING = what to do next, ERROR = failures
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status/loading
    WARNING = "warning"  # Yellow - action instructions
    ERROR = "error"  # Red - failures


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for user-facing messages displayed inline.

    These messages are rendered as st.info/st.warning/st.error blocks that persist
    in the UI until replaced.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for display in Streamlit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def display(self) -> None:
        """Render this message using the appropriate Streamlit function."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient popup notifications.

    Good for: confirmations of completed actions
    Bad for: validation errors, status displays
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for the toast notification."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon to show in toast. Override in subclasses."""
        raise NotImplementedError

    def display(self) -> None:
        """Show this message as a toast notification and log it."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class RegistrationCompleteMessage(ToastMessage):
    """Cultural property and its captures were saved."""

    name: str
    capture_count: int

    @property
    def icon(self) -> str:
        return "🏯"

    @property
    def message(self) -> str:
        captures = f" with {self.capture_count} 3D capture(s)" if self.capture_count else ""
        return f"Registered {self.name}{captures}"


@dataclass(frozen=True)
class SignedInMessage(ToastMessage):
    username: str

    @property
    def icon(self) -> str:
        return "👋"

    @property
    def message(self) -> str:
        return f"Signed in as {self.username}"


@dataclass(frozen=True)
class SignedOutMessage(ToastMessage):
    @property
    def icon(self) -> str:
        return "👋"

    @property
    def message(self) -> str:
        return "Signed out"


@dataclass(frozen=True)
class LocationSetMessage(ToastMessage):
    """Location picked on the picker map or from a search result."""

    lat: float
    lon: float

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        return f"Location set to ({self.lat:.5f}, {self.lon:.5f})"


# =============================================================================
# INLINE MESSAGES - Status (BLUE)
# =============================================================================


@dataclass(frozen=True)
class LoadingEntitiesMessage(Message):
    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return "🗺️ **Loading cultural properties**..."


@dataclass(frozen=True)
class NoEntitiesMessage(Message):
    """Loaded collection was empty (previous markers stay on the map)."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return "No cultural properties match the current filters."


@dataclass(frozen=True)
class EntityCountMessage(Message):
    total: int
    with_captures: int

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"🏯 **{self.total}** cultural properties, **{self.with_captures}** with 3D captures"


@dataclass(frozen=True)
class NoSearchResultsMessage(Message):
    query: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"No places found for '{self.query}'."


# =============================================================================
# INLINE MESSAGES - Instructions (YELLOW)
# =============================================================================


@dataclass(frozen=True)
class SignInRequiredMessage(Message):
    action: str  # e.g., "register a cultural property"

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"🔒 Please sign in to {self.action}."


@dataclass(frozen=True)
class FieldRequiredMessage(Message):
    """A required form field is blank."""

    field_label: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"{self.field_label} is required."


@dataclass(frozen=True)
class LocationRequiredMessage(Message):
    """Latitude/longitude missing or outside WGS84 range."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return "📍 Set a location: search an address or click the map."


@dataclass(frozen=True)
class CaptureUrlRequiredMessage(Message):
    index: int  # 0-indexed

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"3D capture {self.index + 1}: URL is required."


# =============================================================================
# INLINE MESSAGES - Errors (RED)
# =============================================================================


@dataclass(frozen=True)
class ActionFailedMessage(Message):
    """An action (load, submit, sign-in, search) failed."""

    action: str  # e.g., "Registration"
    error: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.ERROR

    @property
    def message(self) -> str:
        return f"**{self.action} failed**: {self.error}"
