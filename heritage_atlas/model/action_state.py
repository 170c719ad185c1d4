"""ActionState - Status of a long-running user action.

Used for wizard submission, sign-in, address search and entity loading so
the UI can show an inline spinner, error or success message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActionStatus(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class ActionState:
    """Mutable status holder; error is set only in ERROR."""

    status: ActionStatus = ActionStatus.IDLE
    error: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self.status == ActionStatus.IN_PROGRESS

    @property
    def failed(self) -> bool:
        return self.status == ActionStatus.ERROR

    @property
    def succeeded(self) -> bool:
        return self.status == ActionStatus.SUCCESS

    def start(self) -> None:
        self.status = ActionStatus.IN_PROGRESS
        self.error = None

    def fail(self, error: str) -> None:
        self.status = ActionStatus.ERROR
        self.error = error

    def succeed(self) -> None:
        self.status = ActionStatus.SUCCESS
        self.error = None

    def clear(self) -> None:
        self.status = ActionStatus.IDLE
        self.error = None
