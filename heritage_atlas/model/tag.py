"""Tag - Free-form label attached to cultural properties."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Tag:
    """Tag record. Missing descriptions are normalized to an empty string."""

    id: int
    name: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        return cls(id=int(data["id"]), name=str(data.get("name", "")), description=data.get("description") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}
