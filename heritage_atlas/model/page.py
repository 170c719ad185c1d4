"""Page - Paginated list response ({count, next, previous, results})."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated backend listing."""

    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[T] = field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[Any], parse: Callable[[dict[str, Any]], T]) -> "Page[T]":
        """Parse a page, tolerating endpoints that return a bare JSON array."""
        if isinstance(data, list):
            items = [parse(item) for item in data]
            return cls(count=len(items), results=items)
        results = [parse(item) for item in data.get("results", [])]
        return cls(
            count=int(data.get("count", len(results))),
            next=data.get("next"),
            previous=data.get("previous"),
            results=results,
        )
