"""Core types."""

from __future__ import annotations
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Literal

EntityType = Literal["person", "company", "location", "email", "phone", "identifier"]
ReplacementStyle = Literal["french", "neutral", "labels"]

ENTITY_TYPES: tuple[str, ...] = ("person", "company", "location", "email", "phone", "identifier")
REPLACEMENT_STYLES: tuple[str, ...] = ("french", "neutral", "labels")


def new_entity_id() -> str:
    return str(uuid.uuid4())


def check_entity_type(entity_type: str) -> str:
    if entity_type not in ENTITY_TYPES:
        raise ValueError(f"Unknown entity type: {entity_type!r}")
    return entity_type


@dataclass(frozen=True, slots=True)
class DetectedEntity:
    """A single detected PII span."""
    id: str
    type: str              # one of ENTITY_TYPES
    value: str             # raw substring
    start: int             # half-open span, -1 when the entity has no span
    end: int

    @property
    def has_span(self) -> bool:
        return self.start >= 0 and self.end >= self.start

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class AnonymizedEntity(DetectedEntity):
    """A detected (or manually added) entity with its replacement."""
    replacement: str
    manual: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnonymizedEntity":
        """Build an entity from a plain dict, filling in missing fields.

        A missing replacement becomes "" which the assigner treats as
        "not found".  Null or non-numeric offsets become -1.  Raises
        ValueError for anything that is not a dict.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Entity must be an object, got {type(data).__name__}")
        return cls(
            id=str(data.get("id") or new_entity_id()),
            type=check_entity_type(data.get("type") or ""),
            value=str(data.get("value") or ""),
            start=_offset(data.get("start")),
            end=_offset(data.get("end")),
            replacement=str(data.get("replacement") or ""),
            manual=bool(data.get("manual")),
        )


def _offset(raw: Any) -> int:
    if isinstance(raw, bool):
        return -1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return -1
