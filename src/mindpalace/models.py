"""Data models for generated memory aids and their archive entries."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Method(Enum):
    """Mnemonic technique requested for a generation."""

    PALACE = "PALACE"
    MNEMONIC = "MNEMONIC"
    FAMILY = "FAMILY"
    OBJECTS = "OBJECTS"

    @property
    def label(self) -> str:
        """Short display name."""
        return _METHOD_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> Method:
        """Parse a method from its name or label, case-insensitively.

        Raises:
            ValueError: If the value names no method.
        """
        needle = value.strip().upper()
        for method in cls:
            if needle in (method.value, method.label.upper()):
                return method
        raise ValueError(f"Unknown method: {value!r}")


_METHOD_LABELS = {
    Method.PALACE: "Palace",
    Method.MNEMONIC: "Mnemonic",
    Method.FAMILY: "Family",
    Method.OBJECTS: "Objects",
}


@dataclass(frozen=True)
class MemoryPoint:
    """One fact mapped to a mnemonic device.

    Attributes:
        content: The literal fact to remember.
        association: Short anchor label.
        visual_prompt: Description of the imagined scene.
        story: Narrative connecting the fact to the anchor.
    """

    content: str
    association: str
    visual_prompt: str
    story: str

    def to_dict(self) -> dict[str, str]:
        return {
            "content": self.content,
            "association": self.association,
            "visualPrompt": self.visual_prompt,
            "story": self.story,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryPoint:
        """Create from the JSON shape.

        Raises:
            KeyError: If a field is missing.
            TypeError: If the point or a field has the wrong type.
            ValueError: If a field is blank.
        """
        _require_object(data, "point")
        return cls(
            content=_require_text(data, "content"),
            association=_require_text(data, "association"),
            visual_prompt=_require_text(data, "visualPrompt"),
            story=_require_text(data, "story"),
        )


def _require_object(data: Any, name: str) -> None:
    if not isinstance(data, dict):
        raise TypeError(f"{name} must be an object, got {type(data).__name__}")


def _require_text(data: dict[str, Any], key: str, allow_blank: bool = False) -> str:
    """Return ``data[key]`` if it is a string, non-blank unless allowed."""
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    if not allow_blank and not value.strip():
        raise ValueError(f"{key} must not be empty")
    return value


@dataclass(frozen=True)
class PalaceResult:
    """The full output of one generation.

    Points are kept as a tuple: their order is the recommended recall
    order and they are never modified once produced.
    """

    title: str
    method: Method
    summary: str
    points: tuple[MemoryPoint, ...] = ()
    slogan: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by the service and the archive."""
        data: dict[str, Any] = {
            "title": self.title,
            "method": self.method.value,
            "summary": self.summary,
            "points": [point.to_dict() for point in self.points],
        }
        if self.slogan:
            data["slogan"] = self.slogan
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        fallback_method: Method | None = None,
    ) -> PalaceResult:
        """Create from the JSON shape.

        Args:
            data: Decoded JSON object.
            fallback_method: Used when ``method`` is missing or unknown.

        Title and point fields must be non-blank strings. The summary must
        be a string but may be empty. A slogan that is not a non-blank
        string is treated as absent.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If ``data`` is not an object, ``points`` is not a
                list of objects, or a field is not a string.
            ValueError: If a required field is blank, or the method is
                unknown and no fallback is given.
        """
        _require_object(data, "result")
        raw_method = data.get("method")
        try:
            method = Method.parse(str(raw_method))
        except ValueError:
            if fallback_method is None:
                raise
            method = fallback_method

        raw_points = data["points"]
        if not isinstance(raw_points, list):
            raise TypeError("points must be a list")

        slogan = data.get("slogan")
        return cls(
            title=_require_text(data, "title"),
            method=method,
            summary=_require_text(data, "summary", allow_blank=True),
            points=tuple(MemoryPoint.from_dict(p) for p in raw_points),
            slogan=slogan if isinstance(slogan, str) and slogan.strip() else None,
        )


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ArchivedEntry:
    """A persisted generation result.

    Attributes:
        id: Unique id derived from the creation timestamp.
        title: Copy of ``data.title`` for list display.
        created_at: Creation time in epoch milliseconds.
        data: The archived result.
    """

    id: str
    title: str
    created_at: int
    data: PalaceResult

    @classmethod
    def create(cls, result: PalaceResult, created_at: int | None = None) -> ArchivedEntry:
        """Create a new entry for a freshly generated result."""
        stamp = now_ms() if created_at is None else created_at
        return cls(id=str(stamp), title=result.title, created_at=stamp, data=result)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArchivedEntry:
        _require_object(data, "entry")
        result = PalaceResult.from_dict(data["data"])
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or result.title),
            created_at=int(data["createdAt"]),
            data=result,
        )
