"""Core data types shared by the catalog pipeline and the match engine."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

# Serialized field order. Also the alphabetical order, so sorted-key JSON
# output keeps it.
RECORD_FIELDS: tuple[str, ...] = ("apiName", "changeType", "description")


@dataclass(frozen=True, slots=True)
class DeprecationRecord:
    """One deprecated/removed/changed API from a release-notes catalog."""

    api_name: str
    change_type: str    # "Deprecated", "Removed", "Changed", ...
    description: str

    def __post_init__(self) -> None:
        if not self.api_name:
            raise ValueError("api_name must be non-empty")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> DeprecationRecord:
        """Build a record from its JSON form.

        Raises:
            ValueError: any of the three fields is missing or not a string,
                or ``apiName`` is blank.
        """
        values: list[str] = []
        for key in RECORD_FIELDS:
            val = raw.get(key)
            if not isinstance(val, str):
                raise ValueError(f"field {key!r} must be a string, got {type(val).__name__}")
            values.append(val)
        api_name, change_type, description = values
        if not api_name.strip():
            raise ValueError("field 'apiName' must be non-empty")
        return cls(api_name=api_name, change_type=change_type, description=description)

    def to_dict(self) -> dict[str, str]:
        return {
            "apiName": self.api_name,
            "changeType": self.change_type,
            "description": self.description,
        }


type Catalog = tuple[DeprecationRecord, ...]


def catalog_from_json(payload: Any) -> Catalog:
    """Validate a decoded JSON payload into a catalog (strict, all-or-nothing)."""
    if not isinstance(payload, list):
        raise ValueError(f"catalog must be a JSON array, got {type(payload).__name__}")
    records: list[DeprecationRecord] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"element {idx} is not an object")
        try:
            records.append(DeprecationRecord.from_dict(item))
        except ValueError as exc:
            raise ValueError(f"element {idx}: {exc}") from exc
    return tuple(records)


def catalog_to_json(catalog: Sequence[DeprecationRecord]) -> list[dict[str, str]]:
    return [record.to_dict() for record in catalog]


@dataclass(frozen=True, slots=True)
class Section:
    """A heading and the text that follows it up to the next heading."""

    heading: str
    body: str

    def render(self) -> str:
        """Prompt form of the section."""
        return f"HEADING: {self.heading}\nCONTENT: {self.body}"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """One occurrence of a catalog API name in a document.

    ``start``/``end`` form a half-open character range into the scanned text.
    """

    api_name: str
    change_type: str
    description: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid range [{self.start}, {self.end})")

    @property
    def label(self) -> str:
        """Inline decoration label."""
        return f"[{self.change_type}] {self.api_name}"

    @property
    def message(self) -> str:
        return f'The API "{self.api_name}" is marked as {self.change_type}. {self.description}'
