"""Core searchbridge data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple


class FieldType(str, Enum):
    """Field types understood by the schema generator."""

    STRING = "string"
    TEXT = "text"
    DATE = "date"
    LONG = "long"
    FLOAT = "float"
    CURRENCY = "currency"
    # Legacy shorthands, expanded by the field config resolver
    KEYWORD = "keyword"
    UNSTORED = "unstored"
    UNINDEXED = "unindexed"
    # Backend types emitted by inference and the synthetic fields
    TEXT_WS = "text_ws"
    TEXT_EN_SPLITTING = "text_en_splitting"
    URL = "url"


@dataclass(slots=True)
class FieldConfig:
    """Projection rule for one source field of an indexable class.

    ``stored``, ``indexed``, ``multiple`` and ``type`` stay ``None`` until the
    schema generator applies its defaults.
    """

    source: str
    name: Optional[str] = None
    type: Optional[FieldType] = None
    stored: Optional[bool] = None
    indexed: Optional[bool] = None
    multiple: Optional[bool] = None
    content_filter: Optional[str] = None
    filter_func: Optional[Callable[[Any], Any]] = field(default=None, repr=False, compare=False)

    @property
    def target(self) -> str:
        return self.name or self.source


class ObjectRef(NamedTuple):
    class_name: str
    object_id: Any


@dataclass(slots=True)
class IndexDocument:
    """Flattened representation of one object, in wire order."""

    id: str
    fields: List[Tuple[str, str]] = field(default_factory=list)

    def add(self, name: str, value: str) -> None:
        self.fields.append((name, value))

    def values(self, name: str) -> List[str]:
        return [value for key, value in self.fields if key == name]

    def names(self) -> List[str]:
        return [key for key, _ in self.fields]


@dataclass(slots=True)
class QueryRequest:
    text: str = ""
    sort: Optional[Tuple[str, str]] = None
    offset: int = 0
    limit: Optional[int] = None
    extra_params: List[str] = field(default_factory=list)


@dataclass(slots=True)
class QueryResult:
    hits: List[ObjectRef] = field(default_factory=list)
    total_hits: int = 0
    facets: Dict[str, Dict[str, int]] = field(default_factory=dict)
    objects: List[Any] = field(default_factory=list, repr=False)


@dataclass(slots=True)
class ReindexCursor:
    """Persisted progress of a bulk reindex job."""

    pending_classes: List[str] = field(default_factory=list)
    current_class: Optional[str] = None
    last_seen_id: int = 0
    steps_done: int = 0
    steps_total: int = 0

    @property
    def is_done(self) -> bool:
        return not self.pending_classes and self.current_class is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pending_classes": list(self.pending_classes),
            "current_class": self.current_class,
            "last_seen_id": self.last_seen_id,
            "steps_done": self.steps_done,
            "steps_total": self.steps_total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReindexCursor":
        return cls(
            pending_classes=list(data.get("pending_classes") or []),
            current_class=data.get("current_class"),
            last_seen_id=int(data.get("last_seen_id") or 0),
            steps_done=int(data.get("steps_done") or 0),
            steps_total=int(data.get("steps_total") or 0),
        )
