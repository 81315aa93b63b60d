"""Contracts for the host object store the bridge indexes.

The host application owns its objects and their relationships; searchbridge
only talks to it through the protocols below.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from searchbridge.extraction.extractors import TextExtractor
    from searchbridge.fields.config import FieldRegistry


class RelationKind(str, Enum):
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


@dataclass(frozen=True, slots=True)
class Relation:
    """Named relationship declared on a host class."""

    name: str
    kind: RelationKind

    @property
    def is_multiple(self) -> bool:
        return self.kind is not RelationKind.ONE_TO_ONE


@runtime_checkable
class Indexable(Protocol):
    """Minimal shape of an object that can be indexed."""

    id: Any
    class_name: str


@runtime_checkable
class FileLike(Protocol):
    """Object backed by a file on disk whose text can be extracted."""

    file_path: Path
    is_container: bool


class ObjectStore(Protocol):
    """Read access to the host's primary store."""

    def get_by_id(self, class_name: str, object_id: Any) -> Optional[Any]:
        ...

    def fetch_page(self, class_name: str, *, after_id: int, limit: int) -> Sequence[Any]:
        """Return up to ``limit`` objects with id > ``after_id``, ordered by id."""
        ...

    def count(self, class_name: str) -> int:
        ...

    def relations(self, class_name: str) -> Mapping[str, Relation]:
        ...

    def related(self, obj: Any, relation: Relation) -> Any:
        """Return the related object (or ``None``) or an iterable of them."""
        ...

    def field_type(self, class_name: str, field_name: str) -> Optional[str]:
        """Storage type name of a field, e.g. ``"Varchar"`` or ``"Int"``."""
        ...

    def release(self, obj: Any) -> None:
        ...


@dataclass(slots=True)
class SearchSite:
    """Everything the CLI and web app need to know about a host application."""

    store: ObjectStore
    fields: "FieldRegistry"
    extractors: Sequence["TextExtractor"] = field(default_factory=tuple)


def load_site(target: str) -> SearchSite:
    """Import a :class:`SearchSite` from a ``module:attribute`` string.

    The attribute may also be a zero-argument callable returning the site.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:attribute', got {target!r}")
    module = importlib.import_module(module_name)
    try:
        site = getattr(module, attr)
    except AttributeError as exc:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}") from exc
    if callable(site) and not isinstance(site, SearchSite):
        site = site()
    if not isinstance(site, SearchSite):
        raise ValueError(f"{target!r} is not a SearchSite")
    return site


def class_name_of(obj: Any) -> str:
    return getattr(obj, "class_name", None) or type(obj).__name__


def iter_related(value: Any) -> Iterable[Any]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return (value,)
    return value
