"""Resolve configured field paths to values on host objects."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from searchbridge.host import ObjectStore, RelationKind, class_name_of, iter_related

LOGGER = logging.getLogger(__name__)

# Fallbacks for the conventional field names on plain Python objects
_ATTRIBUTE_ALIASES = {"ID": "id", "ClassName": "class_name"}

_MISSING = object()


def _lookup(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        value = obj.get(name, _MISSING)
    else:
        value = getattr(obj, name, _MISSING)
        if value is _MISSING and name in _ATTRIBUTE_ALIASES:
            value = getattr(obj, _ATTRIBUTE_ALIASES[name], _MISSING)
        if value is _MISSING and name == "ClassName":
            value = class_name_of(obj)
    if callable(value):
        return value()
    return value


def get_value(obj: Any, name: str) -> Any:
    """Read ``name`` from ``obj``, calling it when it is a method."""
    if obj is None:
        return ""
    value = _lookup(obj, name)
    return "" if value is _MISSING else value


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(as_text(item) for item in value)
    return str(value)


class ValueResolver:
    """Resolves dotted field paths, following relations declared by the store.

    Resolution never raises: anything that cannot be resolved becomes ``""``.
    Values reached through one-to-many and many-to-many relations are joined
    with newlines into a single string, so per-object boundaries are lost.
    """

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def resolve(self, obj: Any, path: str) -> Any:
        try:
            return self._resolve(obj, path)
        except Exception as exc:
            LOGGER.debug("Could not resolve %r on %r: %s", path, obj, exc)
            return ""

    def _resolve(self, obj: Any, path: str) -> Any:
        if obj is None:
            return ""
        if "." not in path:
            return get_value(obj, path)

        base, rest = path.split(".", 1)
        relation = self.store.relations(class_name_of(obj)).get(base)
        if relation is None:
            # Plain attribute holding another object
            target = _lookup(obj, base)
            if target is _MISSING or target is None or isinstance(target, (str, bytes)):
                return ""
            return self._resolve(target, rest)

        related = self.store.related(obj, relation)
        if relation.kind is RelationKind.ONE_TO_ONE:
            if related is None:
                return ""
            return self._resolve(related, rest)

        return "\n".join(
            as_text(self._resolve(component, rest)) for component in iter_related(related)
        )
