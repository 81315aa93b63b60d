"""Per-class field configuration for indexable classes."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from searchbridge.models import FieldConfig, FieldType

LOGGER = logging.getLogger(__name__)

DEFAULT_FIELDS = ("ID", "ClassName", "LastEdited")

# (type, stored, indexed) for the Zend Lucene style shorthand types
SHORTHAND_TYPES = {
    FieldType.KEYWORD: (FieldType.STRING, False, True),
    FieldType.UNSTORED: (FieldType.TEXT_WS, False, True),
    FieldType.UNINDEXED: (FieldType.STRING, True, False),
}

ContentFilter = Callable[[Any], Any]
FieldSpec = Union[str, FieldConfig]

_CONTENT_FILTERS: Dict[str, ContentFilter] = {}


def content_filter(name: str) -> Callable[[ContentFilter], ContentFilter]:
    """Register a pure ``value -> value`` function under ``name``."""

    def decorator(func: ContentFilter) -> ContentFilter:
        if name in _CONTENT_FILTERS and _CONTENT_FILTERS[name] is not func:
            raise ValueError(f"Content filter {name!r} is already registered")
        _CONTENT_FILTERS[name] = func
        return func

    return decorator


def get_content_filter(name: str) -> ContentFilter:
    try:
        return _CONTENT_FILTERS[name]
    except KeyError:
        raise ValueError(f"Unknown content filter: {name!r}") from None


_TAG_RE = re.compile(r"<[^>]+>")


@content_filter("strip_html")
def strip_html(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return html.unescape(_TAG_RE.sub(" ", value)).strip()


@content_filter("lowercase")
def lowercase(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


@content_filter("first_line")
def first_line(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.strip().split("\n", 1)[0]


def expand_config(config: FieldConfig) -> FieldConfig:
    """Apply the ``ID`` rename and shorthand type expansion."""
    expanded = replace(config)
    if expanded.type is not None and not isinstance(expanded.type, FieldType):
        expanded.type = FieldType(expanded.type)
    if expanded.target == "ID":
        expanded.name = "ObjectID"
    shorthand = SHORTHAND_TYPES.get(expanded.type) if expanded.type else None
    if shorthand is not None:
        expanded.type, expanded.stored, expanded.indexed = shorthand
    if expanded.content_filter and expanded.filter_func is None:
        expanded.filter_func = get_content_filter(expanded.content_filter)
    return expanded


class FieldRegistry:
    """Registry of searchable classes and their field configuration.

    Each class always indexes :data:`DEFAULT_FIELDS` first, followed by its
    declared fields in declaration order. Declaring a source field twice is a
    no-op; the first declaration wins.
    """

    def __init__(self, default_fields: Iterable[str] = DEFAULT_FIELDS) -> None:
        self.default_fields = tuple(default_fields)
        self._classes: Dict[str, Dict[str, FieldConfig]] = {}

    def register(self, class_name: str, fields: Iterable[FieldSpec] = ()) -> None:
        configs = self._classes.setdefault(class_name, {})
        targets = {config.target for config in configs.values()}
        for spec in (*self.default_fields, *fields):
            config = expand_config(FieldConfig(source=spec) if isinstance(spec, str) else spec)
            if config.source in configs:
                continue
            if config.target in targets:
                raise ValueError(
                    f"Duplicate field name {config.target!r} on {class_name} "
                    f"(source {config.source!r})"
                )
            configs[config.source] = config
            targets.add(config.target)
        LOGGER.debug("Registered %s with fields %s", class_name, list(configs))

    def searchable(self, *fields: FieldSpec, name: Optional[str] = None):
        """Class decorator registering the decorated class as searchable."""

        def decorator(cls):
            self.register(name or cls.__name__, fields)
            return cls

        return decorator

    def is_searchable(self, class_name: str) -> bool:
        return class_name in self._classes

    def class_names(self) -> List[str]:
        return list(self._classes)

    def fields_for(self, class_name: str) -> List[str]:
        return list(self._classes.get(class_name, {}))

    def config_for(self, class_name: str, field_name: str) -> FieldConfig:
        try:
            return self._classes[class_name][field_name]
        except KeyError:
            # Unconfigured fields index under their own name
            return expand_config(FieldConfig(source=field_name))
