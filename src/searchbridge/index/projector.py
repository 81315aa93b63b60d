"""Project host objects into search documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List

from searchbridge.extraction.extractors import ExtractorChain, TextExtractor
from searchbridge.fields.config import FieldRegistry
from searchbridge.fields.values import ValueResolver, get_value
from searchbridge.host import ObjectStore, class_name_of
from searchbridge.models import FieldConfig, IndexDocument

LOGGER = logging.getLogger(__name__)


def document_id(class_name: str, object_id: Any) -> str:
    return f"{class_name}:{object_id}"


def coerce_values(value: Any) -> List[str]:
    """Turn a resolved value into zero or more field entries."""
    if isinstance(value, (list, tuple)):
        return ["" if item is None else str(item) for item in value]
    if isinstance(value, (set, frozenset)):
        # Sets have no stable order across processes
        return sorted("" if item is None else str(item) for item in value)
    if value is None or value == "":
        return []
    return [str(value)]


class DocumentProjector:
    """Builds :class:`IndexDocument` instances for indexable objects.

    Field order is id, extracted ``text``, configured fields, then ``Link``.
    Failures in any single field are logged and that field is left out.
    """

    def __init__(
        self,
        store: ObjectStore,
        fields: FieldRegistry,
        extractors: Iterable[TextExtractor] = (),
    ) -> None:
        self.fields = fields
        self.resolver = ValueResolver(store)
        self.extractors = ExtractorChain(extractors)

    def project(self, obj: Any) -> IndexDocument:
        class_name = class_name_of(obj)
        doc = IndexDocument(id=document_id(class_name, get_value(obj, "ID")))

        text = self._extract_text(obj)
        if text:
            doc.add("text", text)

        field_names = self.fields.fields_for(class_name)
        for field_name in field_names:
            config = self.fields.config_for(class_name, field_name)
            for value in self._field_values(obj, config):
                doc.add(config.target, value)

        link = getattr(obj, "link", None)
        if callable(link) and "Link" not in field_names:
            try:
                permalink = link()
            except Exception as exc:
                LOGGER.warning("Could not build link for %s: %s", doc.id, exc)
            else:
                if permalink:
                    doc.add("Link", str(permalink))
        return doc

    def _field_values(self, obj: Any, config: FieldConfig) -> List[str]:
        value = self.resolver.resolve(obj, config.source)
        if config.filter_func is not None:
            try:
                value = config.filter_func(value)
            except Exception as exc:
                LOGGER.warning(
                    "Content filter %s failed for %s: %s", config.content_filter, config.source, exc
                )
                return []
        return coerce_values(value)

    def _extract_text(self, obj: Any) -> str:
        file_path = getattr(obj, "file_path", None)
        if not file_path or getattr(obj, "is_container", False) or not len(self.extractors):
            return ""
        try:
            return self.extractors.extract(Path(file_path))
        except Exception as exc:
            LOGGER.warning("Text extraction failed for %s: %s", file_path, exc)
            return ""
