"""Write path for individual objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List

from searchbridge.fields.config import FieldRegistry
from searchbridge.fields.values import get_value
from searchbridge.host import class_name_of
from searchbridge.index.client import SolrClient
from searchbridge.index.projector import DocumentProjector, document_id

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    processed_ids: List[str] = field(default_factory=list)

    def increment(self, status: str, doc_id: str) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_ids.append(doc_id)


class SearchIndexer:
    """Keeps the index in step with changes to individual objects.

    ``index`` and ``delete`` commit straight away by default, which suits a
    save hook. Pass ``commit=False`` when batching and call ``commit()`` on
    the client yourself, or use :meth:`index_many`.
    """

    def __init__(self, fields: FieldRegistry, projector: DocumentProjector, client: SolrClient) -> None:
        self.fields = fields
        self.projector = projector
        self.client = client

    def index(self, obj: Any, *, commit: bool = True) -> str:
        class_name = class_name_of(obj)
        if not self.fields.is_searchable(class_name):
            LOGGER.debug("%s is not searchable, skipping", class_name)
            return "skipped"
        doc = self.projector.project(obj)
        self.client.add_or_replace(doc, commit=commit)
        return "indexed"

    def delete(self, obj: Any, *, commit: bool = True) -> None:
        self.client.delete(class_name_of(obj), get_value(obj, "ID"), commit=commit)

    def index_many(self, objects: Iterable[Any]) -> IndexStats:
        """Index objects in bulk mode under a single commit."""
        stats = IndexStats()
        for obj in objects:
            doc_id = document_id(class_name_of(obj), get_value(obj, "ID"))
            try:
                stats.increment(self.index(obj, commit=False), doc_id)
            except Exception as exc:
                LOGGER.error("Failed to index %s: %s", doc_id, exc)
                stats.increment("failed", doc_id)
        self.client.commit()
        return stats
