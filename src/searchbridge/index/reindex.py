"""Resumable bulk reindex of every searchable object."""

from __future__ import annotations

import logging
from typing import Optional

from searchbridge.fields.config import FieldRegistry
from searchbridge.host import ObjectStore
from searchbridge.index.client import SolrClient
from searchbridge.index.projector import DocumentProjector
from searchbridge.index.state import CursorStore
from searchbridge.models import ReindexCursor

LOGGER = logging.getLogger(__name__)

# An odd page size makes progress counters move in uneven steps
DEFAULT_PAGE_SIZE = 127
DEFAULT_JOB = "reindex"


class ReindexCoordinator:
    """Walks every searchable class page by page, one page per step.

    All progress lives in the :class:`ReindexCursor`, so a job killed between
    steps resumes from ``last_seen_id`` and redoes at most one page.
    Re-indexing an object is harmless because adds overwrite by id.
    """

    def __init__(
        self,
        store: ObjectStore,
        fields: FieldRegistry,
        projector: DocumentProjector,
        client: SolrClient,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.store = store
        self.fields = fields
        self.projector = projector
        self.client = client
        self.page_size = page_size

    def setup(self) -> ReindexCursor:
        """Wipe the index and queue every searchable class."""
        self.client.wipe(commit=True)
        classes = self.fields.class_names()
        total = sum(self.store.count(class_name) for class_name in classes)
        LOGGER.info("Got %d items to index", total)
        LOGGER.info("Classes to index: %s", ", ".join(classes))
        # Stack: popping yields classes in enumeration order
        return ReindexCursor(pending_classes=list(reversed(classes)), steps_total=total)

    def process(self, cursor: ReindexCursor) -> ReindexCursor:
        """Advance ``cursor`` by one page and commit."""
        while True:
            if cursor.current_class is None:
                if not cursor.pending_classes:
                    LOGGER.info("Completed: %d objects indexed", cursor.steps_done)
                    self.client.commit()
                    self.client.close()
                    return cursor
                cursor.current_class = cursor.pending_classes.pop()
                cursor.last_seen_id = 0
                LOGGER.info("Indexing %s objects", cursor.current_class)

            page = self.store.fetch_page(
                cursor.current_class, after_id=cursor.last_seen_id, limit=self.page_size
            )
            if not page:
                cursor.current_class = None
                continue

            for obj in page:
                self.client.add_or_replace(self.projector.project(obj))
                cursor.last_seen_id = obj.id
                cursor.steps_done += 1
                self.store.release(obj)
            break

        self.client.commit()
        return cursor

    def run(
        self,
        cursors: CursorStore,
        *,
        job: str = DEFAULT_JOB,
        max_steps: Optional[int] = None,
    ) -> ReindexCursor:
        """Resume (or start) ``job`` and run up to ``max_steps`` steps.

        The cursor is saved after every step and deleted once the job is done.
        """
        cursor = cursors.load(job)
        if cursor is None:
            cursor = self.setup()
            cursors.save(job, cursor)
        else:
            LOGGER.info(
                "Resuming %s at %s > %s (%d/%d)",
                job,
                cursor.current_class,
                cursor.last_seen_id,
                cursor.steps_done,
                cursor.steps_total,
            )

        steps = 0
        while max_steps is None or steps < max_steps:
            cursor = self.process(cursor)
            steps += 1
            if cursor.is_done:
                cursors.delete(job)
                break
            cursors.save(job, cursor)
        return cursor
