"""Tests for document projection."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeStore, Record
from searchbridge.extraction.extractors import TextExtractor
from searchbridge.fields.config import FieldRegistry
from searchbridge.host import RelationKind
from searchbridge.index.projector import DocumentProjector, coerce_values, document_id
from searchbridge.models import FieldConfig


class FixedExtractor(TextExtractor):
    extensions = frozenset({"pdf"})

    def extract(self, path):
        return f"text of {Path(path).name}"


@pytest.fixture
def projector(store: FakeStore, registry: FieldRegistry) -> DocumentProjector:
    return DocumentProjector(store, registry, [FixedExtractor()])


class TestCoerceValues:
    def test_scalar(self) -> None:
        assert coerce_values("x") == ["x"]
        assert coerce_values(0) == ["0"]

    def test_empty(self) -> None:
        assert coerce_values("") == []
        assert coerce_values(None) == []

    def test_sequence(self) -> None:
        assert coerce_values(["a", "", None, 3]) == ["a", "", "", "3"]
        assert coerce_values([]) == []

    def test_set_is_sorted(self) -> None:
        assert coerce_values({"pear", "apple", "fig"}) == ["apple", "fig", "pear"]
        assert coerce_values(frozenset({2, 10})) == ["10", "2"]


class TestDocumentProjector:
    """Test projecting host objects into documents."""

    def test_document_id(self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector) -> None:
        registry.register("Page", [])
        page = store.add("Page", 42)

        assert projector.project(page).id == "Page:42" == document_id("Page", 42)

    def test_default_fields(self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector) -> None:
        registry.register("Page", ["Title"])
        page = store.add("Page", 3, Title="Home", LastEdited="2024-01-02T03:04:05Z")

        doc = projector.project(page)

        assert doc.fields == [
            ("ObjectID", "3"),
            ("ClassName", "Page"),
            ("LastEdited", "2024-01-02T03:04:05Z"),
            ("Title", "Home"),
        ]

    def test_empty_values_are_omitted(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Page", ["Title", "Missing"])
        page = store.add("Page", 1, Title="")

        doc = projector.project(page)

        assert "Title" not in doc.names()
        assert "Missing" not in doc.names()

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_multi_valued_field(
        self, count: int, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Page", [FieldConfig(source="Keywords", multiple=True)])
        page = store.add("Page", 1)
        page.Keywords = lambda: [f"k{i}" for i in range(count)]

        doc = projector.project(page)

        assert doc.values("Keywords") == [f"k{i}" for i in range(count)]

    def test_blank_list_elements_are_kept(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Page", [FieldConfig(source="Keywords", multiple=True)])
        page = store.add("Page", 1, Keywords=["a", "", "c"])

        assert projector.project(page).values("Keywords") == ["a", "", "c"]

    def test_relation_text_is_one_entry(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        store.relate("Page", "Tags", RelationKind.MANY_TO_MANY)
        registry.register("Page", [FieldConfig(source="Tags.Title", name="Tags")])
        page = store.add("Page", 1)
        store.link(page, "Tags", [Record("Tag", 1, Title="red"), Record("Tag", 2, Title="blue")])

        assert projector.project(page).values("Tags") == ["red\nblue"]

    def test_content_filter(self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector) -> None:
        registry.register("Page", [FieldConfig(source="Content", content_filter="strip_html")])
        page = store.add("Page", 1, Content="<p>Hello</p>")

        assert projector.project(page).values("Content") == ["Hello"]

    def test_failing_content_filter_omits_field(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        def explode(value):
            raise RuntimeError("bad")

        registry.register("Page", [FieldConfig(source="Content", filter_func=explode), "Title"])
        page = store.add("Page", 1, Content="x", Title="kept")

        doc = projector.project(page)

        assert doc.values("Content") == []
        assert doc.values("Title") == ["kept"]

    def test_link_is_last(self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector) -> None:
        registry.register("Page", ["Title"])
        page = store.add("Page", 1, Title="Home")
        page.link = lambda: "/home/"

        doc = projector.project(page)

        assert doc.fields[-1] == ("Link", "/home/")

    def test_explicit_link_field_not_duplicated(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Page", ["Link"])
        page = store.add("Page", 1, Link="/explicit/")
        page.link = lambda: "/computed/"

        assert projector.project(page).values("Link") == ["/explicit/"]

    def test_failing_link(self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector) -> None:
        registry.register("Page", [])
        page = store.add("Page", 1)

        def broken():
            raise RuntimeError("no route")

        page.link = broken

        assert "Link" not in projector.project(page).names()

    def test_extracted_text_follows_id(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("File", ["Title"])
        file = store.add("File", 9, Title="Report", file_path="/files/report.pdf", is_container=False)

        doc = projector.project(file)

        assert doc.fields[0] == ("text", "text of report.pdf")

    def test_container_has_no_text(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Folder", [])
        folder = store.add("Folder", 2, file_path="/files/reports.pdf", is_container=True)

        assert "text" not in projector.project(folder).names()

    def test_no_extractors(self, store: FakeStore, registry: FieldRegistry) -> None:
        registry.register("File", [])
        file = store.add("File", 1, file_path="/files/a.pdf", is_container=False)

        doc = DocumentProjector(store, registry).project(file)

        assert "text" not in doc.names()

    def test_projection_is_deterministic(
        self, store: FakeStore, registry: FieldRegistry, projector: DocumentProjector
    ) -> None:
        registry.register("Page", ["Title", "Content"])
        page = store.add("Page", 1, Title="A", Content="B")

        assert projector.project(page) == projector.project(page)
