"""Tests for data models."""

from __future__ import annotations

from searchbridge.models import FieldConfig, FieldType, IndexDocument, ObjectRef, ReindexCursor


class TestFieldConfig:
    def test_target_defaults_to_source(self) -> None:
        assert FieldConfig(source="Title").target == "Title"

    def test_target_uses_name(self) -> None:
        assert FieldConfig(source="Author.Name", name="AuthorName").target == "AuthorName"

    def test_filter_func_not_compared(self) -> None:
        assert FieldConfig(source="a", filter_func=str.upper) == FieldConfig(source="a")


class TestFieldType:
    def test_values_are_backend_names(self) -> None:
        assert FieldType("text_en_splitting") is FieldType.TEXT_EN_SPLITTING
        assert FieldType.STRING == "string"


class TestIndexDocument:
    """Test IndexDocument helpers."""

    def test_repeated_fields_keep_order(self) -> None:
        doc = IndexDocument(id="Page:1")
        doc.add("Tag", "a")
        doc.add("Title", "t")
        doc.add("Tag", "b")

        assert doc.values("Tag") == ["a", "b"]
        assert doc.names() == ["Tag", "Title", "Tag"]
        assert doc.values("Missing") == []


class TestObjectRef:
    def test_tuple_semantics(self) -> None:
        ref = ObjectRef("Page", 4)
        class_name, object_id = ref
        assert (class_name, object_id) == ("Page", 4)
        assert ref == ObjectRef(class_name="Page", object_id=4)


class TestReindexCursor:
    """Test ReindexCursor state and serialization."""

    def test_fresh_cursor_is_done(self) -> None:
        assert ReindexCursor().is_done

    def test_pending_or_current_is_not_done(self) -> None:
        assert not ReindexCursor(pending_classes=["A"]).is_done
        assert not ReindexCursor(current_class="A").is_done

    def test_dict_round_trip(self) -> None:
        cursor = ReindexCursor(
            pending_classes=["B"], current_class="A", last_seen_id=127, steps_done=127, steps_total=260
        )

        data = cursor.to_dict()

        assert data["pending_classes"] == ["B"]
        assert ReindexCursor.from_dict(data) == cursor

    def test_from_dict_copies_pending(self) -> None:
        data = {"pending_classes": ["B"]}
        cursor = ReindexCursor.from_dict(data)
        cursor.pending_classes.pop()
        assert data["pending_classes"] == ["B"]
