"""Shared fixtures: an in-memory host object store and a fake Solr server."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

import httpx
import pytest

from searchbridge.fields.config import FieldRegistry
from searchbridge.host import Relation, RelationKind
from searchbridge.index.client import SolrClient


class Record:
    """Plain host object with arbitrary attributes."""

    def __init__(self, class_name: str, id: int, **attrs: Any) -> None:
        self.class_name = class_name
        self.id = id
        for key, value in attrs.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"Record({self.class_name}:{self.id})"


class FakeStore:
    """In-memory implementation of the ObjectStore protocol."""

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[int, Record]] = {}
        self._relations: Dict[str, Dict[str, Relation]] = {}
        self._links: Dict[Tuple[str, int, str], Any] = {}
        self.types: Dict[Tuple[str, str], str] = {}
        self.released: List[Record] = []
        self.fetches: List[Tuple[str, int, int]] = []

    def add(self, class_name: str, id: int, **attrs: Any) -> Record:
        record = Record(class_name, id, **attrs)
        self.objects.setdefault(class_name, {})[id] = record
        return record

    def remove(self, class_name: str, id: int) -> None:
        self.objects.get(class_name, {}).pop(id, None)

    def relate(self, class_name: str, name: str, kind: RelationKind) -> None:
        self._relations.setdefault(class_name, {})[name] = Relation(name, kind)

    def link(self, obj: Record, name: str, target: Any) -> None:
        self._links[(obj.class_name, obj.id, name)] = target

    def get_by_id(self, class_name: str, object_id: Any) -> Optional[Record]:
        return self.objects.get(class_name, {}).get(object_id)

    def fetch_page(self, class_name: str, *, after_id: int, limit: int) -> List[Record]:
        self.fetches.append((class_name, after_id, limit))
        rows = sorted(self.objects.get(class_name, {}).values(), key=lambda record: record.id)
        return [record for record in rows if record.id > after_id][:limit]

    def count(self, class_name: str) -> int:
        return len(self.objects.get(class_name, {}))

    def relations(self, class_name: str) -> Dict[str, Relation]:
        return self._relations.get(class_name, {})

    def related(self, obj: Record, relation: Relation) -> Any:
        default = None if relation.kind is RelationKind.ONE_TO_ONE else []
        return self._links.get((obj.class_name, obj.id, relation.name), default)

    def field_type(self, class_name: str, field_name: str) -> Optional[str]:
        return self.types.get((class_name, field_name))

    def release(self, obj: Record) -> None:
        self.released.append(obj)


class FakeSolr:
    """Records requests sent to it and answers selects with a canned body."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.select_body: Any = {"response": {"numFound": 0, "docs": []}}
        self.fail: bool = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        self.requests.append(request)
        if request.url.path.endswith("/select"):
            if isinstance(self.select_body, (dict, list)):
                return httpx.Response(200, json=self.select_body)
            return httpx.Response(200, text=str(self.select_body))
        return httpx.Response(200, text="<response/>")

    @property
    def updates(self) -> List[str]:
        return [
            request.content.decode("utf-8")
            for request in self.requests
            if request.url.path.endswith("/update")
        ]

    @property
    def selects(self) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path.endswith("/select")]

    def params(self, index: int = -1) -> List[Tuple[str, str]]:
        return list(self.selects[index].url.params.multi_items())


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def registry() -> FieldRegistry:
    return FieldRegistry()


@pytest.fixture
def solr() -> FakeSolr:
    return FakeSolr()


@pytest.fixture
def client(solr: FakeSolr) -> Iterator[SolrClient]:
    solr_client = SolrClient("http://solr.test/solr/core", transport=httpx.MockTransport(solr.handler))
    yield solr_client
    solr_client.close()
