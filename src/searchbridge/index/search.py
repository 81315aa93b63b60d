"""Query translation between search requests and backend responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

from searchbridge.host import ObjectStore
from searchbridge.index.client import SolrClient
from searchbridge.models import ObjectRef, QueryRequest, QueryResult

LOGGER = logging.getLogger(__name__)

MATCH_ALL = "*:*"
QUERY_VERSION = "2.2"
OVERRIDABLE_PARAMS = ("start", "rows", "sort")


def param_name(raw: str) -> str:
    return raw.split("=", 1)[0].strip()


def build_query_string(
    request: QueryRequest, *, default_query: str = MATCH_ALL, default_rows: int = 25
) -> str:
    """Encode ``request`` as a select query string.

    Any extra parameter named ``start``, ``rows`` or ``sort`` replaces the
    built-in one. Extras are appended verbatim, in order.
    """
    overridden = {param_name(raw) for raw in request.extra_params}
    params: List[tuple] = [("q", request.text or default_query), ("version", QUERY_VERSION)]
    if "start" not in overridden:
        params.append(("start", request.offset))
    if "rows" not in overridden:
        params.append(("rows", default_rows if request.limit is None else request.limit))
    if "sort" not in overridden:
        params.append(("sort", sort_clause(request.sort)))
    params.append(("wt", "json"))
    return "&".join([urlencode(params), *request.extra_params])


def sort_clause(sort: Optional[Sequence[str]]) -> str:
    if not sort or not sort[0]:
        return "score desc"
    field, direction = sort[0], (sort[1] if len(sort) > 1 else "asc")
    direction = direction.lower()
    if direction not in ("asc", "desc"):
        raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    return f"{field} {direction}"


def decode_facets(facet_fields: Any) -> Dict[str, Dict[str, int]]:
    """Decode flat ``[value, count, value, count, ...]`` facet arrays, keeping order."""
    facets: Dict[str, Dict[str, int]] = {}
    if not isinstance(facet_fields, dict):
        return facets
    for field, flat in facet_fields.items():
        if not isinstance(flat, list):
            continue
        counts: Dict[str, int] = {}
        for value, count in zip(flat[0::2], flat[1::2]):
            counts[value] = count
        facets[field] = counts
    return facets


def _object_id(raw: Any) -> Any:
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return raw


class Searcher:
    """High-level API to query the backend and map hits back to host objects."""

    def __init__(
        self,
        client: SolrClient,
        store: ObjectStore,
        *,
        default_query: str = MATCH_ALL,
        rows: int = 25,
    ) -> None:
        self.client = client
        self.store = store
        self.default_query = default_query
        self.rows = rows

    def find(self, text: str) -> QueryResult:
        return self.search(QueryRequest(text=text))

    def search(self, request: QueryRequest) -> QueryResult:
        query_string = build_query_string(
            request, default_query=self.default_query, default_rows=self.rows
        )
        LOGGER.debug("Select: %s", query_string)
        return self.decode(self.client.query(query_string))

    def decode(self, data: Any) -> QueryResult:
        result = QueryResult()
        if not isinstance(data, dict):
            return result
        response = data.get("response")
        if not isinstance(response, dict) or not isinstance(response.get("docs"), list):
            return result

        for doc in response["docs"]:
            if not isinstance(doc, dict):
                continue
            class_name = doc.get("ClassName")
            if isinstance(class_name, list):
                class_name = class_name[0] if class_name else None
            object_id = _object_id(doc.get("ObjectID"))
            if not class_name or object_id is None:
                continue
            obj = self.store.get_by_id(class_name, object_id)
            if obj is None:
                LOGGER.debug("Dropping stale hit %s:%s", class_name, object_id)
                continue
            result.hits.append(ObjectRef(class_name, object_id))
            result.objects.append(obj)

        try:
            result.total_hits = int(response.get("numFound", 0))
        except (TypeError, ValueError):
            result.total_hits = 0

        facet_counts = data.get("facet_counts")
        if isinstance(facet_counts, dict):
            result.facets = decode_facets(facet_counts.get("facet_fields"))
        return result
