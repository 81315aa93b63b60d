"""FastAPI application exposing search, schema and diagnostics."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from searchbridge import __version__
from searchbridge.config import AppConfig
from searchbridge.diagnostics import diagnose
from searchbridge.host import SearchSite
from searchbridge.index.client import SolrClient
from searchbridge.index.schema import SchemaGenerator
from searchbridge.index.search import Searcher
from searchbridge.models import QueryRequest

LOGGER = logging.getLogger(__name__)


class SearchPayload(BaseModel):
    query: str = ""
    sort: Optional[str] = None
    reverse: bool = False
    start: int = Field(0, ge=0)
    rows: Optional[int] = Field(None, ge=0)
    extra: List[str] = Field(default_factory=list)


class SearchHitModel(BaseModel):
    class_name: str
    object_id: Any


class SearchResponse(BaseModel):
    hits: List[SearchHitModel]
    total_hits: int
    facets: dict[str, dict[str, int]]


def create_app(site: SearchSite, config: AppConfig | None = None) -> FastAPI:
    config = config or AppConfig()
    client = SolrClient(config.solr_server, timeout=config.timeout)
    searcher = Searcher(client, site.store, default_query=config.default_query, rows=config.rows)

    app = FastAPI(title="searchbridge", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.site = site
    app.state.client = client

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        client.close()

    @app.post("/search", response_model=SearchResponse)
    def search_objects(payload: SearchPayload) -> SearchResponse:
        request = QueryRequest(
            text=payload.query.strip(),
            sort=(payload.sort, "desc" if payload.reverse else "asc") if payload.sort else None,
            offset=payload.start,
            limit=payload.rows,
            extra_params=payload.extra,
        )
        if payload.sort is not None and not payload.sort.strip():
            raise HTTPException(status_code=400, detail="Empty sort field")
        result = searcher.search(request)
        return SearchResponse(
            hits=[SearchHitModel(class_name=ref.class_name, object_id=ref.object_id) for ref in result.hits],
            total_hits=result.total_hits,
            facets=result.facets,
        )

    @app.get("/schema")
    def schema_json() -> dict[str, Any]:
        return SchemaGenerator(site.fields, site.store).generate().to_dict()

    @app.get("/schema.xml")
    def schema_xml() -> Response:
        declaration = SchemaGenerator(site.fields, site.store).generate()
        return Response(content=declaration.to_xml(), media_type="application/xml")

    @app.get("/count")
    def count_documents() -> dict[str, int]:
        return {"count": client.count()}

    @app.get("/diagnose")
    def diagnose_setup() -> dict[str, Any]:
        return diagnose(site, client).to_dict()

    return app
