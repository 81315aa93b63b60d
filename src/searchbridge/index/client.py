"""HTTP client for a Solr-style search backend.

Writes are fire-and-forget: transport failures are logged, never raised.
Reads degrade to ``None`` (or ``0`` for :meth:`SolrClient.count`).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode
from xml.sax.saxutils import quoteattr

import httpx

from searchbridge.models import IndexDocument
from searchbridge.utils.text import cdata

LOGGER = logging.getLogger(__name__)

Params = Union[str, Sequence[Tuple[str, Any]]]


def add_payload(doc: IndexDocument) -> str:
    parts = ['<add overwrite="true"><doc>', f'<field name="id">{cdata(doc.id)}</field>']
    for name, value in doc.fields:
        parts.append(f"<field name={quoteattr(name)}>{cdata(value)}</field>")
    parts.append("</doc></add>")
    return "".join(parts)


def delete_payload(class_name: str, object_id: Any) -> str:
    return f"<delete><query>ObjectID:{object_id} AND ClassName:{class_name}</query></delete>"


WIPE_PAYLOAD = "<delete><query>*:*</query></delete>"
COMMIT_PAYLOAD = "<commit/>"
OPTIMIZE_PAYLOAD = "<optimize/>"


class SolrClient:
    """Sends index mutations and queries to one backend endpoint.

    Mutating calls accept ``commit=True`` to commit straight away; leave it
    off to batch several mutations under one explicit :meth:`commit`.
    """

    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.Client] = None

    @property
    def http(self) -> httpx.Client:
        if self._http is None or self._http.is_closed:
            self._http = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def __enter__(self) -> "SolrClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Mutations

    def add_or_replace(self, doc: IndexDocument, *, commit: bool = False) -> None:
        self._post(add_payload(doc))
        if commit:
            self.commit()

    def delete(self, class_name: str, object_id: Any, *, commit: bool = False) -> None:
        self._post(delete_payload(class_name, object_id))
        if commit:
            self.commit()

    def wipe(self, *, commit: bool = False) -> None:
        self._post(WIPE_PAYLOAD)
        if commit:
            self.commit()

    def commit(self) -> None:
        self._post(COMMIT_PAYLOAD)

    def optimize(self) -> None:
        self._post(OPTIMIZE_PAYLOAD)

    def _post(self, payload: str) -> None:
        try:
            response = self.http.post(
                f"{self.server_url}/update",
                content=payload.encode("utf-8"),
                headers={"Content-Type": "text/xml; charset=utf-8"},
            )
        except httpx.HTTPError as exc:
            LOGGER.warning("Update request to %s failed: %s", self.server_url, exc)
            return
        if response.is_error:
            LOGGER.warning("Update request returned HTTP %s", response.status_code)

    # Reads

    def query(self, params: Params) -> Optional[Dict[str, Any]]:
        """Run a select request and return the decoded JSON object, if any."""
        query_string = params if isinstance(params, str) else urlencode(list(params))
        try:
            response = self.http.get(f"{self.server_url}/select?{query_string}")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Select request to %s failed: %s", self.server_url, exc)
            return None
        return data if isinstance(data, dict) else None

    def count(self) -> int:
        data = self.query([("q", "*:*"), ("rows", 0), ("wt", "json")])
        response = data.get("response") if data else None
        if not isinstance(response, dict):
            return 0
        try:
            return int(response.get("numFound", 0))
        except (TypeError, ValueError):
            return 0
