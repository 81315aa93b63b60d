"""Environment and configuration checks."""

from __future__ import annotations

import importlib.util
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from searchbridge.host import SearchSite
from searchbridge.index.client import SolrClient
from searchbridge.utils.files import find_binary

PREREQUISITES = {"httpx": "HTTP transport", "fitz": "PDF text extraction (PyMuPDF)"}
UTILITIES = {
    "catdoc": "older MS Office documents will be scanned",
    "pdftotext": "PDF documents can be scanned without PyMuPDF",
}


@dataclass(slots=True)
class DiagnosticReport:
    backend: str
    server_url: str
    prerequisites: Dict[str, bool] = field(default_factory=dict)
    utilities: Dict[str, Optional[Path]] = field(default_factory=dict)
    document_count: int = 0
    classes: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(self.prerequisites.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "server_url": self.server_url,
            "prerequisites": dict(self.prerequisites),
            "utilities": {name: str(path) if path else None for name, path in self.utilities.items()},
            "document_count": self.document_count,
            "classes": self.classes,
        }


def check_prerequisites() -> Dict[str, bool]:
    return {module: importlib.util.find_spec(module) is not None for module in PREREQUISITES}


def find_utilities() -> Dict[str, Optional[Path]]:
    return {
        name: find_binary(name, [Path("/usr/bin") / name, Path("/usr/local/bin") / name])
        for name in UTILITIES
    }


def describe_fields(site: SearchSite) -> Dict[str, List[Dict[str, Any]]]:
    classes: Dict[str, List[Dict[str, Any]]] = {}
    for class_name in site.fields.class_names():
        rows = []
        for field_name in site.fields.fields_for(class_name):
            config = site.fields.config_for(class_name, field_name)
            rows.append(
                {
                    "source": config.source,
                    "name": config.target,
                    "type": config.type.value if config.type else None,
                    "stored": config.stored,
                    "indexed": config.indexed,
                    "multiple": config.multiple,
                    "content_filter": config.content_filter,
                }
            )
        classes[class_name] = rows
    return classes


def diagnose(site: SearchSite, client: SolrClient) -> DiagnosticReport:
    return DiagnosticReport(
        backend=type(client).__name__,
        server_url=client.server_url,
        prerequisites=check_prerequisites(),
        utilities=find_utilities(),
        document_count=client.count(),
        classes=describe_fields(site),
    )
