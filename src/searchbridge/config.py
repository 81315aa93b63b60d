"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path


def _get_default_state_path() -> Path:
    """Get the default reindex state database path."""
    user_db = Path.home() / ".searchbridge" / "state.db"

    if getattr(sys, "frozen", False):
        return user_db

    # When running from a checkout, prefer local data/ if it exists
    local_db = Path("data/searchbridge.db")
    if local_db.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    solr_server: str = "http://localhost:8983/solr"
    default_query: str = "*:*"
    rows: int = 25
    page_size: int = 127
    timeout: float = 30.0
    state_path: Path | None = None

    def __post_init__(self) -> None:
        if self.state_path is None:
            self.state_path = _get_default_state_path()

    def resolve_state_path(self, base_dir: Path | None = None) -> Path:
        if self.state_path is None:
            self.state_path = _get_default_state_path()
        if Path(self.state_path).is_absolute() or base_dir is None:
            return Path(self.state_path)
        return base_dir / self.state_path
