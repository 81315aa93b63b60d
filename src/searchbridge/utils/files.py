"""Utility helpers for working with files."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, Optional


def file_extension(path: Path | str) -> str:
    """Lower-cased extension of ``path`` without the leading dot."""
    return Path(path).suffix.lower().lstrip(".")


def find_binary(name: str, candidates: Iterable[Path | str] = ()) -> Optional[Path]:
    """Locate an executable, preferring explicit candidates over ``PATH``."""
    for candidate in candidates:
        candidate = Path(candidate)
        if candidate.is_file():
            return candidate
    found = shutil.which(name)
    return Path(found) if found else None
