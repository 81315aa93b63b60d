"""Pluggable text extractors for file-backed objects.

Extractors run in ascending ``priority`` order; the first one that handles
the file's extension, is available and returns non-empty text wins.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import ClassVar, FrozenSet, Iterable, List, Optional

import fitz  # PyMuPDF

from searchbridge.utils.files import file_extension, find_binary
from searchbridge.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


class TextExtractor:
    """Base class for text extractors."""

    extensions: ClassVar[FrozenSet[str]] = frozenset()
    priority: ClassVar[int] = 100

    def handles(self, path: Path) -> bool:
        return file_extension(path) in self.extensions

    def is_available(self) -> bool:
        return True

    def extract(self, path: Path) -> Optional[str]:
        raise NotImplementedError


class PlainTextExtractor(TextExtractor):
    extensions = frozenset({"txt", "md", "csv", "log"})

    def extract(self, path: Path) -> Optional[str]:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            LOGGER.warning("Failed to read %s: %s", path, exc)
            return None


class PdfTextExtractor(TextExtractor):
    """Extract PDF text page by page with PyMuPDF."""

    extensions = frozenset({"pdf"})

    def extract(self, path: Path) -> Optional[str]:
        try:
            doc = fitz.open(path)
        except Exception as exc:
            LOGGER.error("Failed to open PDF %s: %s", path, exc)
            return None

        pages: List[str] = []
        try:
            for index in range(len(doc)):
                try:
                    normalized = normalize_whitespace([doc[index].get_text() or ""])
                except Exception as exc:  # pragma: no cover
                    LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
                    continue
                if normalized:
                    pages.append(normalized)
        finally:
            doc.close()
        return "\n".join(pages) or None


class CommandExtractor(TextExtractor):
    """Runs an external utility and returns its standard output."""

    binary: ClassVar[str] = ""
    timeout: ClassVar[float] = 60.0

    def __init__(self, binary_path: Path | str | None = None) -> None:
        candidates = [binary_path] if binary_path else []
        candidates += [Path("/usr/bin") / self.binary, Path("/usr/local/bin") / self.binary]
        self.binary_path = find_binary(self.binary, candidates)

    def is_available(self) -> bool:
        return self.binary_path is not None

    def command(self, path: Path) -> List[str]:
        raise NotImplementedError

    def extract(self, path: Path) -> Optional[str]:
        if self.binary_path is None:
            return None
        try:
            completed = subprocess.run(
                self.command(path),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("%s failed on %s: %s", self.binary, path, exc)
            return None
        if completed.returncode != 0:
            LOGGER.debug("%s exited with %s on %s", self.binary, completed.returncode, path)
            return None
        return completed.stdout.decode("utf-8", errors="replace")


class PdftotextExtractor(CommandExtractor):
    """Poppler's ``pdftotext``, used when PyMuPDF yields nothing."""

    binary = "pdftotext"
    extensions = frozenset({"pdf"})
    priority = 110

    def command(self, path: Path) -> List[str]:
        return [str(self.binary_path), "-enc", "UTF-8", str(path), "-"]


class CatdocExtractor(CommandExtractor):
    """Legacy MS Office documents via ``catdoc``."""

    binary = "catdoc"
    extensions = frozenset({"doc", "rtf"})

    def command(self, path: Path) -> List[str]:
        return [str(self.binary_path), "-d", "utf-8", str(path)]


def default_extractors() -> List[TextExtractor]:
    return [PlainTextExtractor(), PdfTextExtractor(), PdftotextExtractor(), CatdocExtractor()]


class ExtractorChain:
    """Ordered set of extractors, lowest priority number first."""

    def __init__(self, extractors: Iterable[TextExtractor] = ()) -> None:
        self.extractors = sorted(extractors, key=lambda extractor: extractor.priority)

    def __len__(self) -> int:
        return len(self.extractors)

    def extract(self, path: Path) -> str:
        for extractor in self.extractors:
            if not extractor.handles(path) or not extractor.is_available():
                continue
            try:
                content = extractor.extract(path)
            except Exception as exc:
                LOGGER.warning("%s failed on %s: %s", type(extractor).__name__, path, exc)
                continue
            if content and content.strip():
                return content
        return ""
