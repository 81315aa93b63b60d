"""Text helpers for extracted content and wire payloads."""

from __future__ import annotations

from typing import Iterable


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())


def cdata(value: str) -> str:
    """Wrap ``value`` in CDATA, splitting any embedded ``]]>`` terminator."""
    return "<![CDATA[" + value.replace("]]>", "]]]]><![CDATA[>") + "]]>"
