"""Map node byte ranges to line numbers and source snippets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .nodes import SourceLocation, SourceUnit


@dataclass(frozen=True)
class ResolvedLocation:
    line: int
    snippet: str


def resolve(offset: int, length: int, source_unit: SourceUnit) -> Optional[ResolvedLocation]:
    """Resolve a byte range of *source_unit* to a 1-based line and its text.

    Returns None when the unit carries no source text or the range falls
    outside it; callers treat that as "location unknown".
    """
    data = source_unit.encoded_source
    if data is None or offset < 0 or length < 0 or offset + length > len(data):
        return None
    snippet = data[offset:offset + length].decode("utf-8", errors="replace")
    return ResolvedLocation(source_unit.line_of(offset), snippet)


def resolve_src(src: Optional[SourceLocation], source_unit: SourceUnit) -> Optional[ResolvedLocation]:
    if src is None:
        return None
    return resolve(src.offset, src.length, source_unit)


def source_line(source_unit: SourceUnit, src: Optional[SourceLocation]) -> Optional[int]:
    """Line number only; None when unknown."""
    resolved = resolve_src(src, source_unit)
    return resolved.line if resolved else None
