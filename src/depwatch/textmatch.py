"""Lexical match engine: catalog API names against document text.

Pure text operations. Matching is literal, case-sensitive and word-bounded:
an API name only matches where it is not preceded or followed by a word
character (alphanumeric or underscore). Regex metacharacters in the name are
escaped, so ``a.b()`` matches the five characters ``a.b()`` and nothing else.

Results are grouped by catalog order, then by position for each record.
Records are never merged or deduplicated against each other.
"""
from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from depwatch.records import DeprecationRecord, MatchResult


def build_pattern(api_name: str) -> re.Pattern[str]:
    """Compile the literal, word-bounded pattern for *api_name*.

    Lookarounds rather than ``\\b`` so names that begin or end with a
    non-word character (``a.b()``, ``$el``) still require a word edge on the
    outside and match at string edges.
    """
    if not api_name:
        raise ValueError("api_name must be non-empty")
    return re.compile(rf"(?<!\w){re.escape(api_name)}(?!\w)")


@dataclass(frozen=True, slots=True)
class CompiledRecord:
    record: DeprecationRecord
    pattern: re.Pattern[str]


type CompiledCatalog = tuple[CompiledRecord, ...]


def compile_catalog(catalog: Iterable[DeprecationRecord]) -> CompiledCatalog:
    """Pre-compile patterns for repeated scans against the same catalog."""
    return tuple(CompiledRecord(rec, build_pattern(rec.api_name)) for rec in catalog)


def scan(compiled: CompiledCatalog, text: str) -> list[MatchResult]:
    """Find every non-overlapping occurrence of each compiled record in *text*."""
    results: list[MatchResult] = []
    for entry in compiled:
        rec = entry.record
        name_len = len(rec.api_name)
        for m in entry.pattern.finditer(text):
            start = m.start()
            results.append(MatchResult(
                api_name=rec.api_name,
                change_type=rec.change_type,
                description=rec.description,
                start=start,
                end=start + name_len,
            ))
    return results


def find_matches(
    catalog: Sequence[DeprecationRecord],
    text: str,
) -> list[MatchResult]:
    """Match every catalog record against *text*.

    Args:
        catalog: Records in catalog order.
        text: Full current content of one document.

    Returns:
        One :class:`MatchResult` per occurrence, grouped by catalog order and
        ordered by position within each record. Identical inputs always give
        identical output.
    """
    if not catalog or not text:
        return []
    return scan(compile_catalog(catalog), text)


def sort_by_position(matches: Iterable[MatchResult]) -> list[MatchResult]:
    """Order matches by (start, end), keeping catalog order for ties."""
    return sorted(matches, key=lambda m: (m.start, m.end))


# ---------------------------------------------------------------------------
# Offset -> (line, character) conversion
# ---------------------------------------------------------------------------


class LineIndex:
    """Maps character offsets in *text* to zero-based (line, character) pairs.

    Lines break on ``\\n``; a ``\\r`` before it counts as part of the line.
    Offsets past the end clamp to the end of the text.
    """

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._line_starts = [0]
        self._line_starts.extend(m.end() for m in re.finditer("\n", text))

    def position_at(self, offset: int) -> tuple[int, int]:
        offset = min(max(offset, 0), self._length)
        line = bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]
