"""Deprecated-API watcher: catalog acquisition and lexical match engine."""
from __future__ import annotations

from depwatch.records import DeprecationRecord, MatchResult, Section
from depwatch.textmatch import find_matches

__all__ = ["DeprecationRecord", "MatchResult", "Section", "find_matches"]
__version__ = "0.1.0"
