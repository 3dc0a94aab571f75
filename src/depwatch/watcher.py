"""Host-editor seam: turns match results into diagnostics and decorations.

The host owns documents and rendering. It forwards document events to
:class:`DeprecationWatcher`, which rescans the full text on every event and
replaces everything previously published for that document in the
:class:`AnnotationSink`.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from depwatch.acquirer import AcquisitionResult
from depwatch.records import Catalog, MatchResult
from depwatch.textmatch import CompiledCatalog, LineIndex, compile_catalog, scan

log = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "Chrome Deprecation Watcher"
NO_DATA_MESSAGE = "Deprecation watcher: no deprecation data could be obtained; documents will not be annotated."


@dataclass(frozen=True, slots=True)
class AnnotationStyle:
    """Decoration styling handed to the sink; constant for the process."""

    color: str = "rgba(255, 165, 0, 0.8)"
    font_style: str = "italic"
    margin: str = "0 0 0 1em"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    start: int
    end: int
    start_pos: tuple[int, int]      # (line, character), zero-based
    end_pos: tuple[int, int]
    message: str
    severity: str = "warning"
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> dict[str, object]:
        return {
            "range": [self.start, self.end],
            "start": {"line": self.start_pos[0], "character": self.start_pos[1]},
            "end": {"line": self.end_pos[0], "character": self.end_pos[1]},
            "severity": self.severity,
            "message": self.message,
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class Decoration:
    start: int
    end: int
    label: str


class AnnotationSink(Protocol):
    """Receives replace-all annotation sets per document URI."""

    def set_diagnostics(self, uri: str, diagnostics: list[Diagnostic]) -> None: ...

    def set_decorations(
        self, uri: str, decorations: list[Decoration], style: AnnotationStyle,
    ) -> None: ...


@dataclass
class MemorySink:
    """AnnotationSink that keeps the latest annotation sets in dicts."""

    diagnostics: dict[str, list[Diagnostic]] = field(default_factory=dict)
    decorations: dict[str, list[Decoration]] = field(default_factory=dict)
    style: AnnotationStyle | None = None

    def set_diagnostics(self, uri: str, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics[uri] = list(diagnostics)

    def set_decorations(
        self, uri: str, decorations: list[Decoration], style: AnnotationStyle,
    ) -> None:
        self.decorations[uri] = list(decorations)
        self.style = style


def to_diagnostics(matches: Iterable[MatchResult], text: str) -> list[Diagnostic]:
    index = LineIndex(text)
    return [
        Diagnostic(
            start=m.start,
            end=m.end,
            start_pos=index.position_at(m.start),
            end_pos=index.position_at(m.end),
            message=m.message,
        )
        for m in matches
    ]


def to_decorations(matches: Iterable[MatchResult]) -> list[Decoration]:
    return [Decoration(start=m.start, end=m.end, label=m.label) for m in matches]


class DeprecationWatcher:
    """Scan documents against one catalog and publish annotations.

    The catalog is fixed at construction time; acquisition must complete
    before the watcher exists, so no scan ever runs against a half-loaded
    catalog.
    """

    def __init__(
        self,
        catalog: Catalog,
        sink: AnnotationSink,
        *,
        style: AnnotationStyle | None = None,
    ) -> None:
        self._catalog = tuple(catalog)
        self._compiled: CompiledCatalog = compile_catalog(self._catalog)
        self._sink = sink
        self._style = style or AnnotationStyle()

    @classmethod
    def from_acquisition(
        cls,
        result: AcquisitionResult,
        sink: AnnotationSink,
        *,
        style: AnnotationStyle | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> DeprecationWatcher:
        """Build a watcher, telling the user when no deprecation data exists."""
        if not result.has_data:
            log.warning("No deprecation data for version %s (%s)", result.version_id, result.status)
            if notify is not None:
                notify(NO_DATA_MESSAGE)
        return cls(result.catalog, sink, style=style)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def check(self, uri: str, text: str) -> list[MatchResult]:
        """Rescan *text* from scratch and replace the annotations for *uri*."""
        matches = scan(self._compiled, text)
        log.debug("Found %d match(es) in %s with %d record(s)", len(matches), uri, len(self._catalog))
        self._sink.set_diagnostics(uri, to_diagnostics(matches, text))
        self._sink.set_decorations(uri, to_decorations(matches), self._style)
        return matches

    def document_opened(self, uri: str, text: str) -> list[MatchResult]:
        return self.check(uri, text)

    def document_changed(self, uri: str, text: str) -> list[MatchResult]:
        return self.check(uri, text)

    def document_closed(self, uri: str) -> None:
        self._sink.set_diagnostics(uri, [])
        self._sink.set_decorations(uri, [], self._style)

    def check_open_documents(
        self, documents: Iterable[tuple[str, str]],
    ) -> dict[str, list[MatchResult]]:
        """Startup pass over the ``(uri, text)`` pairs already open."""
        return {uri: self.check(uri, text) for uri, text in documents}
