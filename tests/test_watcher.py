"""Tests for depwatch.watcher module."""
from __future__ import annotations

from depwatch.acquirer import AcquisitionResult
from depwatch.records import DeprecationRecord
from depwatch.watcher import (
    DIAGNOSTIC_SOURCE,
    NO_DATA_MESSAGE,
    AnnotationStyle,
    DeprecationWatcher,
    MemorySink,
)

CATALOG = (
    DeprecationRecord("geolocation.watchPosition", "Deprecated", "Use permissions API instead."),
    DeprecationRecord("document.domain", "Removed", "Setter removed."),
)

URI = "file:///project/app.js"


def _watcher(sink: MemorySink, **kwargs: object) -> DeprecationWatcher:
    return DeprecationWatcher(CATALOG, sink, **kwargs)  # type: ignore[arg-type]


class TestCheck:
    def test_publishes_diagnostics(self) -> None:
        sink = MemorySink()
        text = "let a;\nnavigator.geolocation.watchPosition(cb);"
        matches = _watcher(sink).document_opened(URI, text)
        assert len(matches) == 1
        [diag] = sink.diagnostics[URI]
        assert diag.start == 17
        assert diag.end == 42
        assert diag.start_pos == (1, 10)
        assert diag.end_pos == (1, 35)
        assert diag.severity == "warning"
        assert diag.source == DIAGNOSTIC_SOURCE
        assert diag.message == (
            'The API "geolocation.watchPosition" is marked as Deprecated. '
            "Use permissions API instead."
        )

    def test_publishes_decorations_with_style(self) -> None:
        sink = MemorySink()
        style = AnnotationStyle(color="red")
        _watcher(sink, style=style).check(URI, "document.domain = 'x';")
        [deco] = sink.decorations[URI]
        assert deco.label == "[Removed] document.domain"
        assert (deco.start, deco.end) == (0, 15)
        assert sink.style is style

    def test_change_replaces_previous_results(self) -> None:
        sink = MemorySink()
        watcher = _watcher(sink)
        watcher.document_opened(URI, "document.domain; document.domain;")
        assert len(sink.diagnostics[URI]) == 2
        watcher.document_changed(URI, "document.title;")
        assert sink.diagnostics[URI] == []
        assert sink.decorations[URI] == []

    def test_close_clears(self) -> None:
        sink = MemorySink()
        watcher = _watcher(sink)
        watcher.document_opened(URI, "document.domain")
        watcher.document_closed(URI)
        assert sink.diagnostics[URI] == []
        assert sink.decorations[URI] == []

    def test_check_open_documents(self) -> None:
        sink = MemorySink()
        results = _watcher(sink).check_open_documents([
            ("file:///a.js", "document.domain"),
            ("file:///b.js", "nothing"),
        ])
        assert {uri: len(m) for uri, m in results.items()} == {"file:///a.js": 1, "file:///b.js": 0}
        assert set(sink.diagnostics) == {"file:///a.js", "file:///b.js"}

    def test_diagnostic_to_dict(self) -> None:
        sink = MemorySink()
        _watcher(sink).check(URI, "document.domain")
        payload = sink.diagnostics[URI][0].to_dict()
        assert payload["range"] == [0, 15]
        assert payload["start"] == {"line": 0, "character": 0}
        assert payload["end"] == {"line": 0, "character": 15}
        assert payload["source"] == DIAGNOSTIC_SOURCE


class TestFromAcquisition:
    def test_empty_catalog_notifies(self) -> None:
        notices: list[str] = []
        result = AcquisitionResult("132", (), "fetch_failed", detail="HTTP 503")
        watcher = DeprecationWatcher.from_acquisition(result, MemorySink(), notify=notices.append)
        assert notices == [NO_DATA_MESSAGE]
        assert watcher.check(URI, "document.domain") == []

    def test_catalog_present_no_notice(self) -> None:
        notices: list[str] = []
        result = AcquisitionResult("132", CATALOG, "cached", persisted=True)
        watcher = DeprecationWatcher.from_acquisition(result, MemorySink(), notify=notices.append)
        assert notices == []
        assert watcher.catalog == CATALOG
