"""Tests for depwatch.record_parser module."""
import pytest

from depwatch.errors import MalformedRecords, NoStructuredBlock
from depwatch.record_parser import extract_json_block, parse_records, parse_records_strict
from depwatch.records import DeprecationRecord

GOOD_RESPONSE = """Here is what I found:

```json
[
  {"apiName": "navigator.storage", "changeType": "Deprecated", "description": "Use StorageManager."},
  {"apiName": "webkitEnterFullscreen", "changeType": "Removed", "description": "Gone."}
]
```

Let me know if you need anything else."""


class TestExtractJsonBlock:
    def test_finds_block(self) -> None:
        assert extract_json_block("```json\n[1]\n```").strip() == "[1]"

    def test_first_block_only(self) -> None:
        text = "```json\n[1]\n```\nand\n```json\n[2]\n```"
        assert extract_json_block(text).strip() == "[1]"

    def test_no_block(self) -> None:
        with pytest.raises(NoStructuredBlock):
            extract_json_block("No deprecations this release.")

    def test_untagged_fence_ignored(self) -> None:
        with pytest.raises(NoStructuredBlock):
            extract_json_block("```\n[]\n```")

    def test_empty_block(self) -> None:
        with pytest.raises(NoStructuredBlock):
            extract_json_block("```json```")


class TestParseRecordsStrict:
    def test_good_response(self) -> None:
        assert parse_records_strict(GOOD_RESPONSE) == [
            DeprecationRecord("navigator.storage", "Deprecated", "Use StorageManager."),
            DeprecationRecord("webkitEnterFullscreen", "Removed", "Gone."),
        ]

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedRecords):
            parse_records_strict("```json\n[{apiName: oops}]\n```")

    def test_top_level_not_array(self) -> None:
        with pytest.raises(MalformedRecords, match="array"):
            parse_records_strict('```json\n{"apiName": "x"}\n```')

    def test_empty_array(self) -> None:
        assert parse_records_strict("```json\n[]\n```") == []

    def test_malformed_elements_dropped(self) -> None:
        response = """```json
[
  {"apiName": "good", "changeType": "Deprecated", "description": "ok"},
  "just a string",
  {"apiName": "missing-fields"},
  {"apiName": "  ", "changeType": "Removed", "description": ""},
  {"apiName": "num", "changeType": 3, "description": ""},
  {"apiName": "also.good", "changeType": "Changed", "description": ""}
]
```"""
        records = parse_records_strict(response)
        assert [r.api_name for r in records] == ["good", "also.good"]


class TestParseRecords:
    def test_no_block_returns_empty(self) -> None:
        assert parse_records("I could not find any deprecated APIs.") == []

    def test_invalid_json_returns_empty(self) -> None:
        assert parse_records("```json\n[{,]\n```") == []

    def test_empty_response(self) -> None:
        assert parse_records("") == []

    def test_good_response(self) -> None:
        assert len(parse_records(GOOD_RESPONSE)) == 2


class TestHostileResponses:
    def test_deep_nesting_is_malformed(self) -> None:
        response = "```json\n" + "[" * 100_000 + "\n```"
        with pytest.raises(MalformedRecords):
            parse_records_strict(response)

    def test_deep_nesting_fail_open(self) -> None:
        response = "```json\n" + "[" * 100_000 + "]" * 100_000 + "\n```"
        assert parse_records(response) == []
