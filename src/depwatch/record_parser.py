"""Extract deprecation records from a free-form model response.

The model is asked to answer with a fenced block::

    ```json
    [{"apiName": "...", "changeType": "...", "description": "..."}]
    ```

Only the first such block is used. :func:`parse_records` is the fail-open
entry point used by acquisition: it never raises and returns an empty list
when the response is unusable.
"""
from __future__ import annotations

import logging
import re
from typing import Any

import orjson

from depwatch.errors import MalformedRecords, NoStructuredBlock
from depwatch.records import DeprecationRecord

log = logging.getLogger(__name__)

# First ```json ... ``` block, non-greedy so a later block is never swallowed.
_JSON_BLOCK_RE = re.compile(r"```json([\s\S]*?)```")


def extract_json_block(response: str) -> str:
    """Return the contents of the first fenced ``json`` block.

    Raises:
        NoStructuredBlock: no fenced block, or the block is empty.
    """
    match = _JSON_BLOCK_RE.search(response or "")
    if match is None or not match.group(1).strip():
        raise NoStructuredBlock("no ```json block found in model response")
    return match.group(1)


def parse_records_strict(response: str) -> list[DeprecationRecord]:
    """Parse *response* into records, dropping malformed elements.

    Elements that are not objects, lack one of the three string fields, or
    carry a blank ``apiName`` are skipped with a warning; well-formed siblings
    are kept.

    Raises:
        NoStructuredBlock: see :func:`extract_json_block`.
        MalformedRecords: the block is not valid JSON or not an array.
    """
    block = extract_json_block(response)
    try:
        payload: Any = orjson.loads(block)
    except (orjson.JSONDecodeError, RecursionError) as exc:
        raise MalformedRecords(f"invalid JSON in model response: {exc}") from exc
    if not isinstance(payload, list):
        raise MalformedRecords(f"expected a JSON array, got {type(payload).__name__}")

    records: list[DeprecationRecord] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            log.warning("Dropping element %d: not an object", idx)
            continue
        try:
            records.append(DeprecationRecord.from_dict(item))
        except ValueError as exc:
            log.warning("Dropping element %d: %s", idx, exc)
    if len(records) < len(payload):
        log.info("Kept %d of %d element(s) from model response", len(records), len(payload))
    return records


def parse_records(response: str) -> list[DeprecationRecord]:
    """Fail-open variant of :func:`parse_records_strict`."""
    try:
        return parse_records_strict(response)
    except (NoStructuredBlock, MalformedRecords) as exc:
        log.warning("Unusable model response: %s", exc)
    return []
