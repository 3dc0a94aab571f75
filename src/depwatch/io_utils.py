"""orjson-backed JSON file helpers for the catalog cache."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file.

    Raises:
        FileNotFoundError: *path* does not exist.
        orjson.JSONDecodeError: contents are not valid JSON.
    """
    return orjson.loads(path.read_bytes())


def dump_json_bytes(obj: Any, *, pretty: bool = True) -> bytes:
    """Serialize with sorted keys; 2-space indent and trailing newline if *pretty*."""
    opts = orjson.OPT_SORT_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE
    return orjson.dumps(obj, option=opts)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed.

    The payload is written to a sibling temp file first and renamed into
    place so a crash mid-write never leaves a truncated cache entry.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_bytes(dump_json_bytes(obj, pretty=pretty))
    tmp.replace(path)
