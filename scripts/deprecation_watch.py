#!/usr/bin/env python3
"""Acquire a deprecation catalog and scan files for deprecated API usage.

The catalog for a release-notes version is loaded from the local cache when
present; otherwise the release notes are fetched, split into ``<h3>``
sections, summarized by the model into records, and cached.

Usage::

    python3 scripts/deprecation_watch.py fetch [--url URL]
    python3 scripts/deprecation_watch.py scan src/app.js src/page.html
    python3 scripts/deprecation_watch.py --catalog catalog.json scan --fail-on-match src/*.js
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from functools import partial
from pathlib import Path
from typing import Any

import orjson

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from depwatch.acquirer import AcquisitionResult, CatalogAcquirer
from depwatch.catalog_store import CatalogStore
from depwatch.errors import CorruptCatalog
from depwatch.fetch import fetch_text
from depwatch.html_utils import extract_sections
from depwatch.inference import AnthropicInference
from depwatch.io_utils import dump_json_bytes, load_json
from depwatch.records import catalog_from_json
from depwatch.settings import Settings, load_settings, version_from_url
from depwatch.watcher import DeprecationWatcher, MemorySink

log = logging.getLogger("deprecation_watch")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(dump_json_bytes(obj))


def _read_text(path: Path) -> str:
    return path.read_bytes().decode("utf-8", errors="replace")


def _load_catalog_file(path: Path) -> AcquisitionResult:
    try:
        catalog = catalog_from_json(load_json(path))
    except (orjson.JSONDecodeError, ValueError) as exc:
        raise CorruptCatalog(path, str(exc)) from exc
    return AcquisitionResult(path.stem, catalog, "cached", persisted=True)


def _acquire(settings: Settings) -> AcquisitionResult:
    acquirer = CatalogAcquirer(
        CatalogStore(settings.storage_dir),
        fetch=partial(fetch_text, timeout=settings.fetch_timeout),
        infer=AnthropicInference(model=settings.model, max_tokens=settings.max_tokens),
        extract=partial(extract_sections, heading_tag=settings.heading_tag),
        infer_attempts=settings.infer_attempts,
    )
    return acquirer.acquire(settings.release_notes_url, settings.version_id)


def _summary(result: AcquisitionResult) -> dict[str, Any]:
    return {
        "version_id": result.version_id,
        "status": result.status,
        "persisted": result.persisted,
        "detail": result.detail,
        "n_records": len(result.catalog),
    }


def cmd_fetch(result: AcquisitionResult, args: argparse.Namespace) -> int:
    payload = _summary(result)
    payload["records"] = [rec.to_dict() for rec in result.catalog]
    dump_json(payload)
    return 0


def cmd_scan(result: AcquisitionResult, args: argparse.Namespace) -> int:
    sink = MemorySink()
    watcher = DeprecationWatcher.from_acquisition(
        result, sink, notify=lambda msg: log.warning("%s", msg),
    )
    files: list[dict[str, Any]] = []
    total = 0
    for raw_path in args.paths:
        path = Path(raw_path)
        if not path.is_file():
            log.error("Not a file: %s", path)
            files.append({"path": str(path), "error": "not a file"})
            continue
        uri = path.resolve().as_uri()
        matches = watcher.document_opened(uri, _read_text(path))
        total += len(matches)
        files.append({
            "path": str(path),
            "n_matches": len(matches),
            "diagnostics": [d.to_dict() for d in sink.diagnostics[uri]],
        })
    dump_json({"catalog": _summary(result), "n_matches": total, "files": files})
    if args.fail_on_match and total > 0:
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Watch source files for deprecated API usage.")
    parser.add_argument("--url", default=None, help="Release notes URL (default: settings).")
    parser.add_argument("--storage-dir", default=None, help="Catalog cache directory.")
    parser.add_argument(
        "--catalog", default=None,
        help="Use this catalog JSON file instead of acquiring one.",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch_p = sub.add_parser("fetch", help="Acquire (or load cached) catalog and print it.")
    fetch_p.set_defaults(func=cmd_fetch)

    scan_p = sub.add_parser("scan", help="Scan files against the catalog.")
    scan_p.add_argument("paths", nargs="+", help="Files to scan.")
    scan_p.add_argument(
        "--fail-on-match", action="store_true",
        help="Exit with status 1 when any deprecated API is found.",
    )
    scan_p.set_defaults(func=cmd_scan)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    settings = load_settings()
    if args.url:
        settings = replace(settings, release_notes_url=args.url)
    if args.storage_dir:
        settings = replace(settings, storage_dir=Path(args.storage_dir))

    if args.catalog:
        try:
            result = _load_catalog_file(Path(args.catalog))
        except (CorruptCatalog, OSError) as exc:
            log.error("Cannot load catalog file: %s", exc)
            return 2
    else:
        log.info("Release notes %s (version %s)", settings.release_notes_url,
                 version_from_url(settings.release_notes_url))
        result = _acquire(settings)
    return args.func(result, args)


if __name__ == "__main__":
    sys.exit(main())
