"""Durable per-version cache of deprecation catalogs.

One JSON file per version identifier::

    <storage_dir>/chromeReleaseNotes_<version>.json

Each file holds the pretty-printed array of ``{apiName, changeType,
description}`` objects. A file that exists but fails to decode or validate is
reported as :class:`CorruptCatalog`; callers treat that the same as a miss.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import orjson

from depwatch.errors import CatalogNotFound, CorruptCatalog
from depwatch.io_utils import load_json, save_json
from depwatch.records import Catalog, DeprecationRecord, catalog_from_json, catalog_to_json

log = logging.getLogger(__name__)

FILENAME_TEMPLATE = "chromeReleaseNotes_{version}.json"

# Path separators and other odd characters never reach the file system.
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")


def catalog_filename(version_id: str) -> str:
    """Deterministic cache file name for *version_id*."""
    safe = _UNSAFE_CHARS_RE.sub("_", version_id) or "unknown"
    return FILENAME_TEMPLATE.format(version=safe)


class CatalogStore:
    """File-backed catalog cache rooted at *storage_dir*."""

    def __init__(self, storage_dir: Path) -> None:
        self._storage_dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def path_for(self, version_id: str) -> Path:
        return self._storage_dir / catalog_filename(version_id)

    def load(self, version_id: str) -> Catalog:
        """Read the persisted catalog for *version_id*.

        Raises:
            CatalogNotFound: nothing persisted for this version.
            CorruptCatalog: the file exists but is not a valid catalog.
        """
        path = self.path_for(version_id)
        try:
            payload = load_json(path)
        except FileNotFoundError as exc:
            raise CatalogNotFound(f"no catalog for version {version_id!r}") from exc
        except orjson.JSONDecodeError as exc:
            raise CorruptCatalog(path, f"invalid JSON: {exc}") from exc
        except OSError as exc:
            raise CorruptCatalog(path, f"unreadable: {exc}") from exc

        try:
            catalog = catalog_from_json(payload)
        except ValueError as exc:
            raise CorruptCatalog(path, str(exc)) from exc
        log.info("Loaded %d catalog record(s) from %s", len(catalog), path)
        return catalog

    def get(self, version_id: str) -> Catalog | None:
        """Like :meth:`load`, but ``None`` on a miss or a corrupt entry."""
        try:
            return self.load(version_id)
        except CatalogNotFound:
            return None
        except CorruptCatalog as exc:
            log.warning("Ignoring cached catalog: %s", exc)
            return None

    def save(self, version_id: str, catalog: Sequence[DeprecationRecord]) -> bool:
        """Persist *catalog* for *version_id*.

        Write failures are logged and reported through the return value; the
        caller's in-memory catalog stays usable either way.
        """
        path = self.path_for(version_id)
        try:
            save_json(catalog_to_json(catalog), path)
        except OSError as exc:
            log.warning("Failed to save catalog to %s: %s", path, exc)
            return False
        log.info("Saved %d catalog record(s) to %s", len(catalog), path)
        return True
