"""Cache-first catalog acquisition.

Pipeline for a version id that has no valid cached catalog::

    fetch(url) -> extract(html) -> infer(prompt) -> parse -> store.save

Every failure along the way is logged and turned into an empty catalog, so
callers always get a usable (possibly empty) catalog. Empty results are not
persisted; the next run tries again.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from depwatch.catalog_store import CatalogStore
from depwatch.errors import FetchError, NoModelAvailable
from depwatch.html_utils import extract_sections, render_sections
from depwatch.inference import InferFn, build_prompt, infer_with_retry
from depwatch.record_parser import parse_records
from depwatch.records import Catalog, Section

log = logging.getLogger(__name__)

type FetchFn = Callable[[str], str]
type ExtractFn = Callable[[str], list[Section]]

AcquisitionStatus = Literal[
    "cached",            # valid entry found in the catalog store
    "acquired",          # fetched, parsed, non-empty
    "empty",             # pipeline ran but produced no records
    "fetch_failed",
    "no_model",
    "extract_failed",
    "inference_failed",
]


@dataclass(frozen=True, slots=True)
class AcquisitionResult:
    version_id: str
    catalog: Catalog
    status: AcquisitionStatus
    persisted: bool = False
    detail: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.catalog)


class CatalogAcquirer:
    """Obtain the catalog for a version id, at most once per instance.

    Args:
        store: Catalog cache consulted first and written on success.
        fetch: ``url -> html``; raises :class:`FetchError` on failure.
        infer: ``prompt -> text``; may raise :class:`NoModelAvailable`.
        extract: ``html -> sections``; defaults to ``h3`` sections.
        infer_attempts: Bounded retry count for *infer*.
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        fetch: FetchFn,
        infer: InferFn,
        extract: ExtractFn = extract_sections,
        infer_attempts: int = 1,
    ) -> None:
        self._store = store
        self._fetch = fetch
        self._infer = infer
        self._extract = extract
        self._infer_attempts = infer_attempts
        self._resolved: dict[str, AcquisitionResult] = {}

    def acquire(self, url: str, version_id: str) -> AcquisitionResult:
        """Return the catalog for *version_id*; never raises.

        A cached or freshly acquired non-empty catalog is remembered for the
        lifetime of this acquirer. Failed or empty acquisitions are not, so a
        later call may try again.
        """
        known = self._resolved.get(version_id)
        if known is not None:
            return known

        # An empty cached catalog is not authoritative; try again.
        cached = self._store.get(version_id)
        if cached:
            log.info("Using cached catalog for version %s (%d records)", version_id, len(cached))
            result = AcquisitionResult(version_id, cached, "cached", persisted=True)
            self._resolved[version_id] = result
            return result

        log.info("No valid cached catalog for version %s, acquiring from %s", version_id, url)
        result = self._run_pipeline(url, version_id)
        if result.has_data:
            self._resolved[version_id] = result
        return result

    def _run_pipeline(self, url: str, version_id: str) -> AcquisitionResult:
        try:
            raw_html = self._fetch(url)
        except FetchError as exc:
            log.warning("Fetching %s failed: %s", url, exc)
            return AcquisitionResult(version_id, (), "fetch_failed", detail=str(exc))
        except Exception as exc:
            log.warning("Fetching %s failed unexpectedly: %r", url, exc)
            return AcquisitionResult(version_id, (), "fetch_failed", detail=repr(exc))
        log.info("Fetched HTML length: %d characters", len(raw_html))

        try:
            sections = self._extract(raw_html)
        except Exception as exc:
            log.warning("Section extraction failed: %r", exc)
            return AcquisitionResult(version_id, (), "extract_failed", detail=repr(exc))
        log.info("Extracted %d section(s)", len(sections))
        if not sections:
            return AcquisitionResult(version_id, (), "empty", detail="no sections found")

        prompt = build_prompt(render_sections(sections))
        try:
            response = infer_with_retry(self._infer, prompt, attempts=self._infer_attempts)
        except NoModelAvailable as exc:
            log.warning("No text-generation model available: %s", exc)
            return AcquisitionResult(version_id, (), "no_model", detail=str(exc))
        except Exception as exc:
            log.warning("Inference failed: %s", exc)
            return AcquisitionResult(version_id, (), "inference_failed", detail=str(exc))

        records = tuple(parse_records(response))
        log.info("Model response yielded %d record(s)", len(records))
        if not records:
            return AcquisitionResult(version_id, (), "empty", detail="no records in model response")

        persisted = self._store.save(version_id, records)
        return AcquisitionResult(version_id, records, "acquired", persisted=persisted)
