"""Runtime settings, with ``DEPWATCH_*`` environment overrides."""
from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_RELEASE_NOTES_URL = "https://developer.chrome.com/release-notes/132"
DEFAULT_MODEL = "claude-3-5-haiku-latest"
ENV_PREFIX = "DEPWATCH_"

_VERSION_RE = re.compile(r"release-notes/(\d+)")


def version_from_url(url: str) -> str:
    """Catalog version id for a release-notes URL (``"unknown"`` if absent)."""
    m = _VERSION_RE.search(url)
    return m.group(1) if m else "unknown"


def _default_storage_dir() -> Path:
    return Path.home() / ".depwatch" / "catalogs"


@dataclass(frozen=True)
class Settings:
    release_notes_url: str = DEFAULT_RELEASE_NOTES_URL
    storage_dir: Path = _default_storage_dir()
    heading_tag: str = "h3"
    model: str = DEFAULT_MODEL
    max_tokens: int = 4096
    infer_attempts: int = 2
    fetch_timeout: int = 30

    @property
    def version_id(self) -> str:
        return version_from_url(self.release_notes_url)


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= 1, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    defaults = Settings()
    storage = env.get(ENV_PREFIX + "STORAGE_DIR")
    return Settings(
        release_notes_url=env.get(ENV_PREFIX + "RELEASE_NOTES_URL") or defaults.release_notes_url,
        storage_dir=Path(storage).expanduser() if storage else defaults.storage_dir,
        heading_tag=env.get(ENV_PREFIX + "HEADING_TAG") or defaults.heading_tag,
        model=env.get(ENV_PREFIX + "MODEL") or defaults.model,
        max_tokens=_int_env(env, "MAX_TOKENS", defaults.max_tokens),
        infer_attempts=_int_env(env, "INFER_ATTEMPTS", defaults.infer_attempts),
        fetch_timeout=_int_env(env, "FETCH_TIMEOUT", defaults.fetch_timeout),
    )
