"""Tests for depwatch.settings module."""
from pathlib import Path

import pytest

from depwatch.settings import DEFAULT_RELEASE_NOTES_URL, Settings, load_settings, version_from_url


class TestVersionFromUrl:
    def test_release_notes_url(self) -> None:
        assert version_from_url("https://developer.chrome.com/release-notes/132") == "132"

    def test_trailing_path(self) -> None:
        assert version_from_url("https://developer.chrome.com/release-notes/131/beta") == "131"

    def test_unknown(self) -> None:
        assert version_from_url("https://example.test/notes") == "unknown"


class TestLoadSettings:
    def test_defaults(self) -> None:
        settings = load_settings({})
        assert settings == Settings()
        assert settings.release_notes_url == DEFAULT_RELEASE_NOTES_URL
        assert settings.version_id == "132"
        assert settings.heading_tag == "h3"

    def test_env_overrides(self, tmp_path: Path) -> None:
        settings = load_settings({
            "DEPWATCH_RELEASE_NOTES_URL": "https://developer.chrome.com/release-notes/140",
            "DEPWATCH_STORAGE_DIR": str(tmp_path),
            "DEPWATCH_HEADING_TAG": "h2",
            "DEPWATCH_MODEL": "some-model",
            "DEPWATCH_MAX_TOKENS": "1000",
            "DEPWATCH_INFER_ATTEMPTS": "4",
            "DEPWATCH_FETCH_TIMEOUT": "9",
        })
        assert settings.version_id == "140"
        assert settings.storage_dir == tmp_path
        assert settings.heading_tag == "h2"
        assert settings.model == "some-model"
        assert settings.max_tokens == 1000
        assert settings.infer_attempts == 4
        assert settings.fetch_timeout == 9

    def test_blank_values_use_defaults(self) -> None:
        settings = load_settings({"DEPWATCH_MODEL": "", "DEPWATCH_MAX_TOKENS": " "})
        assert settings == Settings()

    def test_invalid_integer(self) -> None:
        with pytest.raises(ValueError, match="DEPWATCH_INFER_ATTEMPTS"):
            load_settings({"DEPWATCH_INFER_ATTEMPTS": "lots"})

    def test_non_positive_integer(self) -> None:
        with pytest.raises(ValueError, match="DEPWATCH_FETCH_TIMEOUT"):
            load_settings({"DEPWATCH_FETCH_TIMEOUT": "0"})
