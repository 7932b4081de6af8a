"""
Settings tests

Tests defaults, environment overrides and immutability of AppSettings.
"""

import pytest
from pydantic import ValidationError

from storyreview.config import AppSettings


class TestAppSettings:
    """Test pydantic-settings configuration"""

    def test_defaults(self, monkeypatch):
        """Default tag table and limits"""
        monkeypatch.delenv("STORYREVIEW_NARRATIVE_TAG", raising=False)
        settings = AppSettings(_env_file=None)

        assert settings.narrative_tag == "gametxt"
        assert settings.directive_tag == "UpdateVariable"
        assert settings.history_tag == "历史记录"
        assert settings.min_narrative_length == 10
        assert settings.json_max_depth == 64
        assert not settings.strict_mode

    def test_environment_override(self, monkeypatch):
        """STORYREVIEW_ variables override defaults"""
        monkeypatch.setenv("STORYREVIEW_NARRATIVE_TAG", "story")
        monkeypatch.setenv("STORYREVIEW_STRICT_MODE", "true")
        settings = AppSettings(_env_file=None)

        assert settings.narrative_tag == "story"
        assert settings.strict_mode

    def test_frozen(self):
        """Settings cannot be changed after construction"""
        settings = AppSettings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.strict_mode = True

    def test_preview_make(self):
        """Previews are cut at preview_length"""
        settings = AppSettings(_env_file=None, preview_length=4)
        assert settings.preview_make("abcdefg") == "abcd..."
        assert settings.preview_make("abc") == "abc"
