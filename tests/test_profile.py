"""
Review profile tests

Tests loading YAML profiles and building review configurations from them.
"""

import pytest

from storyreview.config import AppSettings
from storyreview.lib.profile import Profile, ProfileError
from storyreview.lib.review import ResponseReviewer
from storyreview.models.blocks import ContentBlockType


PROFILE_YAML = """
tags:
  - name: thinking
    display: reasoning
  - name: story
    required: true
    display: narrative
  - cmd
narrative_tag: story
directive_tag: cmd
markers: [system, dialogue]
preserve_markers: true
min_narrative_length: 3
strict: true
"""


@pytest.fixture
def profile_file(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text(PROFILE_YAML, encoding="utf-8")
    return path


class TestProfileLoading:
    """Test reading profile files"""

    def test_config_get_dot_notation(self, profile_file):
        """Nested keys resolve with dot notation"""
        profile = Profile(profile_file)
        assert profile.config_get("narrative_tag") == "story"
        assert profile.config_get("missing.key", "fallback") == "fallback"

    def test_missing_file(self, tmp_path):
        """A missing profile raises ProfileError"""
        with pytest.raises(ProfileError):
            Profile(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        """Unparsable YAML raises ProfileError"""
        path = tmp_path / "bad.yaml"
        path.write_text("tags: [", encoding="utf-8")
        with pytest.raises(ProfileError):
            Profile(path)

    def test_top_level_list(self, tmp_path):
        """The document must be a mapping"""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ProfileError):
            Profile(path)

    def test_empty_file_keeps_defaults(self, tmp_path):
        """An empty profile changes nothing"""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        config = Profile(path).config_build(AppSettings())

        assert config.narrative_tag == "gametxt"
        assert len(config.tag_specs) == 4
        assert len(config.segmenter.families) == 4


class TestConfigBuild:
    """Test building a review configuration"""

    def test_overrides(self, profile_file):
        """Every profile key is applied"""
        config = Profile(profile_file).config_build(AppSettings())

        assert [spec.name for spec in config.tag_specs] == ["thinking", "story", "cmd"]
        assert config.tag_specs[1].required
        assert config.tag_specs[1].label == "narrative"
        assert config.tag_specs[2].label == "cmd"
        assert config.narrative_tag == "story"
        assert config.directive_tag == "cmd"
        assert config.min_narrative_length == 3
        assert config.strict_mode
        assert config.segmenter.preserve_markers
        assert [f.kind for f in config.segmenter.families] == [ContentBlockType.SYSTEM, ContentBlockType.DIALOGUE]

    def test_profile_drives_review(self, profile_file):
        """A reviewer built from a profile uses its tags"""
        reviewer = ResponseReviewer(config=Profile(profile_file).config_build(AppSettings()))
        result = reviewer.review("<story>「走吧」*累*</story><cmd>hp = 1</cmd>", with_blocks=True)

        assert result.passed
        assert result.commands[0].path == "hp"
        assert [b.kind for b in result.blocks] == [ContentBlockType.DIALOGUE, ContentBlockType.TEXT]
        assert result.blocks[0].display_content == "「走吧」"

    def test_unknown_marker(self, tmp_path):
        """Unknown marker families are rejected"""
        path = tmp_path / "bad.yaml"
        path.write_text("markers: [sparkles]\n", encoding="utf-8")
        with pytest.raises(ProfileError):
            Profile(path).config_build(AppSettings())

    def test_tag_without_name(self, tmp_path):
        """Tag entries need a name"""
        path = tmp_path / "bad.yaml"
        path.write_text("tags:\n  - required: true\n", encoding="utf-8")
        with pytest.raises(ProfileError):
            Profile(path).config_build(AppSettings())
