"""
Review profile loader

A profile is a YAML file that overrides the default review configuration
for a particular prompt/model setup:

    tags:
      - name: thinking
        display: reasoning
      - name: story
        required: true
        display: narrative
      - name: UpdateVariable
        display: directives
    narrative_tag: story
    directive_tag: UpdateVariable
    markers: [system, dialogue]      # active marker families
    preserve_markers: false
    min_narrative_length: 20
    strict: true

Every key is optional; anything missing falls back to the settings.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..config import AppSettings, appsettings
from ..models.blocks import DEFAULT_MARKER_FAMILIES, MarkerFamily, SegmenterConfig
from ..models.review import TagSpec
from .log import LOG
from .review import ReviewConfig


class ProfileError(Exception):
    """Raised when profile loading or validation fails"""
    pass


class Profile:
    """
    Represents a review profile loaded from YAML
    """

    def __init__(self, path: str | Path):
        """
        Load a profile file.

        Args:
            path: Path to the profile YAML file

        Raises:
            ProfileError: If the file is missing, unreadable or malformed
        """
        self.path = Path(path)

        if not self.path.exists():
            raise ProfileError(f"Profile not found: {self.path}")

        self.config = self._config_load()

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse the profile YAML"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ProfileError(f"Failed to parse {self.path.name}: {e}")
        except OSError as e:
            raise ProfileError(f"Failed to load {self.path.name}: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ProfileError(f"{self.path.name} must contain a mapping at the top level")
        return config

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the profile.

        Supports nested keys with dot notation:
          profile.config_get('tags', [])

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def tagSpecs_get(self) -> Optional[Tuple[TagSpec, ...]]:
        """Tag table from the profile, or None to keep the default table"""
        entries = self.config_get('tags')
        if entries is None:
            return None
        if not isinstance(entries, list):
            raise ProfileError("'tags' must be a list")

        specs: List[TagSpec] = []
        for entry in entries:
            if isinstance(entry, str):
                specs.append(TagSpec(entry))
                continue
            if not isinstance(entry, dict) or not entry.get('name'):
                raise ProfileError(f"Tag entry needs a 'name': {entry!r}")
            specs.append(TagSpec(
                name=str(entry['name']),
                required=bool(entry.get('required', False)),
                display_name=str(entry.get('display', '')),
            ))
        return tuple(specs)

    def families_get(self) -> Optional[Tuple[MarkerFamily, ...]]:
        """Active marker families, in default priority order"""
        kinds = self.config_get('markers')
        if kinds is None:
            return None
        if not isinstance(kinds, list):
            raise ProfileError("'markers' must be a list")

        known = {family.kind.value: family for family in DEFAULT_MARKER_FAMILIES}
        unknown = [kind for kind in kinds if kind not in known]
        if unknown:
            raise ProfileError(
                f"Unknown marker families {unknown}; choose from {sorted(known)}"
            )
        return tuple(family for family in DEFAULT_MARKER_FAMILIES if family.kind.value in kinds)

    def config_build(self, settings: Optional[AppSettings] = None) -> ReviewConfig:
        """
        Build a review configuration from settings and this profile

        Raises:
            ProfileError: If a key holds a value of the wrong shape
        """
        base = ReviewConfig.settings_build(settings or appsettings)

        tag_specs = self.tagSpecs_get() or base.tag_specs
        families = self.families_get()
        segmenter: SegmenterConfig = base.segmenter
        if families is not None:
            segmenter = replace(segmenter, families=families)
        if 'preserve_markers' in self.config:
            segmenter = replace(segmenter, preserve_markers=bool(self.config['preserve_markers']))

        try:
            min_length = int(self.config_get('min_narrative_length', base.min_narrative_length))
        except (TypeError, ValueError) as e:
            raise ProfileError(f"'min_narrative_length' must be an integer: {e}")

        config = ReviewConfig(
            tag_specs=tag_specs,
            narrative_tag=str(self.config_get('narrative_tag', base.narrative_tag)),
            directive_tag=str(self.config_get('directive_tag', base.directive_tag)),
            min_narrative_length=min_length,
            strict_mode=bool(self.config_get('strict', base.strict_mode)),
            segmenter=segmenter,
        )
        LOG(f"Profile {self.path.name}: {len(config.tag_specs)} tags, "
            f"{len(config.segmenter.families)} marker families", level=2)
        return config

    def __repr__(self) -> str:
        return f"Profile(path='{self.path}')"
