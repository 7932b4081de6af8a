"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use STORYREVIEW_ prefix (e.g., STORYREVIEW_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.

The settings object is frozen: it is built once at import time and shared
by reference, so concurrent reviews never observe a configuration change.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use STORYREVIEW_ prefix.

    Examples:
        STORYREVIEW_NARRATIVE_TAG=story
        STORYREVIEW_MIN_NARRATIVE_LENGTH=20
        STORYREVIEW_STRICT_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="STORYREVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Tag configuration
    reasoning_tag: str = Field(
        default="thinking",
        description="Optional tag wrapping the model's reasoning",
    )

    narrative_tag: str = Field(
        default="gametxt",
        description="Required tag wrapping the narrative (game text)",
    )

    history_tag: str = Field(
        default="历史记录",
        description="Optional tag wrapping the structured history record",
    )

    directive_tag: str = Field(
        default="UpdateVariable",
        description="Optional tag wrapping variable update directives",
    )

    # Review configuration
    min_narrative_length: int = Field(
        default=10,
        description="Narrative content shorter than this produces an info issue",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat warnings as errors when deciding 'passed'",
    )

    # Parser configuration
    json_max_depth: int = Field(
        default=64,
        description="Maximum {}/[] nesting accepted by the JSON decoder",
    )

    preview_length: int = Field(
        default=50,
        description="Characters of an unparsable statement quoted in its warning",
    )

    # Segmentation / rendering configuration
    preserve_markers: bool = Field(
        default=False,
        description="Keep marker characters (「」【】*) in block display content",
    )

    escape_html: bool = Field(
        default=True,
        description="HTML-escape block content when rendering HTML reports",
    )

    pygments_style: str = Field(
        default="monokai",
        description="Pygments style used to highlight directives in HTML reports",
    )

    def preview_make(self, text: str) -> str:
        """
        Shorten a source fragment for use inside a warning message.

        Args:
            text: Fragment to shorten

        Returns:
            At most preview_length characters, with '...' appended if cut

        Example:
            >>> settings = AppSettings(preview_length=4)
            >>> settings.preview_make('abcdefg')
            'abcd...'
        """
        if len(text) <= self.preview_length:
            return text
        return text[: self.preview_length] + "..."


# Singleton instance - import this in your code (read-only, model is frozen)
appsettings = AppSettings()
