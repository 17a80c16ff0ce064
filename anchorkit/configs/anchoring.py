"""
Reanchoring configuration settings.

Thresholds and candidate filters for the anchor resolver, marker
presentation defaults, and change watcher timings. The fuzzy and
context thresholds are tuned independently.

Dependencies: pydantic, pydantic_settings
System role: Matching, rendering and reconciliation tuning
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from anchorkit.configs.base import BaseSettings

DEFAULT_CANDIDATE_TAGS: tuple[str, ...] = (
    "p",
    "div",
    "span",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "article",
    "section",
    "main",
    "aside",
    "li",
    "blockquote",
    "td",
)


class AnchoringSettings(BaseSettings):
    """Anchor resolver thresholds and candidate filtering."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ANCHORKIT_ANCHOR_",
        case_sensitive=False,
        extra="ignore",
    )

    fuzzy_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Similarity a fuzzy match must exceed",
    )
    context_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Similarity a context match must exceed",
    )
    min_length_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum candidate length as a fraction of the original text length",
    )
    min_candidate_text_length: int = Field(
        default=10,
        ge=0,
        description="Candidates must carry more stripped text than this",
    )
    candidate_tags: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATE_TAGS),
        description="Element names scanned for anchors",
    )
    context_window: int = Field(
        default=50,
        ge=0,
        description="Characters captured on each side of a selection",
    )


class MarkerSettings(BaseSettings):
    """Marker wrapper presentation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ANCHORKIT_MARKER_",
        case_sensitive=False,
        extra="ignore",
    )

    marker_attribute: str = Field(
        default="data-ann-id",
        description="Reserved attribute holding the record id on every wrapper",
    )
    highlight_class: str = Field(default="ann-highlight")
    note_class: str = Field(default="ann-note-highlight")
    default_color: str = Field(default="#ffeb3b", description="Highlight colour when none is stored")
    tooltip_length: int = Field(default=50, ge=1, description="Tooltip excerpt length")


class WatcherSettings(BaseSettings):
    """Change watcher timings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ANCHORKIT_WATCHER_",
        case_sensitive=False,
        extra="ignore",
    )

    debounce_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay after the last structural mutation before reconciling",
    )
    interval_seconds: float = Field(
        default=5.0,
        description="Periodic reconciliation interval; zero or negative disables it",
    )
