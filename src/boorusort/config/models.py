"""Configuration models describing boorusort settings."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FOLDER_ALIASES = {
    "Explicit": "Adult",
    "Questionable": "Mature",
    "Safe": "Clean",
}


class BooruSortBaseModel(BaseModel):
    """Shared configuration for boorusort Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ApiSettings(BooruSortBaseModel):
    """Remote catalog connection options.

    Attributes:
        base_url: Root URL of the image-board API.
        login: Account name used for HTTP basic auth.
        api_key: API key paired with ``login``.
        user_agent: User-Agent header sent with every request.
        timeout_seconds: Per-request timeout.
    """

    base_url: str = "https://e621.net"
    login: Optional[str] = None
    api_key: Optional[str] = None
    user_agent: str = "boorusort (image folder sorter)"
    timeout_seconds: float = 60.0

    @property
    def has_credentials(self) -> bool:
        """Return True when both login and API key are configured."""
        return bool(self.login) and bool(self.api_key)


class ProcessingOptions(BooruSortBaseModel):
    """Options governing identification of local files.

    Attributes:
        convert: ``False`` never re-encodes images before a reverse search,
            ``True`` always does, and an integer is the size in bytes from
            which re-encoding kicks in.
        reverse_search: Whether to fall back to visual search; ``None`` asks
            interactively.
        batch_size: Number of hashes per bulk lookup request.
        posts_dump: Optional path to a JSON dump of posts loaded at startup.
    """

    convert: Union[bool, int] = True
    reverse_search: Optional[bool] = None
    batch_size: int = Field(default=100, ge=1, le=100)
    posts_dump: Optional[str] = None

    @field_validator("convert")
    @classmethod
    def _non_negative_threshold(cls, value: Union[bool, int]) -> Union[bool, int]:
        if not isinstance(value, bool) and value < 0:
            raise ValueError("convert threshold must be zero or positive")
        return value


class ClassificationOptions(BooruSortBaseModel):
    """Rules that turn post metadata into a destination folder.

    Attributes:
        by_rating: Prefix folders with the post rating.
        by_interaction: Add subject count / gender folders.
        require_all_tags: Tags that must all be present on the post.
        require_one_tag: Tags of which at least one must be present.
    """

    by_rating: bool = False
    by_interaction: bool = False
    require_all_tags: List[str] = Field(default_factory=list)
    require_one_tag: List[str] = Field(default_factory=list)

    @field_validator("require_all_tags", "require_one_tag", mode="before")
    @classmethod
    def _split_tag_string(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value


class OrganizationOptions(BooruSortBaseModel):
    """Settings that govern how files are moved.

    Attributes:
        folder_aliases: Alternate names tried for the first folder segment.
        exists_folder: Quarantine subfolder used when a destination exists.
        write_debug_notes: Write diagnostic ``.txt`` notes next to moved files.
    """

    folder_aliases: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_FOLDER_ALIASES))
    exists_folder: str = "! Exists"
    write_debug_notes: bool = True


class LoggingSettings(BooruSortBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(BooruSortBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class BooruSortConfig(BooruSortBaseModel):
    """Top-level configuration struct for boorusort."""

    api: ApiSettings = Field(default_factory=ApiSettings)
    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    classification: ClassificationOptions = Field(default_factory=ClassificationOptions)
    organization: OrganizationOptions = Field(default_factory=OrganizationOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "BooruSortBaseModel",
    "ApiSettings",
    "ProcessingOptions",
    "ClassificationOptions",
    "OrganizationOptions",
    "LoggingSettings",
    "CLIOptions",
    "BooruSortConfig",
    "DEFAULT_FOLDER_ALIASES",
]
