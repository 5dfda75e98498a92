"""Settings model for the notes sync tool."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(BaseSettings):
    """Tool configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Local side
    notes_dir: Path | None = Field(
        default=None, description="Directory holding the markdown notes"
    )

    # Remote store
    remote_url: str = Field(
        default="http://127.0.0.1:8080/api", description="Base URL of the notes API"
    )
    remote_token: str | None = Field(default=None, description="Bearer token for the notes API")
    remote_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    note_url_template: str | None = Field(
        default=None,
        description="URL opened by `note open`; `{id}` is replaced with the note id",
    )

    # Metadata cache for listings
    cache_dir: Path = Field(default=Path("~/.cache/notes-sync"))
    cache_ttl_seconds: float = Field(default=300.0, ge=0)

    # Sync behaviour
    git_check: bool = Field(
        default=True, description="Refuse to sync over uncommitted changes in notes_dir"
    )
    vcs_tool: str = Field(default="lazygit", description="Interactive git tool for reviews")
    commit_message: str = Field(default="notes: snapshot before sync")
    confirm_each: bool = Field(
        default=True, description="Confirm every note creation individually"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path | None = Field(default=None, description="Directory for JSON log files")

    @field_validator("notes_dir", "log_dir", mode="before")
    @classmethod
    def parse_optional_path(cls, v: Any) -> Path | None:
        """Convert string to Path; empty means unset."""
        if v is None or v == "":
            return None
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("cache_dir", mode="after")
    @classmethod
    def expand_cache_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("remote_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}"
            raise ValueError(msg)
        return level

    @field_validator("note_url_template")
    @classmethod
    def check_url_template(cls, v: str | None) -> str | None:
        if v is not None and "{id}" not in v:
            msg = "note_url_template must contain an {id} placeholder"
            raise ValueError(msg)
        return v

    def require_notes_dir(self) -> Path:
        """Return notes_dir, which must be set and be an existing directory.

        Raises:
            ConfigurationError: If notes_dir is unset or not a directory
        """
        if self.notes_dir is None:
            msg = "notes_dir is not configured"
            raise ConfigurationError(
                msg,
                suggestion="Set NOTES_DIR environment variable or notes_dir in config.yaml",
            )
        if not self.notes_dir.is_dir():
            msg = f"notes_dir is not a directory: {self.notes_dir}"
            raise ConfigurationError(
                msg,
                suggestion="Create the directory or point notes_dir at an existing one",
                context={"path": str(self.notes_dir)},
            )
        return self.notes_dir

    def get_cache_file(self) -> Path:
        return self.cache_dir / "notes-metadata.json"

    def get_note_url(self, note_id: str) -> str:
        """URL of a note in the remote store's web interface."""
        if self.note_url_template:
            return self.note_url_template.replace("{id}", note_id)
        return f"{self.remote_url}/notes/{note_id}"
