"""Tracker options, loaded from ``.bundle-size.yaml`` and the command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .history import DEFAULT_HISTORY_FILE, DEFAULT_MAX_HISTORY
from .scanner import DEFAULT_EXTENSIONS
from .trend import DEFAULT_THRESHOLD

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".bundle-size.yaml"
DEFAULT_REPORT_FILE = "bundle-size-report.json"


class ConfigError(RuntimeError):
    """Raised when the tracker configuration cannot be loaded."""


class TrackerConfig(BaseModel):
    """Options controlling where history lives and when growth is flagged."""

    history_file: Path = Path(DEFAULT_HISTORY_FILE)
    max_history: int = Field(DEFAULT_MAX_HISTORY)
    threshold: float = Field(DEFAULT_THRESHOLD)
    output_json: bool = False
    report_file: str = DEFAULT_REPORT_FILE
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("max_history")
    def _ensure_max_history(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_history must be >= 1")
        return value

    @field_validator("threshold")
    def _ensure_threshold(cls, value: float) -> float:
        if value < 0:
            raise ValueError("threshold must be >= 0")
        return value

    @field_validator("report_file")
    def _ensure_report_file(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("report_file must be a non-empty string")
        return value.strip()

    @field_validator("extensions", mode="before")
    def _normalise_extensions(cls, value: Sequence[str] | str | None) -> Sequence[str]:
        if value is None:
            return DEFAULT_EXTENSIONS
        if isinstance(value, str):
            value = [value]
        normalised: list[str] = []
        for ext in value:
            if not isinstance(ext, str) or not ext.strip().lstrip("."):
                raise ValueError("extensions must contain non-empty strings")
            normalised.append(ext.strip().lstrip("."))
        if not normalised:
            raise ValueError("at least one extension must be tracked")
        return tuple(normalised)

    def resolve_history_file(self, project_root: Path) -> Path:
        path = self.history_file.expanduser()
        if path.is_absolute():
            return path
        return project_root / path

    def with_overrides(self, **overrides: Any) -> "TrackerConfig":
        """Return a validated copy with every non-``None`` override applied."""

        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        try:
            return TrackerConfig.model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise ConfigError(_format_validation_error(exc)) from exc


def _format_location(location: Sequence[object]) -> str:
    return ".".join(str(part) for part in location if part is not None)


def _format_validation_error(exc: ValidationError) -> str:
    details = ", ".join(f"{_format_location(err['loc'])}: {err['msg']}" for err in exc.errors())
    return f"Invalid bundle size configuration: {details}"


def load_config(path: Path, *, required: bool = False) -> TrackerConfig:
    """Parse the YAML file at ``path`` into a :class:`TrackerConfig`.

    A missing file yields the defaults unless ``required`` is set.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        if required:
            raise ConfigError(f"Configuration file not found: {path}") from exc
        LOGGER.debug("No configuration at %s; using defaults", path)
        return TrackerConfig()
    try:
        loaded = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration YAML: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration at {path} must be a mapping, got {type(loaded).__name__}")
    try:
        return TrackerConfig.model_validate(loaded)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_REPORT_FILE",
    "TrackerConfig",
    "load_config",
]
