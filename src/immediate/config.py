from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from immediate.colors import ColorTag

logger = logging.getLogger("immediate.config")


class ConfigError(Exception):
    """Raised when a renderer configuration file cannot be used."""


class _ConfigModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ThresholdEntry(_ConfigModel):
    color: ColorTag
    threshold_ms: int = Field(ge=0)


class PerformanceThresholdTable(_ConfigModel):
    """Elapsed-time colors, most severe first.

    ``select`` walks the entries in declared order and picks the first one
    whose threshold is strictly exceeded, else the last entry.
    """

    entries: tuple[ThresholdEntry, ...] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            return {"entries": data}
        return data

    def select(self, ms: int) -> ColorTag:
        for entry in self.entries:
            if ms > entry.threshold_ms:
                return entry.color
        return self.entries[-1].color


DEFAULT_THRESHOLDS = PerformanceThresholdTable(
    entries=(
        ThresholdEntry(color=ColorTag.HIGH_SEVERITY, threshold_ms=1000),
        ThresholdEntry(color=ColorTag.MEDIUM_SEVERITY, threshold_ms=200),
        ThresholdEntry(color=ColorTag.LOW_SEVERITY, threshold_ms=0),
    )
)


class RendererConfig(_ConfigModel):
    thresholds: PerformanceThresholdTable = DEFAULT_THRESHOLDS
    pass_glyph: str = Field(".", min_length=1, max_length=1)
    pass_color: ColorTag = ColorTag.LOW_SEVERITY_BOLD
    failure_glyph: str = Field("F", min_length=1, max_length=1)
    error_glyph: str = Field("E", min_length=1, max_length=1)
    failure_color: ColorTag = ColorTag.HIGH_SEVERITY_BOLD
    strict: bool = False
    """Raise EventOrderError on out-of-order events instead of ignoring them."""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RendererConfig:
        return cls.model_validate(payload)


def _load_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text())


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text())


def load_config(path: str | Path, **overrides: Any) -> RendererConfig:
    """Load a RendererConfig from a YAML or JSON file.

    Keyword ``overrides`` win over file values (used for CLI flags).
    """
    path = Path(path)
    try:
        if path.suffix in {".yaml", ".yml"}:
            payload = _load_yaml(path)
        else:
            payload = _load_json(path)
    except OSError as exc:
        raise ConfigError(f"Cannot read renderer config {path}: {exc}") from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse renderer config {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Renderer config {path} must be a mapping, got {type(payload).__name__}")

    try:
        config = RendererConfig.from_dict({**payload, **overrides})
    except ValidationError as exc:
        raise ConfigError(f"Invalid renderer config {path}:\n{exc}") from exc

    logger.debug("Loaded renderer config from %s", path)
    return config
