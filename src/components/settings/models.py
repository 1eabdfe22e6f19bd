"""
Settings component input/output models.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.components.editor import EditorView
from src.domain.entities import SystemConfig


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class GetConfigInput:
    """Input for getting the current config."""

    pass


@dataclass(frozen=True)
class GetConfigOutput:
    """Output from getting the current config."""

    config: SystemConfig


@dataclass(frozen=True)
class RenderConfigInput:
    """Input for rendering the config editor."""

    pass


@dataclass(frozen=True)
class RenderConfigOutput:
    """Output from rendering the config editor."""

    view: EditorView


@dataclass(frozen=True)
class SaveConfigInput:
    """Input for saving a submitted config form."""

    pairs: Sequence[tuple[str, str]]


@dataclass(frozen=True)
class UpdateConfigInput:
    """Input for a programmatic update keyed by field name."""

    updates: dict[str, Any]


@dataclass(frozen=True)
class SaveConfigOutput:
    """Output from saving the config."""

    config: SystemConfig
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
    invalidated: bool = False
    discarded: tuple[str, ...] = ()
