"""
Settings component - System configuration management.

Provides the singleton config read, editor render and save entry points.
"""

from __future__ import annotations

from ._impl import SystemConfigService
from .models import (
    GetConfigInput,
    GetConfigOutput,
    RenderConfigInput,
    RenderConfigOutput,
    SaveConfigInput,
    SaveConfigOutput,
    UpdateConfigInput,
)

# --- Component Entry Points ---


def run_get(inp: GetConfigInput, service: SystemConfigService) -> GetConfigOutput:
    """
    Get the current config.

    Creates and persists defaults on first run.
    """
    return GetConfigOutput(config=service.get())


def run_render(inp: RenderConfigInput, service: SystemConfigService) -> RenderConfigOutput:
    """
    Render the config editor.

    Raises:
        EditorError: if rendering fails; no partial view is produced.
    """
    return RenderConfigOutput(view=service.render_editor())


def run_save(inp: SaveConfigInput, service: SystemConfigService) -> SaveConfigOutput:
    """
    Save a submitted editor form.

    Args:
        inp: Submitted (submit name, value) pairs in posted order.
        service: Config service owning the singleton record.

    Returns:
        SaveConfigOutput with the saved config, or the unchanged config
        and validation errors.
    """
    return service.save_submission(inp.pairs)


def run_update(inp: UpdateConfigInput, service: SystemConfigService) -> SaveConfigOutput:
    """Apply a programmatic update keyed by field name."""
    return service.update(inp.updates)


def run(
    inp: GetConfigInput | RenderConfigInput | SaveConfigInput | UpdateConfigInput,
    service: SystemConfigService,
) -> GetConfigOutput | RenderConfigOutput | SaveConfigOutput:
    """
    Main entry point for the settings component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GetConfigInput):
        return run_get(inp, service)
    elif isinstance(inp, RenderConfigInput):
        return run_render(inp, service)
    elif isinstance(inp, SaveConfigInput):
        return run_save(inp, service)
    elif isinstance(inp, UpdateConfigInput):
        return run_update(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
