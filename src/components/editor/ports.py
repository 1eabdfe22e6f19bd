"""
Editor component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol

from .models import EditorField


class EditablePort(Protocol):
    """An entity that declares its own editor field descriptors."""

    model_fields: dict[str, Any]

    def editor_fields(self) -> list[EditorField]:
        """Ordered field descriptors for the edit surface."""
        ...
