"""
Editor component models.

Field descriptors, rendered fragments, composed views and decoded
submissions for the declarative field-to-editor mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# --- Errors ---


class EditorError(ValueError):
    """Base error for editor rendering and decoding failures."""


class UnknownFieldError(EditorError):
    """Descriptor names a field the entity does not have."""

    def __init__(self, field_name: str, entity_type: str) -> None:
        self.field_name = field_name
        self.entity_type = entity_type
        super().__init__(f"Unknown field '{field_name}' on {entity_type}")


class InvalidOptionsError(EditorError):
    """Descriptor options or choices are malformed."""

    def __init__(self, field_name: str, message: str) -> None:
        self.field_name = field_name
        super().__init__(f"Invalid options for field '{field_name}': {message}")


# --- Descriptors ---


class FieldKind(str, Enum):
    """Kinds of field descriptor."""

    INPUT = "input"
    CHECKBOX = "checkbox"
    RAW = "raw"


@dataclass(frozen=True)
class EditorField:
    """
    One entry of an entity's ordered field descriptor list.

    Either a generator invocation bound to an entity field (``INPUT`` or
    ``CHECKBOX``) or a literal pre-rendered fragment (``RAW``).

    ``locked`` marks a server-owned field: it is rendered display-only and
    the decoder always keeps the entity's prior value.
    ``is_command`` marks a checkbox list that carries a one-shot command
    rather than persisted state: it is always rendered unchecked and its
    checked flags are returned separately by the decoder.
    """

    kind: FieldKind
    name: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    choices: Mapping[str, str] = field(default_factory=dict)
    markup: str = ""
    locked: bool = False
    is_command: bool = False

    @classmethod
    def input(cls, name: str, **options: Any) -> EditorField:
        return cls(kind=FieldKind.INPUT, name=name, options=options)

    @classmethod
    def locked_input(cls, name: str, **options: Any) -> EditorField:
        return cls(kind=FieldKind.INPUT, name=name, options=options, locked=True)

    @classmethod
    def checkbox(cls, name: str, choices: Mapping[str, str], **options: Any) -> EditorField:
        return cls(kind=FieldKind.CHECKBOX, name=name, options=options, choices=dict(choices))

    @classmethod
    def command(cls, name: str, choices: Mapping[str, str], **options: Any) -> EditorField:
        return cls(
            kind=FieldKind.CHECKBOX,
            name=name,
            options=options,
            choices=dict(choices),
            is_command=True,
        )

    @classmethod
    def raw(cls, markup: str) -> EditorField:
        return cls(kind=FieldKind.RAW, markup=markup)


# --- Outputs ---


@dataclass(frozen=True)
class RenderedField:
    """Markup for one generator invocation and the submit name it uses."""

    markup: str
    submit_name: str | None = None


@dataclass(frozen=True)
class EditorView:
    """Composed editor document fragment."""

    markup: str
    submit_names: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.markup


@dataclass(frozen=True)
class DecodedSubmission:
    """
    Result of mapping submitted form pairs back onto entity fields.

    ``values`` is keyed by entity field name and covers every field in the
    descriptor list. ``commands`` maps command field names to the flags
    checked on this submission. ``discarded`` lists locked fields for which
    the client posted a conflicting value.
    """

    values: dict[str, Any] = field(default_factory=dict)
    commands: dict[str, tuple[str, ...]] = field(default_factory=dict)
    discarded: tuple[str, ...] = ()

    def has_command(self, field_name: str, flag: str) -> bool:
        return flag in self.commands.get(field_name, ())


# --- Entry point inputs ---


@dataclass(frozen=True)
class RenderEditorInput:
    """Input for rendering an entity's editor."""

    entity: Any
    fields: list[EditorField] | None = None
    action: str = "/admin/configure"
    method: str = "post"
    title: str = "System Configuration"


@dataclass(frozen=True)
class DecodeSubmissionInput:
    """Input for decoding a form submission against an entity."""

    entity: Any
    pairs: list[tuple[str, str]]
    fields: list[EditorField] | None = None
