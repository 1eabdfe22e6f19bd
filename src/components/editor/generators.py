"""
Input generators.

Pure functions mapping (field name, entity, options) to a markup fragment
and the submit name that fragment posts under.

Key behaviors:
- Submit name is the field's external name (its pydantic alias)
- All attribute values and label text are HTML-escaped
- Unknown fields and malformed options raise EditorError subclasses
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from .models import InvalidOptionsError, RenderedField, UnknownFieldError

INPUT_OPTIONS = frozenset({"label", "placeholder", "type", "disabled"})
INPUT_TYPES = frozenset({"text", "hidden", "password", "email"})
CHECKBOX_OPTIONS = frozenset({"label"})
BOOL_CHOICE = "true"


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def external_name(entity: BaseModel, field_name: str) -> str:
    """Resolve the submit/persist name for an entity field."""
    model_fields = type(entity).model_fields
    if field_name not in model_fields:
        raise UnknownFieldError(field_name, type(entity).__name__)
    info = model_fields[field_name]
    return info.serialization_alias or info.alias or field_name


def value_text(value: Any) -> str:
    """Text form of a scalar field value, as a browser would post it back."""
    if value is None:
        return ""
    return str(value)


def _check_options(field_name: str, options: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = sorted(set(options) - allowed)
    if unknown:
        raise InvalidOptionsError(field_name, f"unrecognized option(s) {', '.join(unknown)}")
    for key, value in options.items():
        if not isinstance(value, str):
            raise InvalidOptionsError(field_name, f"option '{key}' must be a string")


def _flag(field_name: str, key: str, raw: str) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise InvalidOptionsError(field_name, f"option '{key}' must be 'true' or 'false'")


def input_view(field_name: str, entity: BaseModel, options: Mapping[str, Any]) -> RenderedField:
    """
    Render a labeled single-value input for one entity field.

    Recognized options: label, placeholder, type (text, hidden, password,
    email) and disabled. A disabled input is visible but carries no name,
    so a browser never submits it.
    """
    _check_options(field_name, options, INPUT_OPTIONS)
    submit_name = external_name(entity, field_name)
    value = getattr(entity, field_name)
    if isinstance(value, (bool, list, tuple, set, dict)):
        raise InvalidOptionsError(field_name, "input fields need a scalar value; use a checkbox")

    input_type = options.get("type", "text")
    if input_type not in INPUT_TYPES:
        raise InvalidOptionsError(field_name, f"unsupported input type '{input_type}'")
    disabled = _flag(field_name, "disabled", options.get("disabled", "false"))

    escaped_name = _escape(submit_name)
    escaped_value = _escape(value_text(value))

    if input_type == "hidden":
        if disabled:
            raise InvalidOptionsError(field_name, "hidden inputs cannot be disabled")
        return RenderedField(
            markup=f'<input type="hidden" name="{escaped_name}" value="{escaped_value}" />\n',
            submit_name=submit_name,
        )

    attrs = [f'id="{escaped_name}"', f'type="{input_type}"']
    if not disabled:
        attrs.append(f'name="{escaped_name}"')
    placeholder = options.get("placeholder")
    if placeholder:
        attrs.append(f'placeholder="{_escape(placeholder)}"')
    attrs.append(f'value="{escaped_value}"')
    if disabled:
        attrs.append("disabled")

    parts = ['<div class="input-field col s12">\n']
    label = options.get("label")
    if label:
        parts.append(f'<label class="active" for="{escaped_name}">{_escape(label)}</label>\n')
    parts.append(f"<input {' '.join(attrs)} />\n")
    parts.append("</div>\n")

    return RenderedField(
        markup="".join(parts),
        submit_name=None if disabled else submit_name,
    )


def checkbox_view(
    field_name: str,
    entity: BaseModel,
    options: Mapping[str, Any],
    choices: Mapping[str, str],
    *,
    reset: bool = False,
) -> RenderedField:
    """
    Render one toggle per choice for a boolean or list field.

    For a boolean field the only valid choice is "true"; its presence on
    submit means True. For a list field each choice submits its flag value
    under the field's submit name. With ``reset`` every toggle renders
    unchecked regardless of the entity's value.
    """
    _check_options(field_name, options, CHECKBOX_OPTIONS)
    submit_name = external_name(entity, field_name)
    value = getattr(entity, field_name)

    if not choices:
        raise InvalidOptionsError(field_name, "checkbox needs at least one choice")
    for flag, text in choices.items():
        if not isinstance(flag, str) or not isinstance(text, str):
            raise InvalidOptionsError(field_name, "checkbox choices must map strings to strings")

    if isinstance(value, bool):
        if list(choices) != [BOOL_CHOICE]:
            raise InvalidOptionsError(
                field_name, f"boolean checkbox takes exactly one choice, '{BOOL_CHOICE}'"
            )
        checked = {BOOL_CHOICE} if value else set()
    elif isinstance(value, list):
        checked = {str(item) for item in value}
    else:
        raise InvalidOptionsError(field_name, "checkbox fields must be boolean or list-valued")

    if reset:
        checked = set()

    escaped_name = _escape(submit_name)
    parts = ['<div class="input-field col s12">\n']
    label = options.get("label")
    if label:
        parts.append(f'<label class="active">{_escape(label)}</label>\n')
    for flag, text in choices.items():
        input_id = _escape(f"{submit_name}-{flag}")
        attrs = [
            f'id="{input_id}"',
            'type="checkbox"',
            f'name="{escaped_name}"',
            f'value="{_escape(flag)}"',
        ]
        if flag in checked:
            attrs.append("checked")
        parts.append(
            f"<p><input {' '.join(attrs)} />"
            f'<label for="{input_id}">{_escape(text)}</label></p>\n'
        )
    parts.append("</div>\n")

    return RenderedField(markup="".join(parts), submit_name=submit_name)
