"""
Editor component - View composer and submission decoder.

Turns an entity's ordered field descriptor list into one editor document
fragment, and maps submitted form pairs back onto the entity.

Key behaviors:
- Rendering is pure: identical inputs give byte-identical markup
- Descriptor order is preserved exactly, in markup and submit names
- Any generator failure aborts the whole render (no partial output)
- Locked fields render display-only plus a hidden carrier; the decoder
  always keeps their prior value
- Command fields render unchecked and decode into ``commands``, never
  into persisted state
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel

from .generators import checkbox_view, external_name, input_view, value_text
from .models import (
    DecodedSubmission,
    DecodeSubmissionInput,
    EditorField,
    EditorView,
    FieldKind,
    InvalidOptionsError,
    RenderedField,
    RenderEditorInput,
)
from .ports import EditablePort

logger = logging.getLogger(__name__)

FORM_METHODS = frozenset({"post", "get"})

LAYOUT_SCRIPT = """
<script>
document.addEventListener('DOMContentLoaded', function() {
    // keep the save button where the other editors place it
    var form = document.querySelector('form.system-config');
    if (!form) { return; }
    var save = form.querySelector('button[type=submit]');
    if (save) { save.style.float = 'right'; }
});
</script>
"""


# --- Rendering ---


def _render_field(entity: BaseModel, descriptor: EditorField) -> list[RenderedField]:
    if descriptor.kind is FieldKind.RAW:
        return [RenderedField(markup=descriptor.markup)]

    if not descriptor.name:
        raise InvalidOptionsError("<unnamed>", f"{descriptor.kind.value} descriptor needs a field name")

    if descriptor.kind is FieldKind.INPUT:
        if descriptor.locked:
            if "type" in descriptor.options or "disabled" in descriptor.options:
                raise InvalidOptionsError(
                    descriptor.name, "locked inputs set their own type and disabled options"
                )
            display = input_view(descriptor.name, entity, {**descriptor.options, "disabled": "true"})
            carrier = input_view(descriptor.name, entity, {"type": "hidden"})
            return [display, carrier]
        return [input_view(descriptor.name, entity, descriptor.options)]

    if descriptor.locked:
        raise InvalidOptionsError(descriptor.name, "only inputs can be locked")
    if descriptor.is_command and not isinstance(getattr(entity, descriptor.name, None), list):
        raise InvalidOptionsError(descriptor.name, "command fields must be list-valued")
    return [
        checkbox_view(
            descriptor.name,
            entity,
            descriptor.options,
            descriptor.choices,
            reset=descriptor.is_command,
        )
    ]


def _render_fields(entity: BaseModel, fields: Sequence[EditorField]) -> list[RenderedField]:
    return [rendered for descriptor in fields for rendered in _render_field(entity, descriptor)]


def _names_of(rendered: Sequence[RenderedField]) -> tuple[str, ...]:
    return tuple(r.submit_name for r in rendered if r.submit_name is not None)


def _open_chrome(title: str, action: str, method: str) -> str:
    return (
        '<div class="card">\n'
        '<div class="card-content">\n'
        f'<div class="card-title">{html.escape(title)}</div>\n'
        "</div>\n"
        f'<form class="system-config" action="{html.escape(action, quote=True)}" '
        f'method="{method}">\n'
    )


def _close_chrome() -> str:
    return '<button type="submit" class="btn waves-effect waves-light">Save</button>\n</form>\n</div>\n'


def form(
    entity: BaseModel,
    fields: Sequence[EditorField],
    *,
    action: str = "/admin/configure",
    method: str = "post",
    title: str = "System Configuration",
) -> EditorView:
    """
    Compose the editor for ``entity`` from its field descriptors.

    Raises:
        EditorError: if any descriptor fails to render. Nothing is returned
            in that case.
    """
    method = method.lower()
    if method not in FORM_METHODS:
        raise InvalidOptionsError("<form>", f"unsupported form method '{method}'")

    rendered = _render_fields(entity, fields)
    body = "".join(r.markup for r in rendered)

    markup = _open_chrome(title, action, method) + body + _close_chrome() + LAYOUT_SCRIPT
    return EditorView(markup=markup, submit_names=_names_of(rendered))


def submit_names(entity: BaseModel, fields: Sequence[EditorField]) -> tuple[str, ...]:
    """
    Submit names the composed view will carry, in declared order.

    Raises:
        EditorError: for the same descriptors ``form`` rejects.
    """
    return _names_of(_render_fields(entity, fields))


# --- Decoding ---


def decode(
    entity: BaseModel,
    fields: Sequence[EditorField],
    pairs: Iterable[tuple[str, str]],
) -> DecodedSubmission:
    """
    Map submitted (submit name, value) pairs onto the entity's fields.

    Locked fields always keep the entity's current value. Boolean checkboxes
    absent from the submission decode to False; other absent fields keep
    their current value.
    """
    submitted: dict[str, list[str]] = {}
    for key, value in pairs:
        submitted.setdefault(key, []).append(value)

    values: dict[str, Any] = {}
    commands: dict[str, tuple[str, ...]] = {}
    discarded: list[str] = []
    known: set[str] = set()

    for descriptor in fields:
        if descriptor.kind is FieldKind.RAW or not descriptor.name:
            continue
        name = descriptor.name
        submit_name = external_name(entity, name)
        known.add(submit_name)
        current = getattr(entity, name)
        posted = submitted.get(submit_name)

        if descriptor.locked:
            if posted and any(item != value_text(current) for item in posted):
                if name not in discarded:
                    discarded.append(name)
                logger.warning("Discarded submitted value for locked field '%s'", name)
            values[name] = current
            continue

        if descriptor.is_command:
            commands[name] = tuple(flag for flag in descriptor.choices if flag in (posted or ()))
            values[name] = []
            continue

        if descriptor.kind is FieldKind.CHECKBOX:
            if isinstance(current, bool):
                values[name] = "true" in (posted or ())
            else:
                values[name] = [flag for flag in descriptor.choices if flag in (posted or ())]
            continue

        if posted is None:
            values[name] = current
        else:
            values[name] = posted[-1]

    unknown = sorted(set(submitted) - known)
    if unknown:
        logger.debug("Ignoring unknown submit names: %s", ", ".join(unknown))

    return DecodedSubmission(values=values, commands=commands, discarded=tuple(discarded))


def apply_submission(entity: BaseModel, decoded: DecodedSubmission) -> Any:
    """
    Build a new entity with the decoded values applied.

    Raises:
        pydantic.ValidationError: if a submitted value cannot be converted.
    """
    data = entity.model_dump()
    data.update(decoded.values)
    return type(entity).model_validate(data)


# --- Component Entry Points ---


def _declared_fields(entity: EditablePort, fields: Sequence[EditorField] | None) -> Sequence[EditorField]:
    return fields if fields is not None else entity.editor_fields()


def run_render(inp: RenderEditorInput) -> EditorView:
    """Render the editor for ``inp.entity`` using its declared fields by default."""
    fields = _declared_fields(inp.entity, inp.fields)
    return form(inp.entity, fields, action=inp.action, method=inp.method, title=inp.title)


def run_decode(inp: DecodeSubmissionInput) -> DecodedSubmission:
    """Decode a submission for ``inp.entity`` using its declared fields by default."""
    fields = _declared_fields(inp.entity, inp.fields)
    return decode(inp.entity, fields, inp.pairs)
