"""
Editor component - Declarative field-to-editor mapping.

Entities declare an ordered list of field descriptors; the composer renders
them into one form fragment and the decoder maps submissions back.
"""

from .component import (
    apply_submission,
    decode,
    form,
    run_decode,
    run_render,
    submit_names,
)
from .generators import checkbox_view, external_name, input_view
from .models import (
    DecodedSubmission,
    DecodeSubmissionInput,
    EditorError,
    EditorField,
    EditorView,
    FieldKind,
    InvalidOptionsError,
    RenderedField,
    RenderEditorInput,
    UnknownFieldError,
)
from .ports import EditablePort

__all__ = [
    # Entry points
    "run_render",
    "run_decode",
    # Composer / decoder
    "form",
    "decode",
    "apply_submission",
    "submit_names",
    # Generators
    "input_view",
    "checkbox_view",
    "external_name",
    # Models
    "EditorField",
    "FieldKind",
    "RenderedField",
    "EditorView",
    "DecodedSubmission",
    "RenderEditorInput",
    "DecodeSubmissionInput",
    # Errors
    "EditorError",
    "UnknownFieldError",
    "InvalidOptionsError",
    # Ports
    "EditablePort",
]
