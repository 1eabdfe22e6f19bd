"""
Admin Configure routes.

Serves the generated system configuration editor and accepts its
submission as a standard form POST.

Key behaviors:
- GET renders the whole editor or fails with an error page (no partial form)
- POST decodes the form; server-owned fields always keep their prior value
- Validation failures return 400 with actionable messages
- A successful save redirects back to the editor (303)
"""

import html
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from src.api.deps import get_config_service
from src.components.editor import EditorError
from src.components.settings import (
    RenderConfigInput,
    SaveConfigInput,
    SystemConfigService,
    ValidationError,
    run_render,
    run_save,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ADMIN_NO_STORE = {"Cache-Control": "no-store"}


# --- HTML Rendering ---


def render_admin_page(title: str, body_content: str) -> str:
    """Wrap an admin fragment in a minimal HTML page."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{html.escape(title)}</title>
</head>
<body>
{body_content}
</body>
</html>"""


def render_errors_html(errors: list[ValidationError]) -> str:
    items = "\n".join(
        f'<li data-field="{html.escape(e.field, quote=True)}" data-code="{html.escape(e.code)}">'
        f"{html.escape(e.message)}</li>"
        for e in errors
    )
    return f'<div class="card-panel red lighten-4">\n<ul class="errors">\n{items}\n</ul>\n</div>\n'


def render_error_page(message: str) -> str:
    return render_admin_page(
        "Error",
        f'<div class="card-panel red lighten-4"><p>{html.escape(message)}</p></div>',
    )


# --- Endpoints ---


@router.get(
    "",
    response_class=HTMLResponse,
    summary="System configuration editor",
)
def configure_page(
    service: SystemConfigService = Depends(get_config_service),
) -> HTMLResponse:
    """Render the configuration editor for the current record."""
    try:
        view = run_render(RenderConfigInput(), service).view
    except EditorError:
        logger.exception("Config editor render failed")
        return HTMLResponse(
            render_error_page("The configuration editor could not be rendered."),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers=ADMIN_NO_STORE,
        )
    return HTMLResponse(
        render_admin_page("System Configuration", view.markup),
        headers=ADMIN_NO_STORE,
    )


@router.post(
    "",
    summary="Save system configuration",
    responses={400: {"description": "Validation errors with actionable messages"}},
)
async def save_configure(
    request: Request,
    service: SystemConfigService = Depends(get_config_service),
) -> Response:
    """Decode the submitted editor form and persist it."""
    form_data = await request.form()
    pairs = [(key, value) for key, value in form_data.multi_items() if isinstance(value, str)]

    result = run_save(SaveConfigInput(pairs=pairs), service)

    if not result.success:
        logger.info("Config save rejected: %s", ", ".join(e.code for e in result.errors))
        body = render_errors_html(result.errors)
        try:
            body += service.render_editor().markup
        except EditorError:
            logger.exception("Config editor render failed")
        return HTMLResponse(
            render_admin_page("System Configuration", body),
            status_code=status.HTTP_400_BAD_REQUEST,
            headers=ADMIN_NO_STORE,
        )

    return RedirectResponse(url=request.url.path, status_code=status.HTTP_303_SEE_OTHER)
