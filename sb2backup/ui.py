from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from sb2backup.api.routes_upload import UPLOAD_FIELD

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

PAGE_TITLE = (
    "Convert Smart Budget 2 internal database to backup file "
    "that can be opened in Smart Budget 2 again"
)


def render_page(request: Request, template_name: str, **context: object) -> HTMLResponse:
    response = templates.TemplateResponse(
        request=request,
        name=template_name,
        context=context,
    )
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; form-action 'self'"
    )
    response.headers["Referrer-Policy"] = "no-referrer"
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


@router.get("/", response_class=HTMLResponse)
@router.get("/index.html", response_class=HTMLResponse)
def ui_index(request: Request) -> HTMLResponse:
    settings = request.app.state.settings
    return render_page(
        request,
        "index.html",
        title=PAGE_TITLE,
        field_name=UPLOAD_FIELD,
        max_upload_mib=settings.max_upload_bytes // (1024 * 1024),
    )
