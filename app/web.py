from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from settings import Settings, get_settings, is_local_origin, resolve_api_base_url


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


router = APIRouter(include_in_schema=False)


@router.get("/", name="dashboard_index", response_class=HTMLResponse)
@router.get("/{path:path}", name="dashboard_fallback", response_class=HTMLResponse)
async def dashboard_index(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    origin = _origin(request)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "api_base_url": resolve_api_base_url(
                origin, settings.dashboard_api_base_url, local_port=settings.port
            ),
            "environment": "local" if is_local_origin(origin) else "production",
        },
    )
