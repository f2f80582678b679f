"""HTML pages: public home page and the protected greeting page."""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas.auth import Principal
from app.web.security import get_optional_principal, require_principal

APP_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = APP_DIR / "templates"
STATIC_DIR = APP_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
@router.get("/home", response_class=HTMLResponse)
def home(
    request: Request,
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
) -> HTMLResponse:
    """Public landing page."""
    return templates.TemplateResponse(request, "home.html", {"principal": principal})


@router.get("/hello", response_class=HTMLResponse)
def hello(
    request: Request,
    principal: Annotated[Principal, Depends(require_principal)],
) -> HTMLResponse:
    """Greeting page; only reachable with a valid session."""
    return templates.TemplateResponse(
        request,
        "hello.html",
        {"principal": principal, "authorities": sorted(principal.authorities)},
    )
