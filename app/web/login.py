"""Form login and logout."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import create_session_token
from app.schemas.auth import LoginForm
from app.services.authentication import AuthenticationError
from app.web.pages import templates
from app.web.security import SAVED_REQUEST_COOKIE, SecurityConfig, get_security

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    security: Annotated[SecurityConfig, Depends(get_security)],
) -> HTMLResponse:
    """Render the login form, with an error or logged-out notice when flagged in the query."""
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "error": "error" in request.query_params,
            "logout": "logout" in request.query_params,
            "login_path": security.policy.login_path,
        },
    )


@router.post("/login")
def login(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    security: Annotated[SecurityConfig, Depends(get_security)],
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """
    Verify the submitted credentials. On success start a fresh session and
    redirect to the remembered page (or the default); on failure back to the form.
    """
    failure = RedirectResponse(
        f"{security.policy.login_path}?error", status_code=status.HTTP_303_SEE_OTHER
    )
    try:
        form = LoginForm(username=username, password=password)
    except ValidationError:
        logger.info("Login rejected: malformed form submission")
        return failure
    try:
        principal = security.verifier.authenticate(db, form.username, form.password)
    except AuthenticationError:
        return failure

    # A previous session on this client is never reused.
    if request.state.session_id:
        security.sessions.invalidate(request.state.session_id)
    entry = security.sessions.create(principal)
    token = create_session_token(entry.session_id, principal.username, security.settings)

    target = security.policy.safe_redirect_target(request.cookies.get(SAVED_REQUEST_COOKIE))
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=security.settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=security.settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    response.delete_cookie(SAVED_REQUEST_COOKIE, path="/")
    return response


@router.post("/logout")
def logout(
    request: Request,
    security: Annotated[SecurityConfig, Depends(get_security)],
) -> RedirectResponse:
    """Invalidate the session, clear the cookie and return to the login page."""
    if request.state.session_id:
        security.sessions.invalidate(request.state.session_id)
    response = RedirectResponse(
        f"{security.policy.login_path}?logout", status_code=status.HTTP_303_SEE_OTHER
    )
    response.delete_cookie(
        key=security.settings.SESSION_COOKIE_NAME,
        path="/",
        samesite="lax",
        secure=security.settings.SESSION_COOKIE_SECURE,
    )
    return response
