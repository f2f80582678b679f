"""Security wiring: explicit config object, session-resolving middleware, principal dependency."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

import jwt
from fastapi import Request, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.access import AccessPolicy
from app.core.config import Settings
from app.core.security import decode_session_token
from app.core.sessions import SessionRegistry
from app.schemas.auth import Principal
from app.services.authentication import CredentialVerifier

logger = logging.getLogger(__name__)

# Remembers the protected page that triggered the login redirect (GET only).
SAVED_REQUEST_COOKIE = "SAVED_REQUEST"
SAVED_REQUEST_MAX_AGE_SEC = 300


class LoginRequired(Exception):
    """Raised when a handler needs a principal and the request has no valid session."""


@dataclass
class SecurityConfig:
    """Everything the request pipeline needs to authenticate and authorize."""

    settings: Settings
    policy: AccessPolicy = field(default_factory=AccessPolicy)
    verifier: CredentialVerifier = field(default_factory=CredentialVerifier)
    sessions: SessionRegistry | None = None

    def __post_init__(self) -> None:
        if self.sessions is None:
            self.sessions = SessionRegistry(
                idle_timeout=timedelta(minutes=self.settings.SESSION_IDLE_TIMEOUT_MINUTES),
                max_age=timedelta(minutes=self.settings.SESSION_MAX_AGE_MINUTES),
            )

    def resolve_session(self, request: Request) -> tuple[str | None, Principal | None]:
        """Return (session_id, principal) for the request's session cookie, or (None, None)."""
        token = request.cookies.get(self.settings.SESSION_COOKIE_NAME)
        if not token:
            return None, None
        try:
            payload = decode_session_token(token, self.settings)
        except jwt.PyJWTError:
            logger.debug("Ignoring invalid session cookie")
            return None, None
        entry = self.sessions.get(str(payload["sid"]))
        if entry is None or entry.principal.username != payload["sub"]:
            return None, None
        return entry.session_id, entry.principal

    def login_redirect(self, request: Request) -> RedirectResponse:
        response = RedirectResponse(self.policy.login_path, status_code=status.HTTP_302_FOUND)
        if request.method == "GET":
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            response.set_cookie(
                key=SAVED_REQUEST_COOKIE,
                value=target,
                max_age=SAVED_REQUEST_MAX_AGE_SEC,
                httponly=True,
                secure=self.settings.SESSION_COOKIE_SECURE,
                samesite="lax",
                path="/",
            )
        return response


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """
    Attach the session principal to request.state and enforce the access policy.

    Unauthenticated requests to protected paths are redirected to the login page.
    """

    def __init__(self, app, security: SecurityConfig) -> None:
        super().__init__(app)
        self.security = security

    async def dispatch(self, request: Request, call_next) -> Response:
        session_id, principal = self.security.resolve_session(request)
        request.state.session_id = session_id
        request.state.principal = principal

        path = request.url.path
        if principal is None and self.security.policy.requires_authentication(path):
            logger.debug("Unauthenticated request to protected path %s", path)
            return self.security.login_redirect(request)
        return await call_next(request)


def get_security(request: Request) -> SecurityConfig:
    """Dependency: the SecurityConfig installed on the application."""
    return request.app.state.security


def get_optional_principal(request: Request) -> Principal | None:
    """Dependency: the session principal, or None for anonymous requests."""
    return getattr(request.state, "principal", None)


def require_principal(request: Request) -> Principal:
    """Dependency: the session principal. Raises LoginRequired for anonymous requests."""
    principal = get_optional_principal(request)
    if principal is None:
        raise LoginRequired()
    return principal


def login_required_handler(request: Request, exc: LoginRequired) -> Response:
    return get_security(request).login_redirect(request)
