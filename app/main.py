"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.v1 import router as v1_router
from app.core.access import AccessPolicy
from app.core.config import Settings, settings
from app.web import login, pages
from app.web.security import (
    LoginRequired,
    SecurityConfig,
    SessionAuthMiddleware,
    login_required_handler,
)

STATIC_PREFIX = "/static"


def configure_logging(cfg: Settings) -> None:
    logging.basicConfig(
        level=cfg.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def default_policy(cfg: Settings) -> AccessPolicy:
    """Home and root are public, as are login/logout, health and static assets."""
    return AccessPolicy(
        public_prefixes=(f"{cfg.API_V1_PREFIX}/health/", f"{STATIC_PREFIX}/"),
    )


def create_app(
    cfg: Settings = settings,
    security: SecurityConfig | None = None,
) -> FastAPI:
    """Build the application around an explicit SecurityConfig."""
    configure_logging(cfg)
    security = security or SecurityConfig(settings=cfg, policy=default_policy(cfg))

    app = FastAPI(
        title="Gatekeep",
        version="0.1.0",
        docs_url="/docs" if cfg.APP_ENV == "dev" else None,
        redoc_url=None,
    )
    app.state.security = security
    app.add_middleware(SessionAuthMiddleware, security=security)
    app.add_exception_handler(LoginRequired, login_required_handler)

    app.include_router(pages.router, tags=["pages"])
    app.include_router(login.router, tags=["login"])
    app.include_router(v1_router, prefix=cfg.API_V1_PREFIX)
    app.mount(STATIC_PREFIX, StaticFiles(directory=str(pages.STATIC_DIR)), name="static")
    return app


app = create_app()
