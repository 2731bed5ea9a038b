from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from personnel_requests.authz import NotFound
from personnel_requests.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from personnel_requests.db.init_db import init_db
from personnel_requests.logging_config import configure_app_logging
from personnel_requests.routers import admin, health, reports, requests, users
from personnel_requests.security.config import load_security_config
from personnel_requests.security.dependencies import enforce_security
from personnel_requests.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())
        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Global dependency: authentication and route rules for every handler.
    app = FastAPI(dependencies=[Depends(enforce_security)], lifespan=lifespan)

    @app.exception_handler(NotFound)
    async def not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(requests.router)
    app.include_router(reports.router)
    app.include_router(admin.router)

    return app


app = create_app()
