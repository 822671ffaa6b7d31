from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskauthz.db.init_db import init_db
from taskauthz.logging_config import configure_app_logging
from taskauthz.policy import AppError, PolicyEvaluator, load_rule_matrix
from taskauthz.routers import attachments, departments, health, organizations, tasks, users
from taskauthz.settings import get_settings

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        # A malformed matrix raises MatrixConfigError here and aborts startup.
        matrix_path = settings.resolved_authorization_matrix_path()
        app.state.evaluator = PolicyEvaluator(load_rule_matrix(matrix_path))
        logger.info("Loaded authorization matrix: %s", matrix_path)
        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Guarded routes resolve the principal through their authorize() dependency.
    app = FastAPI(lifespan=lifespan)
    app.add_exception_handler(AppError, app_error_handler)

    app.include_router(health.router)
    app.include_router(organizations.router)
    app.include_router(departments.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(attachments.router)

    return app


app = create_app()
