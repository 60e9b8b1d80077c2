"""
Balagh Reports Hub - FastAPI Application Entry Point

Citizen issue reports (roads, power, water, ...) are submitted with location
and photos, triaged by admins through a status workflow, and summarized on
dashboards.

DESIGN PRINCIPLES:
- Intake never fails because an address could not be resolved
- Admin status changes never fail because WhatsApp could not be reached
- Statistics are computed from the store on request, never cached
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.container import Services, build_services
from app.core.settings import settings
from app.routes import admin, health, reports, stats, users
from app.routes import settings as settings_routes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the application. When services is None the container is built from
    settings at startup.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Citizen issue reports: intake, admin triage and dashboard statistics",
        debug=settings.DEBUG
    )
    app.state.services = services

    # Global exception handler to catch ALL exceptions
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        logger.error(f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"}
        )

    # Pydantic validation error handler
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Catch Pydantic validation errors and log them."""
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_errors(exc)}
        )

    # CORS - only the configured dashboard origins, never "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """
        Initialize services on application startup.
        Currently: Firestore / Storage clients and the service container
        """
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        if app.state.services is None:
            app.state.services = build_services(settings)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {settings.APP_NAME}")

    app.include_router(health.router)
    app.include_router(reports.router)
    app.include_router(admin.router)
    app.include_router(stats.router)
    app.include_router(settings_routes.router)
    app.include_router(users.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }

    return app


def jsonable_errors(exc: RequestValidationError):
    # ctx may carry the raw exception object, which is not JSON serializable
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


app = create_app()
