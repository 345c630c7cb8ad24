"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from taskmanager import __version__
from taskmanager.api import auth, tasks
from taskmanager.api.errors import register_exception_handlers
from taskmanager.config import Settings, get_settings
from taskmanager.logging_config import setup_logging
from taskmanager.services.auth import JoseTokenSigner, PasswordHasher, TokenService
from taskmanager.services.tasks import TaskStore
from taskmanager.services.users import CredentialStore
from taskmanager.storage import DocumentStore, JsonFileDocumentStore, KeyedLocks

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(
        f"Task manager starting (environment={settings.environment}, data_dir={settings.data_dir})"
    )
    yield
    logger.info("Task manager stopped")


def create_app(settings: Settings | None = None, documents: DocumentStore | None = None) -> FastAPI:
    """Build the application with its stores wired onto ``app.state``."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Task Manager API",
        description="Personal task management with per-user JSON storage",
        version=__version__,
        lifespan=lifespan,
    )

    documents = documents or JsonFileDocumentStore(settings.data_dir)
    locks = KeyedLocks(timeout=settings.storage_timeout_seconds)

    app.state.settings = settings
    app.state.credential_store = CredentialStore(
        documents, PasswordHasher(rounds=settings.bcrypt_rounds), locks
    )
    app.state.task_store = TaskStore(documents, locks)
    app.state.token_service = TokenService(
        JoseTokenSigner(settings.jwt_secret, settings.jwt_algorithm),
        expires_in=timedelta(minutes=settings.jwt_expiration_minutes),
    )

    # CORS middleware for development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app, settings)

    # Register routers
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(tasks.router, prefix=settings.api_prefix)

    app.mount("/app", StaticFiles(directory=STATIC_DIR, html=True), name="app")

    @app.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse(url="/app/")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.environment,
            "api_prefix": settings.api_prefix,
        }

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run("taskmanager.main:app", host=settings.host, port=settings.port)
