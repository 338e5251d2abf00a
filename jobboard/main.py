"""
Job Board - Main Application

FastAPI backend with:
- Supabase Postgres for structured data (row level security per caller)
- Supabase Auth sessions (cookies or bearer token)
- Supabase Storage for uploaded resume files
- OpenAI for cover letters, resume help and matching

Run: uvicorn jobboard.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard import __version__
from jobboard.api.routes import api_router
from jobboard.core.auth import SessionManager
from jobboard.core.config import Settings, get_settings
from jobboard.core.errors import register_exception_handlers
from jobboard.core.gate import register_route_gate
from jobboard.core.logging import init_logging
from jobboard.db.postgres import Database
from jobboard.services.auth_client import SupabaseAuthClient
from jobboard.services.openai_client import CompletionClient
from jobboard.services.storage_service import SupabaseStorageClient

log = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    ai_client: Optional[CompletionClient] = None,
    auth_client: Optional[SupabaseAuthClient] = None,
    storage_client: Optional[SupabaseStorageClient] = None
) -> FastAPI:
    """
    Build the application.

    Client handles that are passed in are used as they are; the rest are
    built from settings at start-up and closed at shutdown.
    """
    settings = settings or get_settings()
    init_logging(settings.log_level)

    app = FastAPI(
        title="Job Board",
        description="""
    Job board backend for individuals and companies.

    ## Features
    - **Jobs**: Public listing, company posting with DRAFT -> PUBLISHED -> CLOSED lifecycle
    - **Applications**: Apply with a stored resume, company review and status updates
    - **Resumes**: Resume builder documents, DOCX download
    - **Companies**: Company sign-up
    - **AI**: Cover letters, resume enhancement, resume feedback, job and candidate matching
    - **Admin**: Storage bucket, tables, fixture data
    """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.database = database
    app.state.ai_client = ai_client
    app.state.auth_client = auth_client
    app.state.storage_client = storage_client
    owned = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    register_route_gate(app)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        """Build the client handles that were not supplied."""
        state = app.state
        if state.database is None:
            state.database = Database.from_settings(settings)
            owned.append(state.database.dispose)
        if state.ai_client is None:
            state.ai_client = CompletionClient.from_settings(settings)
            owned.append(state.ai_client.close)
        if state.auth_client is None:
            state.auth_client = SupabaseAuthClient.from_settings(settings)
            owned.append(state.auth_client.close)
        if state.storage_client is None:
            state.storage_client = SupabaseStorageClient.from_settings(settings)
            owned.append(state.storage_client.close)
        state.session_manager = SessionManager(settings, state.auth_client)

        if not state.ai_client.configured:
            log.warning("OPENAI_API_KEY is not set; AI endpoints will return errors")
        log.info("Job Board API started")

    @app.on_event("shutdown")
    async def shutdown_event():
        while owned:
            owned.pop()()

    @app.get("/", tags=["Health"])
    async def root():
        return {"status": "healthy", "app": "Job Board", "version": __version__}

    @app.get("/health", tags=["Health"])
    def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "database": "connected" if app.state.database.ping() else "disconnected",
            "ai": "configured" if app.state.ai_client.configured else "not configured",
        }

    return app


app = create_app()
