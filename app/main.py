import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ✅ Import All API Routes
from app.api.routes import documents, health, pdf, shares

# ✅ Import Core Services
from app.core import config
from app.core.body_limit import BodySizeLimitMiddleware
from app.core.errors import ServiceError
from app.core.logging_config import setup_logging
from app.core.security import JWTIdentityVerifier
from app.db.session import build_engine
from app.db.store import DocumentStore
from app.pdf.router import get_renderer
from app.services.pdf_export_service import PdfExportService
from app.services.share_service import ShareManager

logger = logging.getLogger(__name__)


def create_app(
    store: DocumentStore = None,
    renderer=None,
    identity_verifier=None,
    stylesheet: str = None,
    share_manager_options: dict = None,
) -> FastAPI:
    """
    Build the API.

    Anything not injected is built from app.core.config when the app starts.
    The renderer is started before the app accepts requests; if it cannot
    start, startup fails.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or DocumentStore(build_engine())
        await app.state.store.create_tables()
        logger.info("Database tables verified")

        app.state.renderer = renderer or get_renderer()
        await app.state.renderer.start()

        app.state.identity_verifier = identity_verifier or JWTIdentityVerifier()
        app.state.share_manager = ShareManager(app.state.store, **(share_manager_options or {}))
        app.state.pdf_service = PdfExportService(
            app.state.renderer,
            stylesheet=stylesheet,
            share_manager=app.state.share_manager,
        )
        logger.info("ResumeForge API ready")
        try:
            yield
        finally:
            logger.info("Shutting down...")
            await app.state.renderer.close()
            await app.state.store.dispose()

    app = FastAPI(title="ResumeForge API", version="1.0.0", lifespan=lifespan)

    # ============================================
    # ✅ CORS: ONLY THE FRONTEND
    # ============================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_middleware(BodySizeLimitMiddleware)

    # ============================================
    # ✅ ERROR HANDLING
    # ============================================

    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", ())[1:]), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request.", "code": "invalid_input", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error.", "code": "internal_error"},
        )

    # ============================================
    # ✅ REGISTER ALL ROUTERS
    # ============================================

    # Share routes first: /api/documents/share/{token} must win over /{document_id}
    app.include_router(shares.router)
    app.include_router(documents.router)
    app.include_router(pdf.router)
    app.include_router(health.router)

    # ============================================
    # ✅ ROOT ENDPOINT
    # ============================================

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the ResumeForge API!",
            "status": "Service is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "documentation": "/docs",
        }

    return app


setup_logging(config.LOG_LEVEL, config.LOG_DIR)
app = create_app()
