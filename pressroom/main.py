"""
Pressroom Backend: FastAPI Application Factory
==============================================

What:  Builds and configures the FastAPI application.
How:   `create_app()` constructs the engine, session factory, services and
       external collaborators once and stores them on `app.state`; route
       handlers reach them through pressroom/dependencies.py.
Who:   uvicorn (`uvicorn pressroom.main:app`) and the test suite, which calls
       `create_app(test_settings, storage=..., mailer=..., renderer=...)`.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware:  Request ID → Access Log → GZip → CORS       │
    │                                                           │
    │  Routes:      /signup /login   /posts   /news /news-en    │
    │               /files  /send-email  /screenshot  /health   │
    │                                                           │
    │  app.state:   settings, engine, session_factory,          │
    │               storage, token/auth/post/news/contact       │
    │               services, renderer                          │
    │                                                           │
    │  Exception Handlers:                                      │
    │   400 validation │ 401 auth │ 403 forbidden │ 404 │ 409   │
    │   500 upstream (message passed through) │ 500 database    │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, warn about unsafe configuration, optionally
              create tables.
    Shutdown: dispose the database engine.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pressroom import __version__
from pressroom.config import Settings, settings as default_settings
from pressroom.database import build_engine, build_session_factory, create_all
from pressroom.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    PressroomError,
    UpstreamServiceError,
    ValidationError,
)
from pressroom.middleware.logging import RequestLoggingMiddleware
from pressroom.middleware.request_id import RequestIDMiddleware, request_id_var
from pressroom.routes import auth, contact, files, health, news, posts, screenshot
from pressroom.services.auth_service import AuthService
from pressroom.services.local_storage import LocalFileStorage
from pressroom.services.mail_service import ContactService, Mailer, SMTPMailer
from pressroom.services.news_service import NewsService
from pressroom.services.post_service import PostService
from pressroom.services.s3_storage import S3Storage
from pressroom.services.screenshot_service import PageRenderer, PlaywrightRenderer
from pressroom.services.storage_base import ObjectStorage
from pressroom.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] pressroom.services.news_service: News ... created
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "botocore", "boto3", "aiosmtplib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Pressroom Backend %s starting up...", __version__)

    # Unsafe configuration is reported, not fatal: read-only routes still work
    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("%s", str(e))

    if app_settings.auto_create_tables:
        await create_all(app.state.engine)
        logger.info("Database tables ensured (auto_create_tables=true)")

    logger.info("Image storage backend: %s", app_settings.storage_backend)
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Pressroom Backend shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the PressroomError hierarchy onto HTTP responses.

    Handler table:
        ValidationError, RequestValidationError  → 400 validation_error
        AuthenticationError                      → 401 unauthorized
        ForbiddenError                           → 403 forbidden
        NotFoundError                            → 404 not_found
        ConflictError                            → 409 conflict
        UpstreamServiceError                     → 500 upstream_error (message passed through)
        DatabaseError                            → 500 server_error (generic message)
        PressroomError / Exception               → 500 internal_server_error

    Internal details (SQL, stack traces, file paths) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", exc.message, exc.context))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Missing/blank JSON fields, malformed ids and bodies: 400 like our own validation
        problems = [
            {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), problems)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Invalid or missing fields", {"errors": problems}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return JSONResponse(status_code=403, content=_error_body("forbidden", exc.message, exc.context))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content=_error_body("conflict", exc.message))

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        logger.error("[%s] %s failure: %s", request_id_var.get(""), exc.service, exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("upstream_error", exc.message, {"service": exc.service}),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(PressroomError)
    async def handle_pressroom_error(request: Request, exc: PressroomError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Collaborator Construction
# ══════════════════════════════════════════════════════════════════════════

def build_object_storage(app_settings: Settings) -> ObjectStorage:
    if app_settings.storage_backend == "s3":
        return S3Storage(
            bucket_name=app_settings.s3_bucket,
            region_name=app_settings.s3_region,
            endpoint_url=app_settings.s3_endpoint_url,
            access_key=app_settings.s3_access_key,
            secret_key=app_settings.s3_secret_key,
            public_url=app_settings.s3_public_url,
        )
    return LocalFileStorage(
        storage_root=app_settings.storage_root,
        public_base_url=app_settings.public_base_url,
    )


def build_mailer(app_settings: Settings) -> Mailer:
    return SMTPMailer(
        hostname=app_settings.smtp_host,
        port=app_settings.smtp_port,
        username=app_settings.smtp_username,
        password=app_settings.smtp_password,
        start_tls=app_settings.smtp_start_tls,
        timeout=app_settings.smtp_timeout,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    *,
    storage: Optional[ObjectStorage] = None,
    mailer: Optional[Mailer] = None,
    renderer: Optional[PageRenderer] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        app_settings:  Settings to use; defaults to the environment-loaded singleton
        storage:       Image storage; built from settings.storage_backend when omitted
        mailer:        Contact-form mailer; SMTPMailer from settings when omitted
        renderer:      Screenshot renderer; PlaywrightRenderer when omitted
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Pressroom API",
        description=(
            "Backend for a personal site: accounts, a post feed with likes and dislikes, "
            "Spanish and English news feeds with images, a contact form mailer and "
            "page screenshots."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared State ──────────────────────────────────────────────────────
    engine = build_engine(app_settings)
    storage = storage or build_object_storage(app_settings)
    token_service = TokenService(
        secret=app_settings.jwt_secret,
        algorithm=app_settings.jwt_algorithm,
        ttl_seconds=app_settings.access_token_expire_minutes * 60,
    )

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.storage = storage
    app.state.token_service = token_service
    app.state.auth_service = AuthService(token_service, bcrypt_rounds=app_settings.bcrypt_rounds)
    app.state.post_service = PostService()
    app.state.news_service = NewsService(storage, max_file_size=app_settings.max_file_size)
    app.state.contact_service = ContactService(
        mailer=mailer or build_mailer(app_settings),
        recipient=app_settings.contact_recipient,
        sender=app_settings.smtp_username or app_settings.contact_recipient,
        subject=app_settings.contact_subject,
        max_images=app_settings.max_contact_images,
        max_file_size=app_settings.max_file_size,
    )
    app.state.renderer = renderer or PlaywrightRenderer(timeout_ms=app_settings.screenshot_timeout_ms)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        # Credentialed CORS cannot be combined with a wildcard origin
        allow_credentials="*" not in app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware, slow_request_ms=app_settings.slow_request_ms)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception Handlers ────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(news.router)
    app.include_router(news.english_router)
    app.include_router(files.router)
    app.include_router(contact.router)
    app.include_router(screenshot.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn pressroom.main:app`
app = create_app()
