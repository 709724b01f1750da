"""
Main FastAPI application.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from patternlab.api.v1 import api_router
from patternlab.core.config import Settings, settings as default_settings
from patternlab.db.base import Database
from patternlab.services.content import LessonContentLoader
from patternlab.services.mail import MailService, build_mail_config
from patternlab.services.progress_store import ProgressStoreError

# Configure logging BEFORE creating the app
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()  # Output to console
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create tables on startup and release the connection pool on shutdown.
    """
    logger.info(f"Starting {app.state.settings.PROJECT_NAME}")
    app.state.database.create_all()
    yield
    logger.info(f"Shutting down {app.state.settings.PROJECT_NAME}")
    app.state.database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    mail_service: Optional[MailService] = None,
    content_loader: Optional[LessonContentLoader] = None,
) -> FastAPI:
    """
    Build the application. Collaborators not passed in are built from settings.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Design pattern lessons with progress tracking and quiz history",
        version="0.1.0",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database.from_url(settings.DATABASE_URL)
    app.state.mail_service = mail_service or MailService(build_mail_config(settings))
    app.state.content_loader = content_loader or LessonContentLoader(settings.CONTENT_DIR or None)

    cors_origins = settings.BACKEND_CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if cors_origins == "*" else cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handle validation errors.
        """
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
        )

    @app.exception_handler(ProgressStoreError)
    async def progress_store_exception_handler(request: Request, exc: ProgressStoreError):
        """
        Report store failures as a generic load/save error instead of empty data.
        """
        action = "load" if exc.operation.startswith("get") else "save"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": f"Failed to {action} learning data"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle all unhandled exceptions.
        """
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # Health check endpoints
    @app.get("/", tags=["Health"])
    async def root():
        return {
            "message": f"{settings.PROJECT_NAME} API",
            "status": "healthy",
            "version": "0.1.0",
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy"}

    # Include API routers
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
